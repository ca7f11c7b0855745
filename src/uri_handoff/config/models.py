from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from uri_handoff.domain.subscriber_id import is_subscriber_id
from uri_handoff.ports.persistence import StorageScope

# Config models map YAML sections to typed structures; every section is optional.


class RetentionConfig(BaseModel):
    # Buffered URIs older than window_seconds are evicted by the sweep.
    model_config = ConfigDict(extra="forbid")
    window_seconds: float = Field(default=300.0, gt=0)
    sweep_interval_seconds: float = Field(default=30.0, gt=0)


class PromptConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")
    max_length: int = Field(default=40, gt=0)
    head: int = Field(default=30, ge=0)
    tail: int = Field(default=5, ge=0)

    @model_validator(mode="after")
    def _fits(self) -> PromptConfig:
        if self.head + self.tail > self.max_length:
            raise ValueError("prompt.head + prompt.tail must not exceed prompt.max_length")
        return self


class CarryConfig(BaseModel):
    # Key/scope of the single URI carried across a host restart.
    model_config = ConfigDict(extra="forbid")
    key: str = Field(default="uri_handoff.uri_to_handle", min_length=1)
    scope: StorageScope = StorageScope.WORKSPACE


class LogExporterSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")
    path: str = Field(min_length=1)


class LogExporterConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")
    kind: Literal["stdout", "jsonl"]
    settings: LogExporterSettings | None = None

    @model_validator(mode="after")
    def _require_path(self) -> LogExporterConfig:
        # For jsonl kind, a path is required to avoid silent defaults.
        if self.kind == "jsonl" and self.settings is None:
            raise ValueError("logging.exporters[].settings.path is required when kind is 'jsonl'")
        return self


class LoggingConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")
    level: Literal["debug", "info", "warning", "error"] = "info"
    exporters: list[LogExporterConfig] = Field(default_factory=list)

    def exporter_settings(self) -> list[dict[str, object]]:
        return [exporter.model_dump(exclude_none=True) for exporter in self.exporters]


class InstalledSubscriberConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")
    id: str
    name: str
    display_name: str | None = None
    enabled: bool = True

    @field_validator("id")
    @classmethod
    def _valid_id(cls, value: str) -> str:
        if not is_subscriber_id(value):
            raise ValueError(f"invalid subscriber id: {value!r}")
        return value


class InstallablePackageConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")
    id: str
    name: str
    display_name: str | None = None
    version: str | None = None
    fail_install: str | None = None

    @field_validator("id")
    @classmethod
    def _valid_id(cls, value: str) -> str:
        if not is_subscriber_id(value):
            raise ValueError(f"invalid subscriber id: {value!r}")
        return value


class CatalogConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")
    installed: list[InstalledSubscriberConfig] = Field(default_factory=list)
    installable: list[InstallablePackageConfig] = Field(default_factory=list)


class HandoffConfig(BaseModel):
    # Top-level typed view of configuration.
    model_config = ConfigDict(extra="forbid")
    version: int = 1
    retention: RetentionConfig = Field(default_factory=RetentionConfig)
    prompt: PromptConfig = Field(default_factory=PromptConfig)
    carry: CarryConfig = Field(default_factory=CarryConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    catalog: CatalogConfig = Field(default_factory=CatalogConfig)

    @field_validator("version")
    @classmethod
    def _supported_version(cls, value: int) -> int:
        if value != 1:
            raise ValueError("only config version 1 is supported")
        return value
