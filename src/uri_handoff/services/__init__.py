from .activation import (
    ActivationCoordinator,
    ResolutionAction,
    ResolutionOutcome,
    ResolutionState,
    plan_resolution,
)
from .handler_registry import HandlerBinding, HandlerRegistry
from .keyed_locks import KeyedLocks
from .lifecycle import PeriodicTask
from .restart_carry import CARRY_KEY, RestartCarry, decode_carry
from .retention_store import RETENTION_WINDOW_SECONDS, SWEEP_INTERVAL_SECONDS, RetentionStore
from .router import MessageRouter, PromptLimits
from .service import HandoffService

__all__ = [
    "ActivationCoordinator",
    "CARRY_KEY",
    "HandlerBinding",
    "HandlerRegistry",
    "HandoffService",
    "KeyedLocks",
    "MessageRouter",
    "PeriodicTask",
    "PromptLimits",
    "RETENTION_WINDOW_SECONDS",
    "ResolutionAction",
    "ResolutionOutcome",
    "ResolutionState",
    "RestartCarry",
    "RetentionStore",
    "SWEEP_INTERVAL_SECONDS",
    "decode_carry",
    "plan_resolution",
]
