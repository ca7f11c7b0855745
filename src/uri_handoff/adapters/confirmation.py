from __future__ import annotations

import asyncio
import sys
from collections.abc import Callable
from dataclasses import dataclass, field

from uri_handoff.ports.confirmation import ConfirmationService


@dataclass
class StaticConfirmation(ConfirmationService):
    # Answers every prompt the same way; prompts are recorded for inspection.
    answer: bool = True
    prompts: list[tuple[str, str, str]] = field(default_factory=list)

    async def confirm(self, *, message: str, detail: str, primary_label: str) -> bool:
        self.prompts.append((message, detail, primary_label))
        return self.answer


class ConsoleConfirmation(ConfirmationService):
    # Interactive y/N prompt; input is read off the event loop thread.
    def __init__(self, *, input_fn: Callable[[str], str] | None = None) -> None:
        self._input = input_fn or input
        self._lock = asyncio.Lock()

    async def confirm(self, *, message: str, detail: str, primary_label: str) -> bool:
        label = primary_label.replace("&&", "")
        # One prompt on the terminal at a time.
        async with self._lock:
            print(f"{message}\n{detail}", file=sys.stderr)
            try:
                answer = await asyncio.to_thread(self._input, f"{label}? [y/N] ")
            except EOFError:
                return False
        return answer.strip().lower() in {"y", "yes"}
