"""Step-based progress indicator shown while a conversion runs."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, List, Mapping, Optional, Sequence

STEP_PENDING = "pending"
STEP_ACTIVE = "active"
STEP_COMPLETED = "completed"


@dataclass(frozen=True)
class ProgressStep:
    """One labelled stage of the conversion animation."""

    id: int
    label: str
    icon: str


STEP_ANALYZE = ProgressStep(1, "Analyzing TIBCO BW Source Code", "bot")
STEP_GENERATE = ProgressStep(2, "Generating Spring Boot Code", "zap")
STEP_PREPARE = ProgressStep(3, "Preparing Output for Download", "file-code")
PROGRESS_STEPS: tuple[ProgressStep, ...] = (STEP_ANALYZE, STEP_GENERATE, STEP_PREPARE)

StepHook = Callable[[], Awaitable[None]]


class ProgressTracker:
    """Walks through the conversion steps, pausing ``step_delay`` seconds on each.

    ``current_step`` is the id of the active step (0 when idle). ``percent``
    counts only steps whose delay has fully elapsed, so it reaches 100 after
    the last step finishes and never before.
    """

    def __init__(
        self,
        steps: Sequence[ProgressStep] = PROGRESS_STEPS,
        *,
        step_delay: float = 3.0,
        sleep: Callable[[float], Awaitable[None]] | None = None,
        on_step: Callable[[ProgressStep], None] | None = None,
    ) -> None:
        if not steps:
            raise ValueError("ProgressTracker requires at least one step")
        if step_delay < 0:
            raise ValueError("step_delay must not be negative")
        self.steps: List[ProgressStep] = list(steps)
        self.step_delay = step_delay
        self._sleep = sleep or asyncio.sleep
        self._on_step = on_step
        self.current_step = 0
        self._elapsed = 0

    @property
    def percent(self) -> float:
        value = self._elapsed / len(self.steps) * 100.0
        return max(0.0, min(100.0, value))

    @property
    def is_complete(self) -> bool:
        return self._elapsed >= len(self.steps)

    def state_of(self, step: ProgressStep) -> str:
        if self.current_step > step.id or (self.is_complete and self.current_step == step.id):
            return STEP_COMPLETED
        if self.current_step == step.id:
            return STEP_ACTIVE
        return STEP_PENDING

    def advance(self) -> Optional[ProgressStep]:
        """Activate the next step and return it, or ``None`` when every step is active or done."""
        if self.current_step >= len(self.steps):
            return None
        self.current_step += 1
        return self.steps[self.current_step - 1]

    def reset(self) -> None:
        self.current_step = 0
        self._elapsed = 0

    async def run(self, hooks: Mapping[int, StepHook] | None = None) -> None:
        """Animate every step in order, awaiting the hook registered for a step before its delay.

        A hook that raises stops the animation with that step still active.
        """
        self.reset()
        for step in self.steps:
            self.advance()
            if self._on_step is not None:
                self._on_step(step)
            hook = hooks.get(step.id) if hooks else None
            if hook is not None:
                await hook()
            if self.step_delay:
                await self._sleep(self.step_delay)
            self._elapsed = min(self._elapsed + 1, len(self.steps))

    def snapshot(self) -> List[Dict[str, object]]:
        return [
            {"id": step.id, "label": step.label, "icon": step.icon, "state": self.state_of(step)}
            for step in self.steps
        ]


__all__ = [
    "PROGRESS_STEPS",
    "ProgressStep",
    "ProgressTracker",
    "STEP_ACTIVE",
    "STEP_ANALYZE",
    "STEP_COMPLETED",
    "STEP_GENERATE",
    "STEP_PENDING",
    "STEP_PREPARE",
]
