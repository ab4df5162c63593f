"""Time controller: simulation clock and scheduled interventions."""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

INTERVENTION_ACTIONS = (
    "add_plaque",
    "rupture_plaque",
    "constrict",
    "dilate",
    "set_blood_value",
    "defibrillate",
)


@dataclass
class ScheduledIntervention:
    """An event applied to the patient once simulated time reaches ``time``.

    Attributes:
        time: Simulation time (s) at which to fire
        action: One of ``INTERVENTION_ACTIONS``
        params: Action arguments (e.g. ``vessel``, ``amount``, ``field``, ``value``)
        fired: Whether the intervention has been applied
    """

    time: float
    action: str
    params: dict[str, Any] = field(default_factory=dict)
    fired: bool = False

    def __post_init__(self):
        if self.action not in INTERVENTION_ACTIONS:
            raise ValueError(
                f"Unknown intervention '{self.action}'. Available: {list(INTERVENTION_ACTIONS)}"
            )


class TimeController:
    """Controls time progression and the intervention schedule.

    Attributes:
        time_step: Simulation time step in seconds
    """

    def __init__(self, time_step: float = 0.5):
        """Initialize time controller.

        Args:
            time_step: Simulation time step in seconds
        """
        self.time_step = time_step
        self._current_time = 0.0
        self._paused = False
        self._schedule: list[ScheduledIntervention] = []
        self._on_time_tick: Optional[Callable[[float], None]] = None

    @property
    def current_time(self) -> float:
        return self._current_time

    @property
    def paused(self) -> bool:
        return self._paused

    @property
    def schedule(self) -> list[ScheduledIntervention]:
        return list(self._schedule)

    def set_time(self, time: float) -> None:
        self._current_time = max(0.0, time)

    def pause(self) -> None:
        self._paused = True

    def resume(self) -> None:
        self._paused = False

    def toggle_pause(self) -> bool:
        """Toggle pause state.

        Returns:
            New pause state
        """
        self._paused = not self._paused
        return self._paused

    def tick(self) -> float:
        """Advance time by one step unless paused.

        Returns:
            New current time
        """
        if not self._paused:
            self._current_time += self.time_step
            if self._on_time_tick:
                self._on_time_tick(self._current_time)
        return self._current_time

    def reset(self) -> None:
        """Reset time to zero and re-arm every intervention."""
        self._current_time = 0.0
        for intervention in self._schedule:
            intervention.fired = False

    def schedule_intervention(self, intervention: ScheduledIntervention) -> None:
        self._schedule.append(intervention)
        self._schedule.sort(key=lambda i: i.time)

    def clear_schedule(self) -> None:
        self._schedule.clear()

    def pop_due_interventions(self) -> list[ScheduledIntervention]:
        """Return interventions due at the current time and mark them fired.

        Returns:
            Due interventions in time order
        """
        due = [
            i for i in self._schedule if not i.fired and i.time <= self._current_time
        ]
        for intervention in due:
            intervention.fired = True
            logger.debug(
                "t=%.1fs: firing %s %s", self._current_time, intervention.action, intervention.params
            )
        return due

    def set_time_tick_callback(self, callback: Callable[[float], None]) -> None:
        """Set callback for time ticks.

        Args:
            callback: Function called on each tick with current time
        """
        self._on_time_tick = callback
