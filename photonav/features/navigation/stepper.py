from __future__ import annotations

import logging
from typing import Callable, List, Optional

from .models import Cursor, Direction, DiscoveryState, Step, StepSequence

logger = logging.getLogger(__name__)

PositionListener = Callable[[Optional[Step]], None]
ChangeListener = Callable[[], None]


class Stepper:
    """Cursor state machine over a discovered step sequence.

    ``loading`` moves to ``ready`` or ``empty`` when a sequence is loaded and to
    ``failed`` when the destination is missing. Transitions only act in
    ``ready``; ``advance`` at the last position and ``retreat`` at position 0
    are silent no-ops. Every position change reports the step after the new
    position (or None) to ``on_position_change`` for prefetching.
    """

    def __init__(
        self,
        *,
        on_position_change: Optional[PositionListener] = None,
    ) -> None:
        self._cursor = Cursor()
        self._sequence: Optional[StepSequence] = None
        self._failure: Optional[str] = None
        self._failure_code: Optional[str] = None
        self._on_position_change = on_position_change
        self._listeners: List[ChangeListener] = []

    @property
    def cursor(self) -> Cursor:
        return self._cursor

    @property
    def sequence(self) -> Optional[StepSequence]:
        return self._sequence

    @property
    def state(self) -> DiscoveryState:
        return self._cursor.discovery_state

    @property
    def failure(self) -> Optional[str]:
        return self._failure

    @property
    def failure_code(self) -> Optional[str]:
        return self._failure_code

    @property
    def position(self) -> int:
        return self._cursor.position

    @property
    def total_steps(self) -> int:
        return len(self._sequence) if self._sequence is not None else 0

    @property
    def at_destination(self) -> bool:
        return self.state is DiscoveryState.READY and self.position == self.total_steps - 1

    @property
    def current_step(self) -> Optional[Step]:
        if self._sequence is None or self.state is not DiscoveryState.READY:
            return None
        return self._sequence.at(self.position)

    @property
    def next_step(self) -> Optional[Step]:
        if self._sequence is None or self.state is not DiscoveryState.READY:
            return None
        return self._sequence.at(self.position + 1)

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def load(self, sequence: StepSequence) -> None:
        if self.state is not DiscoveryState.LOADING:
            logger.debug("Ignoring sequence load in state %s", self.state.value)
            return
        self._sequence = sequence
        if sequence.is_empty:
            self._cursor.discovery_state = DiscoveryState.EMPTY
            self._notify()
            return
        self._cursor.discovery_state = DiscoveryState.READY
        self._move_to(0, Direction.NONE)

    def fail(self, reason: str, code: Optional[str] = None) -> None:
        if self.state is not DiscoveryState.LOADING:
            return
        self._failure = reason
        self._failure_code = code
        self._cursor.discovery_state = DiscoveryState.FAILED
        self._notify()

    def advance(self) -> bool:
        if self.state is not DiscoveryState.READY or self.at_destination:
            return False
        self._move_to(self.position + 1, Direction.FORWARD)
        return True

    def retreat(self) -> bool:
        if self.state is not DiscoveryState.READY or self.position == 0:
            return False
        self._move_to(self.position - 1, Direction.BACKWARD)
        return True

    def restart(self) -> bool:
        if self.state is not DiscoveryState.READY:
            return False
        self._move_to(0, Direction.NONE)
        return True

    def mark_asset_ready(self) -> bool:
        if self.state is not DiscoveryState.READY:
            return False
        if not self._cursor.asset_ready:
            self._cursor.asset_ready = True
            self._notify()
        return True

    def _move_to(self, position: int, direction: Direction) -> None:
        self._cursor.position = position
        self._cursor.last_direction = direction
        self._cursor.asset_ready = False
        if self._on_position_change is not None:
            self._on_position_change(self.next_step)
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()
