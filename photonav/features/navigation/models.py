from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Iterator, Optional, Tuple

from . import settings


class Direction(str, Enum):
    NONE = "none"
    FORWARD = "forward"
    BACKWARD = "backward"


class DiscoveryState(str, Enum):
    LOADING = "loading"
    READY = "ready"
    EMPTY = "empty"
    FAILED = "failed"


def step_path(
    destination: str,
    index: int,
    *,
    root: str = settings.ASSET_ROOT,
    suffix: str = settings.IMAGE_SUFFIX,
) -> str:
    """Logical resource path of one step, e.g. ``photos-navigation/Lab-3/2.png``.

    The destination is embedded as-is; no escaping is applied.
    """
    return f"{root}/{destination}/{index}{suffix}"


@dataclass(frozen=True, slots=True)
class Step:
    index: int
    path: str

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class StepSequence:
    """Gap-free, 1-indexed list of steps discovered for a destination."""

    destination: str
    steps: Tuple[Step, ...] = ()

    def __post_init__(self) -> None:
        for expected, step in enumerate(self.steps, start=settings.FIRST_STEP_INDEX):
            if step.index != expected:
                raise ValueError(
                    f"Step indices must be contiguous from {settings.FIRST_STEP_INDEX}: "
                    f"expected {expected}, got {step.index}"
                )

    def __len__(self) -> int:
        return len(self.steps)

    def __iter__(self) -> Iterator[Step]:
        return iter(self.steps)

    def __getitem__(self, position: int) -> Step:
        return self.steps[position]

    @property
    def is_empty(self) -> bool:
        return not self.steps

    def at(self, position: int) -> Optional[Step]:
        """Step at a 0-based position, or None when out of range."""
        if 0 <= position < len(self.steps):
            return self.steps[position]
        return None


@dataclass(slots=True)
class Cursor:
    position: int = 0
    last_direction: Direction = Direction.NONE
    asset_ready: bool = False
    discovery_state: DiscoveryState = DiscoveryState.LOADING


@dataclass(frozen=True, slots=True)
class CursorSnapshot:
    """Read-only view of a navigation session handed to the presentation layer."""

    session_id: str
    destination: str
    discovery_state: DiscoveryState
    position: int
    total_steps: int
    last_direction: Direction
    asset_ready: bool
    at_destination: bool
    current_step: Optional[Step] = None
    next_step: Optional[Step] = None
    failure: Optional[str] = None
    failure_code: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        return {
            "sessionId": self.session_id,
            "destination": self.destination,
            "state": self.discovery_state.value,
            "position": self.position,
            "totalSteps": self.total_steps,
            "lastDirection": self.last_direction.value,
            "assetReady": self.asset_ready,
            "atDestination": self.at_destination,
            "currentStep": self.current_step.as_dict() if self.current_step else None,
            "nextStep": self.next_step.as_dict() if self.next_step else None,
            "failure": self.failure,
            "failureCode": self.failure_code,
        }
