from .assets import AssetSource, HttpAssetSource, LocalAssetSource
from .discovery import SequenceDiscoverer
from .errors import DestinationMissingError, NavigationError, NoRouteFoundError
from .models import (
    Cursor,
    CursorSnapshot,
    Direction,
    DiscoveryState,
    Step,
    StepSequence,
    step_path,
)
from .prefetch import Prefetcher
from .session import NavigationController, NavigationSession
from .stepper import Stepper

__all__ = [
    "AssetSource",
    "HttpAssetSource",
    "LocalAssetSource",
    "SequenceDiscoverer",
    "NavigationError",
    "DestinationMissingError",
    "NoRouteFoundError",
    "Cursor",
    "CursorSnapshot",
    "Direction",
    "DiscoveryState",
    "Step",
    "StepSequence",
    "step_path",
    "Prefetcher",
    "NavigationController",
    "NavigationSession",
    "Stepper",
]
