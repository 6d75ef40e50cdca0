from __future__ import annotations

import time
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Literal, Optional


def _timestamp() -> float:
    return time.time()


@dataclass(slots=True)
class SyncMessage:
    type: Literal["sync"] = "sync"
    state: Dict[str, Any] = field(default_factory=dict)
    timestamp: float = field(default_factory=_timestamp)

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class NavigationMessage:
    """Cursor snapshot pushed after every change; ``session`` is None once left."""

    type: Literal["navigation"] = "navigation"
    session: Optional[Dict[str, Any]] = None
    timestamp: float = field(default_factory=_timestamp)

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class ManifestMessage:
    type: Literal["manifest"] = "manifest"
    categories: List[Dict[str, Any]] = field(default_factory=list)
    expanded: List[str] = field(default_factory=list)
    timestamp: float = field(default_factory=_timestamp)

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class ExplorerMessage:
    type: Literal["explorer"] = "explorer"
    expanded: List[str] = field(default_factory=list)
    timestamp: float = field(default_factory=_timestamp)

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class LookupMessage:
    type: Literal["lookup"] = "lookup"
    student: Dict[str, Any] = field(default_factory=dict)
    destination: str = ""
    timestamp: float = field(default_factory=_timestamp)

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class ErrorMessage:
    type: Literal["error"] = "error"
    code: str = ""
    message: str = ""
    timestamp: float = field(default_factory=_timestamp)

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)
