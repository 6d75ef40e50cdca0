from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Set

import pytest


class FakeAssetSource:
    """In-memory asset store: ``routes`` maps destination -> number of published steps."""

    def __init__(
        self,
        routes: Optional[Dict[str, int]] = None,
        *,
        endless: bool = False,
        broken: Iterable[str] = (),
        warm_fails: bool = False,
    ) -> None:
        self.routes = dict(routes or {})
        self.endless = endless
        self.broken: Set[str] = set(broken)
        self.warm_fails = warm_fails
        self.probed: List[str] = []
        self.warmed: List[str] = []
        self.closed = False

    def _published(self, path: str) -> bool:
        _, destination, filename = path.split("/", 2)
        index = int(filename.split(".", 1)[0])
        if self.endless:
            return True
        return index <= self.routes.get(destination, 0)

    async def exists(self, path: str) -> bool:
        self.probed.append(path)
        if path in self.broken:
            raise ConnectionError(f"transport failure for {path}")
        return self._published(path)

    async def warm(self, path: str) -> None:
        self.warmed.append(path)
        if self.warm_fails:
            raise ConnectionError(f"warm failed for {path}")

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def make_source():
    def _make(routes: Optional[Dict[str, int]] = None, **kwargs) -> FakeAssetSource:
        return FakeAssetSource(routes, **kwargs)

    return _make
