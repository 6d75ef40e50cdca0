from __future__ import annotations

import logging
from typing import List

from . import settings
from .assets import AssetSource
from .errors import DestinationMissingError
from .models import Step, StepSequence, step_path

logger = logging.getLogger(__name__)


class SequenceDiscoverer:
    """Finds how many photo steps are published for a destination.

    Step counts are not declared anywhere, so indices ``1, 2, 3, ...`` are
    probed one after the other against the asset source. The next probe is
    only issued once the previous one has resolved, which makes the result
    exactly the contiguous run of existing images starting at 1. A failed
    probe (absent image or transport error) ends the run; ``max_probes``
    (never above ``settings.MAX_PROBES``) bounds it when the store answers
    "exists" forever.
    """

    def __init__(
        self,
        source: AssetSource,
        *,
        max_probes: int = settings.MAX_PROBES,
        asset_root: str = settings.ASSET_ROOT,
        image_suffix: str = settings.IMAGE_SUFFIX,
    ) -> None:
        if not 0 < max_probes <= settings.MAX_PROBES:
            raise ValueError(f"max_probes must be between 1 and {settings.MAX_PROBES}")
        self.source = source
        self.max_probes = max_probes
        self.asset_root = asset_root
        self.image_suffix = image_suffix

    def path_for(self, destination: str, index: int) -> str:
        return step_path(destination, index, root=self.asset_root, suffix=self.image_suffix)

    async def discover(self, destination: str) -> StepSequence:
        if not destination:
            raise DestinationMissingError()

        steps: List[Step] = []
        index = settings.FIRST_STEP_INDEX
        for _ in range(self.max_probes):
            path = self.path_for(destination, index)
            if not await self._probe(path):
                break
            steps.append(Step(index=index, path=path))
            index += 1
        else:
            logger.warning(
                "Discovery for %s stopped at the %d-probe ceiling", destination, self.max_probes
            )

        logger.info("Discovered %d step(s) for %s", len(steps), destination)
        return StepSequence(destination=destination, steps=tuple(steps))

    async def _probe(self, path: str) -> bool:
        try:
            exists = await self.source.exists(path)
        except Exception as exc:  # noqa: BLE001 - any probe failure ends the run
            logger.debug("Probe raised for %s: %s", path, exc)
            return False
        logger.debug("Probe %s -> %s", path, "found" if exists else "absent")
        return bool(exists)
