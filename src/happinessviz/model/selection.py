"""Region selection with the exclusive "World" sentinel."""
from __future__ import annotations

import logging
from typing import Iterable, Sequence

from happinessviz.model.rows import WORLD, Row

logger = logging.getLogger(__name__)


class RegionSelection:
    """
    Set of regions to show.

    ``{World}`` means "no filter". World never shares the set with a specific
    region and the set is never empty.
    """

    def __init__(self, members: Iterable[str] = (WORLD,)) -> None:
        self._members: set[str] = set()
        self.replace(members)

    def __repr__(self) -> str:
        return f"RegionSelection({sorted(self._members)!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, RegionSelection):
            return self._members == other._members
        return NotImplemented

    @property
    def members(self) -> frozenset[str]:
        return frozenset(self._members)

    @property
    def is_world(self) -> bool:
        return WORLD in self._members

    def reset(self) -> None:
        self._members = {WORLD}

    def replace(self, members: Iterable[str]) -> None:
        """Set members wholesale, keeping the World/empty rules."""
        members = set(members)
        if not members or WORLD in members:
            self.reset()
        else:
            self._members = members

    def toggle(self, region: str) -> frozenset[str]:
        if region == WORLD:
            self.reset()
            return self.members

        self._members.discard(WORLD)
        if region in self._members:
            self._members.remove(region)
        else:
            self._members.add(region)

        if not self._members:
            self.reset()
        return self.members

    def is_checked(self, region: str) -> bool:
        if self.is_world:
            return region == WORLD
        return region in self._members

    def validate(self, regions: Sequence[str]) -> bool:
        """Reset to World when a member is not among ``regions``. Returns True on reset."""
        available = set(regions)
        stale = [r for r in self._members if r != WORLD and r not in available]
        if stale:
            logger.info(f"Selection reset to {WORLD}; no longer available: {', '.join(sorted(stale))}")
            self.reset()
            return True
        return False

    def filter(self, rows: Sequence[Row]) -> list[Row]:
        if self.is_world:
            return list(rows)
        return [r for r in rows if r.region in self._members]

    @staticmethod
    def options(regions: Sequence[str]) -> list[str]:
        """Checkbox entries, World always first."""
        seen: set[str] = set()
        ordered = [WORLD]
        for region in regions:
            if region == WORLD or region in seen:
                continue
            seen.add(region)
            ordered.append(region)
        return ordered
