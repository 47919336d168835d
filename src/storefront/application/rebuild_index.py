"""Application service: Rebuild the availability index.

Reloads every product from the store of record.  This is how stock
counts that drifted after a refused post-checkout decrement get
corrected.
"""

from __future__ import annotations

from storefront.domain.service.availability_index import AvailabilityIndex


class RebuildIndexHandler:

    def __init__(self, index: AvailabilityIndex) -> None:
        self._index = index

    def handle(self) -> int:
        return self._index.rebuild()
