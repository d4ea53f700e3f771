import logging
from typing import List

from workspot.services.contracts import SpotFilters, SpotRecord
from workspot.services.geo import within_radius
from workspot.services.stores import SpotStore

logger = logging.getLogger(__name__)


class SpotSearchService:
    """スポット検索。
    - 設備/種別はストア側で絞り込み、その結果に対して距離フィルタを後段で適用する
    - geo 未指定なら距離による除外は行わない
    """

    def __init__(self, spots: SpotStore):
        self._spots = spots

    def find(self, filters: SpotFilters | None = None) -> List[SpotRecord]:
        filters = filters or SpotFilters()
        candidates = self._spots.find(filters)
        if filters.geo is None:
            logger.debug(f"Spot search matched {len(candidates)} spots (no geo filter)")
            return candidates

        inside = within_radius(
            filters.geo.center,
            filters.geo.radius_km,
            ((spot.id, spot.coordinates) for spot in candidates),
        )
        results = [spot for spot in candidates if spot.id in inside]
        logger.debug(
            f"Spot search matched {len(results)}/{len(candidates)} spots "
            f"within {filters.geo.radius_km}km of {tuple(filters.geo.center)}"
        )
        return results
