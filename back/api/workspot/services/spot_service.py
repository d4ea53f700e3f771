import logging
import uuid
from typing import List

from workspot.errors import NotFoundError, ValidationError
from workspot.services.contracts import SPOT_EDITABLE_FIELDS, NoiseLevel, PriceRange, SpotRecord, SpotType
from workspot.services.geo import validate_coordinates
from workspot.services.locks import KeyedLock
from workspot.services.ownership import ensure_can_mutate
from workspot.services.stores import FavoriteStore, ReviewStore, SpotStore

logger = logging.getLogger(__name__)

REQUIRED_SPOT_FIELDS = ("name", "address", "city", "country", "latitude", "longitude")

_ENUM_FIELDS = {
    "noise_level": NoiseLevel,
    "price_range": PriceRange,
    "spot_type": SpotType,
}


def _normalize(fields: dict) -> dict:
    """列挙値の文字列を Enum に変換する。不正な値は ValidationError。"""
    normalized = dict(fields)
    for name, enum_cls in _ENUM_FIELDS.items():
        if name not in normalized:
            continue
        try:
            normalized[name] = enum_cls(normalized[name])
        except ValueError:
            raise ValidationError(
                f"{name} must be one of {[member.value for member in enum_cls]}",
                details={"field": name},
            )
    return normalized


class SpotService:
    """スポットの作成・参照・所有者による更新/削除。
    - 削除はレビュー書き込みと同じ spot 単位のロック内で行い、レビュー/お気に入りも連鎖削除する
    """

    def __init__(self, spots: SpotStore, reviews: ReviewStore, favorites: FavoriteStore, locks: KeyedLock):
        self._spots = spots
        self._reviews = reviews
        self._favorites = favorites
        self._locks = locks

    def create(self, owner_id: str, fields: dict) -> SpotRecord:
        unknown = set(fields) - set(SPOT_EDITABLE_FIELDS)
        if unknown:
            raise ValidationError("unknown spot fields", details={"fields": sorted(unknown)})
        missing = [name for name in REQUIRED_SPOT_FIELDS if fields.get(name) in (None, "")]
        if missing:
            raise ValidationError("required spot fields are missing", details={"fields": missing})
        fields = _normalize(fields)
        validate_coordinates(fields["latitude"], fields["longitude"])

        record = SpotRecord(id=str(uuid.uuid4()), owner_id=str(owner_id), **fields)
        spot = self._spots.create(record)
        logger.info(f"Spot created: id={spot.id} owner={spot.owner_id} name={spot.name!r}")
        return spot

    def get(self, spot_id: str) -> SpotRecord:
        spot = self._spots.get(spot_id)
        if spot is None:
            raise NotFoundError(f"spot {spot_id} not found", details={"spot_id": str(spot_id)})
        return spot

    def list_by_owner(self, owner_id: str) -> List[SpotRecord]:
        return self._spots.list_by_owner(owner_id)

    def update(self, spot_id: str, actor_id: str, changes: dict) -> SpotRecord:
        if not changes:
            raise ValidationError("no data provided for update")
        unknown = set(changes) - set(SPOT_EDITABLE_FIELDS)
        if unknown:
            raise ValidationError("these spot fields cannot be updated", details={"fields": sorted(unknown)})

        spot = self.get(spot_id)
        ensure_can_mutate("spot", spot.id, actor_id, spot.owner_id)
        changes = _normalize(changes)
        validate_coordinates(changes.get("latitude", spot.latitude), changes.get("longitude", spot.longitude))

        updated = self._spots.update(spot.id, changes)
        logger.info(f"Spot updated: id={spot.id} fields={sorted(changes)}")
        return updated

    def delete(self, spot_id: str, actor_id: str) -> None:
        spot = self.get(spot_id)
        ensure_can_mutate("spot", spot.id, actor_id, spot.owner_id)

        with self._locks.hold(spot.id), self._spots.transaction(spot.id):
            # ロック待ちの間に削除されている可能性がある
            self.get(spot.id)
            reviews = self._reviews.delete_by_spot(spot.id)
            favorites = self._favorites.delete_by_spot(spot.id)
            self._spots.delete(spot.id)
        logger.info(f"Spot deleted: id={spot.id} (cascaded {reviews} reviews, {favorites} favorites)")
