import logging
import uuid
from typing import List

from workspot.errors import ConflictError, NotFoundError
from workspot.services.contracts import FavoriteRecord
from workspot.services.ownership import ensure_can_mutate
from workspot.services.stores import FavoriteStore, SpotStore

logger = logging.getLogger(__name__)


class FavoriteService:
    """お気に入り。集計への副作用はないため spot ロックは取らない。"""

    def __init__(self, spots: SpotStore, favorites: FavoriteStore):
        self._spots = spots
        self._favorites = favorites

    def create(self, user_id: str, spot_id: str) -> FavoriteRecord:
        user_id, spot_id = str(user_id), str(spot_id)
        if self._spots.get(spot_id) is None:
            raise NotFoundError(f"spot {spot_id} not found", details={"spot_id": spot_id})
        if self._favorites.get_for_user(user_id, spot_id) is not None:
            raise ConflictError("this spot is already in your favorites", details={"spot_id": spot_id})

        # 同時リクエストはストアの一意制約で ConflictError になる
        favorite = self._favorites.create(FavoriteRecord(id=str(uuid.uuid4()), user_id=user_id, spot_id=spot_id))
        logger.info(f"Favorite created: id={favorite.id} user={user_id} spot={spot_id}")
        return favorite

    def remove(self, favorite_id: str, user_id: str) -> None:
        favorite = self._favorites.get(favorite_id)
        if favorite is None:
            raise NotFoundError(f"favorite {favorite_id} not found", details={"favorite_id": str(favorite_id)})
        ensure_can_mutate("favorite", favorite.id, user_id, favorite.user_id)

        self._favorites.delete(favorite.id)
        logger.info(f"Favorite removed: id={favorite.id} user={user_id}")

    def list(self, user_id: str) -> List[FavoriteRecord]:
        return self._favorites.list_by_user(user_id)

    def is_favorite(self, user_id: str, spot_id: str) -> bool:
        return self._favorites.get_for_user(user_id, spot_id) is not None
