"""Django ORM によるストア実装。
- DB例外は StorageError に、一意制約違反は ConflictError に変換して送出する
- 存在確認の後に spot が消えていた場合（外部キー違反）は NotFoundError
- SpotStore.transaction は transaction.atomic + spot 行の SELECT ... FOR UPDATE
  （SQLite では FOR UPDATE は無視され、プロセス内の KeyedLock のみが効く）
"""

import logging
import uuid
from contextlib import contextmanager
from typing import Callable, Dict, Iterable, Iterator, List, Optional

from django.db import DatabaseError, IntegrityError, transaction
from django.utils import timezone

from workspot.errors import ConflictError, NotFoundError, StorageError, WorkspotError
from workspot.models import Favorite, Review, Spot
from workspot.services.contracts import (
    FavoriteRecord,
    NoiseLevel,
    PriceRange,
    ReviewRecord,
    SpotFilters,
    SpotRecord,
    SpotType,
)
from workspot.services.ratings import RatingSummary

logger = logging.getLogger(__name__)


@contextmanager
def _storage_errors(
    action: str, on_integrity: Callable[[], Optional[WorkspotError]] | None = None
) -> Iterator[None]:
    """DB例外をドメイン例外に変換する。
    - on_integrity: IntegrityError の原因を調べ、対応するドメイン例外を返す（判別できなければ None）
    """
    try:
        yield
    except IntegrityError as exc:
        mapped = None
        if on_integrity is not None:
            try:
                mapped = on_integrity()
            except DatabaseError as lookup_exc:
                logger.error(f"Database error while classifying {action} failure: {lookup_exc}")
        if mapped is not None:
            raise mapped from exc
        logger.error(f"Integrity error during {action}: {exc}")
        raise StorageError(f"storage failure during {action}") from exc
    except DatabaseError as exc:
        logger.error(f"Database error during {action}: {exc}")
        raise StorageError(f"storage failure during {action}") from exc


def _conflict_if_exists(duplicates, message: str, details: dict) -> Callable[[], Optional[WorkspotError]]:
    """一意制約違反（重複行が実在する）のときだけ ConflictError とする。"""

    def classify() -> Optional[WorkspotError]:
        return ConflictError(message, details=details) if duplicates.exists() else None

    return classify


def _spot_gone_or_conflict(spot_id: str, duplicates, message: str) -> Callable[[], Optional[WorkspotError]]:
    """spot に紐づく行の作成失敗を判別する。
    - 存在確認後に spot が削除された（外部キー違反）: NotFoundError
    - (user, spot) の重複: ConflictError
    """
    details = {"spot_id": str(spot_id)}
    conflict = _conflict_if_exists(duplicates, message, details)

    def classify() -> Optional[WorkspotError]:
        if not Spot.objects.filter(pk=_as_uuid(spot_id)).exists():
            return NotFoundError(f"spot {spot_id} not found", details=details)
        return conflict()

    return classify


def _as_uuid(value) -> Optional[uuid.UUID]:
    """不正な形式のIDは「存在しない」として扱う。"""
    try:
        return value if isinstance(value, uuid.UUID) else uuid.UUID(str(value))
    except ValueError:
        return None


def _db_value(value):
    return value.value if isinstance(value, (NoiseLevel, PriceRange, SpotType)) else value


def _spot_record(row: Spot) -> SpotRecord:
    return SpotRecord(
        id=str(row.id),
        name=row.name,
        description=row.description,
        address=row.address,
        city=row.city,
        country=row.country,
        latitude=row.latitude,
        longitude=row.longitude,
        has_wifi=row.has_wifi,
        has_power=row.has_power,
        noise_level=NoiseLevel(row.noise_level),
        price_range=PriceRange(row.price_range),
        spot_type=SpotType(row.spot_type),
        opening_hours=row.opening_hours,
        cover_image=row.cover_image,
        images=list(row.images or []),
        playlist_url=row.playlist_url,
        verified=row.verified,
        average_rating=row.average_rating,
        review_count=row.review_count,
        owner_id=str(row.owner_id),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _review_record(row: Review) -> ReviewRecord:
    return ReviewRecord(
        id=str(row.id),
        spot_id=str(row.spot_id),
        user_id=str(row.user_id),
        rating=row.rating,
        comment=row.comment,
        images=list(row.images or []),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _favorite_record(row: Favorite) -> FavoriteRecord:
    return FavoriteRecord(
        id=str(row.id),
        user_id=str(row.user_id),
        spot_id=str(row.spot_id),
        created_at=row.created_at,
    )


class OrmSpotStore:
    @contextmanager
    def transaction(self, spot_id: str) -> Iterator[None]:
        with _storage_errors("spot lock"):
            with transaction.atomic():
                pk = _as_uuid(spot_id)
                if pk is not None:
                    # 行ロック。以降の読み書きは同じ spot への他の書き込みと直列化される
                    list(Spot.objects.select_for_update().filter(pk=pk).values_list("pk", flat=True))
                yield

    def create(self, spot: SpotRecord) -> SpotRecord:
        duplicates = Spot.objects.filter(pk=_as_uuid(spot.id))
        on_integrity = _conflict_if_exists(duplicates, "spot already exists", {"spot_id": str(spot.id)})
        with _storage_errors("spot create", on_integrity=on_integrity):
            with transaction.atomic():
                row = Spot.objects.create(
                    id=spot.id,
                    name=spot.name,
                    description=spot.description,
                    address=spot.address,
                    city=spot.city,
                    country=spot.country,
                    latitude=spot.latitude,
                    longitude=spot.longitude,
                    has_wifi=spot.has_wifi,
                    has_power=spot.has_power,
                    noise_level=_db_value(spot.noise_level),
                    price_range=_db_value(spot.price_range),
                    spot_type=_db_value(spot.spot_type),
                    opening_hours=spot.opening_hours,
                    cover_image=spot.cover_image,
                    images=list(spot.images),
                    playlist_url=spot.playlist_url,
                    verified=spot.verified,
                    owner_id=spot.owner_id,
                )
        return self.get(row.id)

    def get(self, spot_id: str) -> Optional[SpotRecord]:
        pk = _as_uuid(spot_id)
        if pk is None:
            return None
        with _storage_errors("spot get"):
            row = Spot.objects.filter(pk=pk).first()
        return _spot_record(row) if row else None

    def get_many(self, spot_ids: Iterable[str]) -> Dict[str, SpotRecord]:
        pks = [pk for pk in map(_as_uuid, spot_ids) if pk is not None]
        with _storage_errors("spot get_many"):
            rows = list(Spot.objects.filter(pk__in=pks))
        return {str(row.id): _spot_record(row) for row in rows}

    def find(self, filters: SpotFilters) -> List[SpotRecord]:
        qs = Spot.objects.all()
        if filters.has_wifi is not None:
            qs = qs.filter(has_wifi=filters.has_wifi)
        if filters.has_power is not None:
            qs = qs.filter(has_power=filters.has_power)
        if filters.spot_type is not None:
            qs = qs.filter(spot_type=_db_value(filters.spot_type))
        with _storage_errors("spot find"):
            rows = list(qs.order_by("-created_at"))
        return [_spot_record(row) for row in rows]

    def list_by_owner(self, owner_id: str) -> List[SpotRecord]:
        with _storage_errors("spot list_by_owner"):
            rows = list(Spot.objects.filter(owner_id=owner_id).order_by("-created_at"))
        return [_spot_record(row) for row in rows]

    def count_by_owner(self, owner_id: str) -> int:
        with _storage_errors("spot count_by_owner"):
            return Spot.objects.filter(owner_id=owner_id).count()

    def update(self, spot_id: str, changes: dict) -> SpotRecord:
        with _storage_errors("spot update"):
            row = Spot.objects.filter(pk=_as_uuid(spot_id)).first()
            if row is None:
                raise NotFoundError("spot not found", details={"spot_id": str(spot_id)})
            for name, value in changes.items():
                setattr(row, name, _db_value(value))
            row.save(update_fields=[*changes, "updated_at"])
        return _spot_record(row)

    def set_rating(self, spot_id: str, summary: RatingSummary) -> SpotRecord:
        with _storage_errors("spot set_rating"):
            updated = Spot.objects.filter(pk=_as_uuid(spot_id)).update(
                average_rating=summary.average_rating,
                review_count=summary.review_count,
                updated_at=timezone.now(),
            )
        if not updated:
            raise NotFoundError("spot not found", details={"spot_id": str(spot_id)})
        return self.get(spot_id)

    def delete(self, spot_id: str) -> None:
        with _storage_errors("spot delete"):
            deleted, _ = Spot.objects.filter(pk=_as_uuid(spot_id)).delete()
        if not deleted:
            raise NotFoundError("spot not found", details={"spot_id": str(spot_id)})


class OrmReviewStore:
    def create(self, review: ReviewRecord) -> ReviewRecord:
        duplicates = Review.objects.filter(user_id=review.user_id, spot_id=_as_uuid(review.spot_id))
        on_integrity = _spot_gone_or_conflict(review.spot_id, duplicates, "you have already reviewed this spot")
        with _storage_errors("review create", on_integrity=on_integrity):
            with transaction.atomic():
                row = Review.objects.create(
                    id=review.id,
                    spot_id=review.spot_id,
                    user_id=review.user_id,
                    rating=review.rating,
                    comment=review.comment,
                    images=list(review.images),
                )
        return _review_record(row)

    def get(self, review_id: str) -> Optional[ReviewRecord]:
        pk = _as_uuid(review_id)
        if pk is None:
            return None
        with _storage_errors("review get"):
            row = Review.objects.filter(pk=pk).first()
        return _review_record(row) if row else None

    def get_for_user(self, user_id: str, spot_id: str) -> Optional[ReviewRecord]:
        pk = _as_uuid(spot_id)
        if pk is None:
            return None
        with _storage_errors("review get_for_user"):
            row = Review.objects.filter(user_id=user_id, spot_id=pk).first()
        return _review_record(row) if row else None

    def list_by_spot(self, spot_id: str) -> List[ReviewRecord]:
        with _storage_errors("review list_by_spot"):
            rows = list(Review.objects.filter(spot_id=_as_uuid(spot_id)).order_by("-created_at"))
        return [_review_record(row) for row in rows]

    def ratings_for_spot(self, spot_id: str) -> List[int]:
        with _storage_errors("review ratings_for_spot"):
            return list(Review.objects.filter(spot_id=_as_uuid(spot_id)).values_list("rating", flat=True))

    def update(self, review_id: str, changes: dict) -> ReviewRecord:
        with _storage_errors("review update"):
            row = Review.objects.filter(pk=_as_uuid(review_id)).first()
            if row is None:
                raise NotFoundError("review not found", details={"review_id": str(review_id)})
            for name, value in changes.items():
                setattr(row, name, value)
            row.save(update_fields=[*changes, "updated_at"])
        return _review_record(row)

    def delete(self, review_id: str) -> None:
        with _storage_errors("review delete"):
            deleted, _ = Review.objects.filter(pk=_as_uuid(review_id)).delete()
        if not deleted:
            raise NotFoundError("review not found", details={"review_id": str(review_id)})

    def delete_by_spot(self, spot_id: str) -> int:
        with _storage_errors("review delete_by_spot"):
            deleted, _ = Review.objects.filter(spot_id=_as_uuid(spot_id)).delete()
        return deleted

    def count_by_user(self, user_id: str) -> int:
        with _storage_errors("review count_by_user"):
            return Review.objects.filter(user_id=user_id).count()


class OrmFavoriteStore:
    def create(self, favorite: FavoriteRecord) -> FavoriteRecord:
        duplicates = Favorite.objects.filter(user_id=favorite.user_id, spot_id=_as_uuid(favorite.spot_id))
        on_integrity = _spot_gone_or_conflict(favorite.spot_id, duplicates, "this spot is already in your favorites")
        with _storage_errors("favorite create", on_integrity=on_integrity):
            with transaction.atomic():
                row = Favorite.objects.create(id=favorite.id, user_id=favorite.user_id, spot_id=favorite.spot_id)
        return _favorite_record(row)

    def get(self, favorite_id: str) -> Optional[FavoriteRecord]:
        pk = _as_uuid(favorite_id)
        if pk is None:
            return None
        with _storage_errors("favorite get"):
            row = Favorite.objects.filter(pk=pk).first()
        return _favorite_record(row) if row else None

    def get_for_user(self, user_id: str, spot_id: str) -> Optional[FavoriteRecord]:
        pk = _as_uuid(spot_id)
        if pk is None:
            return None
        with _storage_errors("favorite get_for_user"):
            row = Favorite.objects.filter(user_id=user_id, spot_id=pk).first()
        return _favorite_record(row) if row else None

    def list_by_user(self, user_id: str) -> List[FavoriteRecord]:
        with _storage_errors("favorite list_by_user"):
            rows = list(Favorite.objects.filter(user_id=user_id).order_by("-created_at"))
        return [_favorite_record(row) for row in rows]

    def delete(self, favorite_id: str) -> None:
        with _storage_errors("favorite delete"):
            deleted, _ = Favorite.objects.filter(pk=_as_uuid(favorite_id)).delete()
        if not deleted:
            raise NotFoundError("favorite not found", details={"favorite_id": str(favorite_id)})

    def delete_by_spot(self, spot_id: str) -> int:
        with _storage_errors("favorite delete_by_spot"):
            deleted, _ = Favorite.objects.filter(spot_id=_as_uuid(spot_id)).delete()
        return deleted

    def count_by_user(self, user_id: str) -> int:
        with _storage_errors("favorite count_by_user"):
            return Favorite.objects.filter(user_id=user_id).count()
