"""永続化の境界（ストア）。
- Protocol でインターフェースを定義し、サービスはこれにのみ依存する
- 本番は orm_stores.py の Django ORM 実装、テストや単体利用はここのインメモリ実装を使う
"""

import threading
from contextlib import AbstractContextManager, nullcontext
from dataclasses import replace
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Protocol

from workspot.errors import ConflictError, NotFoundError
from workspot.services.contracts import FavoriteRecord, ReviewRecord, SpotFilters, SpotRecord
from workspot.services.ratings import RatingSummary


class SpotStore(Protocol):
    def transaction(self, spot_id: str) -> AbstractContextManager:
        """spot_id に対する書き込みを直列化するトランザクション境界。"""
        ...

    def create(self, spot: SpotRecord) -> SpotRecord: ...

    def get(self, spot_id: str) -> Optional[SpotRecord]: ...

    def get_many(self, spot_ids: Iterable[str]) -> Dict[str, SpotRecord]: ...

    def find(self, filters: SpotFilters) -> List[SpotRecord]:
        """設備/種別の完全一致のみ適用する（geo は無視）。新しい順。"""
        ...

    def list_by_owner(self, owner_id: str) -> List[SpotRecord]: ...

    def count_by_owner(self, owner_id: str) -> int: ...

    def update(self, spot_id: str, changes: dict) -> SpotRecord: ...

    def set_rating(self, spot_id: str, summary: RatingSummary) -> SpotRecord: ...

    def delete(self, spot_id: str) -> None: ...


class ReviewStore(Protocol):
    def create(self, review: ReviewRecord) -> ReviewRecord:
        """(user_id, spot_id) が重複する場合は ConflictError。"""
        ...

    def get(self, review_id: str) -> Optional[ReviewRecord]: ...

    def get_for_user(self, user_id: str, spot_id: str) -> Optional[ReviewRecord]: ...

    def list_by_spot(self, spot_id: str) -> List[ReviewRecord]: ...

    def ratings_for_spot(self, spot_id: str) -> List[int]: ...

    def update(self, review_id: str, changes: dict) -> ReviewRecord: ...

    def delete(self, review_id: str) -> None: ...

    def delete_by_spot(self, spot_id: str) -> int: ...

    def count_by_user(self, user_id: str) -> int: ...


class FavoriteStore(Protocol):
    def create(self, favorite: FavoriteRecord) -> FavoriteRecord:
        """(user_id, spot_id) が重複する場合は ConflictError。"""
        ...

    def get(self, favorite_id: str) -> Optional[FavoriteRecord]: ...

    def get_for_user(self, user_id: str, spot_id: str) -> Optional[FavoriteRecord]: ...

    def list_by_user(self, user_id: str) -> List[FavoriteRecord]: ...

    def delete(self, favorite_id: str) -> None: ...

    def delete_by_spot(self, spot_id: str) -> int: ...

    def count_by_user(self, user_id: str) -> int: ...


def _copy(row):
    """呼び出し側が images を変更してもストア内の行に影響しないようにする。"""
    return replace(row, images=list(row.images))


def _now() -> datetime:
    return datetime.now(timezone.utc)


class InMemorySpotStore:
    """dict ベースのスポットストア。挿入順を保持し、一覧は新しい順で返す。"""

    def __init__(self):
        self._lock = threading.RLock()
        self._rows: Dict[str, SpotRecord] = {}

    def transaction(self, spot_id: str) -> AbstractContextManager:
        # 直列化はサービス側の KeyedLock が担う
        return nullcontext()

    def create(self, spot: SpotRecord) -> SpotRecord:
        now = _now()
        row = replace(spot, images=list(spot.images), created_at=now, updated_at=now)
        with self._lock:
            if row.id in self._rows:
                raise ConflictError("spot already exists", details={"spot_id": row.id})
            self._rows[row.id] = row
        return _copy(row)

    def get(self, spot_id: str) -> Optional[SpotRecord]:
        with self._lock:
            row = self._rows.get(str(spot_id))
        return _copy(row) if row else None

    def get_many(self, spot_ids: Iterable[str]) -> Dict[str, SpotRecord]:
        with self._lock:
            return {sid: _copy(self._rows[sid]) for sid in map(str, spot_ids) if sid in self._rows}

    def find(self, filters: SpotFilters) -> List[SpotRecord]:
        with self._lock:
            rows = list(reversed(self._rows.values()))
        if filters.has_wifi is not None:
            rows = [r for r in rows if r.has_wifi == filters.has_wifi]
        if filters.has_power is not None:
            rows = [r for r in rows if r.has_power == filters.has_power]
        if filters.spot_type is not None:
            rows = [r for r in rows if r.spot_type == filters.spot_type]
        return [_copy(r) for r in rows]

    def list_by_owner(self, owner_id: str) -> List[SpotRecord]:
        with self._lock:
            return [_copy(r) for r in reversed(self._rows.values()) if r.owner_id == str(owner_id)]

    def count_by_owner(self, owner_id: str) -> int:
        return len(self.list_by_owner(owner_id))

    def update(self, spot_id: str, changes: dict) -> SpotRecord:
        with self._lock:
            row = self._require(spot_id)
            row = _copy(replace(row, **changes, updated_at=_now()))
            self._rows[row.id] = row
        return _copy(row)

    def set_rating(self, spot_id: str, summary: RatingSummary) -> SpotRecord:
        with self._lock:
            row = self._require(spot_id)
            row = replace(row, average_rating=summary.average_rating, review_count=summary.review_count)
            self._rows[row.id] = row
        return _copy(row)

    def delete(self, spot_id: str) -> None:
        with self._lock:
            self._require(spot_id)
            del self._rows[str(spot_id)]

    def _require(self, spot_id: str) -> SpotRecord:
        row = self._rows.get(str(spot_id))
        if row is None:
            raise NotFoundError("spot not found", details={"spot_id": str(spot_id)})
        return row


class InMemoryReviewStore:
    def __init__(self):
        self._lock = threading.RLock()
        self._rows: Dict[str, ReviewRecord] = {}

    def create(self, review: ReviewRecord) -> ReviewRecord:
        now = _now()
        row = replace(review, images=list(review.images), created_at=now, updated_at=now)
        with self._lock:
            if self._find_for_user(row.user_id, row.spot_id) is not None:
                raise ConflictError(
                    "you have already reviewed this spot",
                    details={"spot_id": row.spot_id},
                )
            self._rows[row.id] = row
        return _copy(row)

    def get(self, review_id: str) -> Optional[ReviewRecord]:
        with self._lock:
            row = self._rows.get(str(review_id))
        return _copy(row) if row else None

    def get_for_user(self, user_id: str, spot_id: str) -> Optional[ReviewRecord]:
        with self._lock:
            row = self._find_for_user(str(user_id), str(spot_id))
        return _copy(row) if row else None

    def list_by_spot(self, spot_id: str) -> List[ReviewRecord]:
        with self._lock:
            return [_copy(r) for r in reversed(self._rows.values()) if r.spot_id == str(spot_id)]

    def ratings_for_spot(self, spot_id: str) -> List[int]:
        with self._lock:
            return [r.rating for r in self._rows.values() if r.spot_id == str(spot_id)]

    def update(self, review_id: str, changes: dict) -> ReviewRecord:
        with self._lock:
            row = self._require(review_id)
            row = _copy(replace(row, **changes, updated_at=_now()))
            self._rows[row.id] = row
        return _copy(row)

    def delete(self, review_id: str) -> None:
        with self._lock:
            self._require(review_id)
            del self._rows[str(review_id)]

    def delete_by_spot(self, spot_id: str) -> int:
        with self._lock:
            ids = [rid for rid, r in self._rows.items() if r.spot_id == str(spot_id)]
            for rid in ids:
                del self._rows[rid]
        return len(ids)

    def count_by_user(self, user_id: str) -> int:
        with self._lock:
            return sum(1 for r in self._rows.values() if r.user_id == str(user_id))

    def _find_for_user(self, user_id: str, spot_id: str) -> Optional[ReviewRecord]:
        for row in self._rows.values():
            if row.user_id == user_id and row.spot_id == spot_id:
                return row
        return None

    def _require(self, review_id: str) -> ReviewRecord:
        row = self._rows.get(str(review_id))
        if row is None:
            raise NotFoundError("review not found", details={"review_id": str(review_id)})
        return row


class InMemoryFavoriteStore:
    def __init__(self):
        self._lock = threading.RLock()
        self._rows: Dict[str, FavoriteRecord] = {}

    def create(self, favorite: FavoriteRecord) -> FavoriteRecord:
        row = replace(favorite, created_at=_now())
        with self._lock:
            if self._find_for_user(row.user_id, row.spot_id) is not None:
                raise ConflictError(
                    "this spot is already in your favorites",
                    details={"spot_id": row.spot_id},
                )
            self._rows[row.id] = row
        return replace(row)

    def get(self, favorite_id: str) -> Optional[FavoriteRecord]:
        with self._lock:
            row = self._rows.get(str(favorite_id))
        return replace(row) if row else None

    def get_for_user(self, user_id: str, spot_id: str) -> Optional[FavoriteRecord]:
        with self._lock:
            row = self._find_for_user(str(user_id), str(spot_id))
        return replace(row) if row else None

    def list_by_user(self, user_id: str) -> List[FavoriteRecord]:
        with self._lock:
            return [replace(r) for r in reversed(self._rows.values()) if r.user_id == str(user_id)]

    def delete(self, favorite_id: str) -> None:
        with self._lock:
            if str(favorite_id) not in self._rows:
                raise NotFoundError("favorite not found", details={"favorite_id": str(favorite_id)})
            del self._rows[str(favorite_id)]

    def delete_by_spot(self, spot_id: str) -> int:
        with self._lock:
            ids = [fid for fid, f in self._rows.items() if f.spot_id == str(spot_id)]
            for fid in ids:
                del self._rows[fid]
        return len(ids)

    def count_by_user(self, user_id: str) -> int:
        return len(self.list_by_user(user_id))

    def _find_for_user(self, user_id: str, spot_id: str) -> Optional[FavoriteRecord]:
        for row in self._rows.values():
            if row.user_id == user_id and row.spot_id == spot_id:
                return row
        return None
