"""レビューの作成/更新/削除とスポット集計（平均★・件数）の整合維持。

各書き込みは「レビュー集合の変更 → 全件を読み直して集計を保存」の2段階で、
spot_id 単位で直列化する。
- プロセス内: KeyedLock で spot_id ごとの排他区間を取る
- プロセス間: ストアのトランザクション（ORM では spot 行の SELECT ... FOR UPDATE）
集計は常に最新のレビュー全件から再計算する（差分更新はしない）。
"""

import logging
import uuid
from typing import List, Optional

from workspot.errors import ConflictError, NotFoundError, ValidationError
from workspot.services.contracts import REVIEW_EDITABLE_FIELDS, ReviewRecord
from workspot.services.locks import KeyedLock
from workspot.services.ownership import ensure_can_mutate
from workspot.services.ratings import RatingSummary, aggregate_ratings, validate_rating
from workspot.services.stores import ReviewStore, SpotStore

logger = logging.getLogger(__name__)


class ReviewAggregationService:
    def __init__(self, spots: SpotStore, reviews: ReviewStore, locks: KeyedLock):
        self._spots = spots
        self._reviews = reviews
        self._locks = locks

    def create_review(
        self,
        spot_id: str,
        user_id: str,
        rating: int,
        comment: Optional[str] = None,
        images: Optional[List[str]] = None,
    ) -> ReviewRecord:
        validate_rating(rating)
        spot_id, user_id = str(spot_id), str(user_id)

        with self._locks.hold(spot_id), self._spots.transaction(spot_id):
            if self._spots.get(spot_id) is None:
                raise NotFoundError(f"spot {spot_id} not found", details={"spot_id": spot_id})
            if self._reviews.get_for_user(user_id, spot_id) is not None:
                raise ConflictError("you have already reviewed this spot", details={"spot_id": spot_id})

            review = self._reviews.create(
                ReviewRecord(
                    id=str(uuid.uuid4()),
                    spot_id=spot_id,
                    user_id=user_id,
                    rating=rating,
                    comment=comment,
                    images=list(images or []),
                )
            )
            summary = self._recompute(spot_id)

        logger.info(
            f"Review created: id={review.id} spot={spot_id} user={user_id} rating={rating} "
            f"-> avg={summary.average_rating} count={summary.review_count}"
        )
        return review

    def get_review(self, review_id: str) -> ReviewRecord:
        review = self._reviews.get(review_id)
        if review is None:
            raise NotFoundError(f"review {review_id} not found", details={"review_id": str(review_id)})
        return review

    def list_for_spot(self, spot_id: str) -> List[ReviewRecord]:
        if self._spots.get(spot_id) is None:
            raise NotFoundError(f"spot {spot_id} not found", details={"spot_id": str(spot_id)})
        return self._reviews.list_by_spot(spot_id)

    def update_review(self, review_id: str, actor_id: str, patch: dict) -> ReviewRecord:
        review = self.get_review(review_id)
        ensure_can_mutate("review", review.id, actor_id, review.user_id)
        if not patch:
            raise ValidationError("no data provided for update")
        unknown = set(patch) - set(REVIEW_EDITABLE_FIELDS)
        if unknown:
            raise ValidationError("these review fields cannot be updated", details={"fields": sorted(unknown)})
        if "rating" in patch:
            validate_rating(patch["rating"])

        with self._locks.hold(review.spot_id), self._spots.transaction(review.spot_id):
            # ロック待ちの間に削除されている可能性があるため読み直す
            self.get_review(review.id)
            updated = self._reviews.update(review.id, dict(patch))
            if "rating" in patch:
                self._recompute(review.spot_id)

        logger.info(f"Review updated: id={review.id} spot={review.spot_id} fields={sorted(patch)}")
        return updated

    def delete_review(self, review_id: str, actor_id: str) -> None:
        review = self.get_review(review_id)
        ensure_can_mutate("review", review.id, actor_id, review.user_id)

        with self._locks.hold(review.spot_id), self._spots.transaction(review.spot_id):
            self.get_review(review.id)
            self._reviews.delete(review.id)
            summary = self._recompute(review.spot_id)

        logger.info(
            f"Review deleted: id={review.id} spot={review.spot_id} "
            f"-> avg={summary.average_rating} count={summary.review_count}"
        )

    def _recompute(self, spot_id: str) -> RatingSummary:
        """呼び出し側が spot_id のロックを保持していること。"""
        summary = aggregate_ratings(self._reviews.ratings_for_spot(spot_id))
        self._spots.set_rating(spot_id, summary)
        logger.debug(f"Recomputed rating for spot={spot_id}: {summary}")
        return summary
