"""プロセス全体で共有するサービス群（ORMストア + 共通の spot ロック）。
- spot 削除とレビュー書き込みは同じ KeyedLock を使う必要がある
"""

from workspot.services.activity import UserActivityService
from workspot.services.favorite_service import FavoriteService
from workspot.services.locks import KeyedLock
from workspot.services.orm_stores import OrmFavoriteStore, OrmReviewStore, OrmSpotStore
from workspot.services.review_service import ReviewAggregationService
from workspot.services.search import SpotSearchService
from workspot.services.spot_service import SpotService

spot_store = OrmSpotStore()
review_store = OrmReviewStore()
favorite_store = OrmFavoriteStore()
spot_locks = KeyedLock()

spot_service = SpotService(spot_store, review_store, favorite_store, spot_locks)
search_service = SpotSearchService(spot_store)
review_service = ReviewAggregationService(spot_store, review_store, spot_locks)
favorite_service = FavoriteService(spot_store, favorite_store)
activity_service = UserActivityService(spot_store, review_store, favorite_store)
