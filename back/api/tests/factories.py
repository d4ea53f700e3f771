from workspot.services.activity import UserActivityService
from workspot.services.favorite_service import FavoriteService
from workspot.services.locks import KeyedLock
from workspot.services.review_service import ReviewAggregationService
from workspot.services.search import SpotSearchService
from workspot.services.spot_service import SpotService
from workspot.services.stores import InMemoryFavoriteStore, InMemoryReviewStore, InMemorySpotStore

PARIS = (48.8566, 2.3522)
LYON = (45.764, 4.8357)


def spot_fields(**overrides) -> dict:
    fields = {
        "name": "Le Coffee Lab",
        "address": "12 Rue de la Paix",
        "city": "Paris",
        "country": "France",
        "latitude": PARIS[0],
        "longitude": PARIS[1],
        "has_wifi": True,
        "has_power": True,
        "noise_level": "MODERATE",
        "price_range": "CHEAP",
        "spot_type": "CAFE",
    }
    fields.update(overrides)
    return fields


class Env:
    """インメモリストアで組み立てたサービス一式。"""

    def __init__(self, review_store=None):
        self.spots = InMemorySpotStore()
        self.reviews = review_store or InMemoryReviewStore()
        self.favorites = InMemoryFavoriteStore()
        self.locks = KeyedLock()
        self.spot_service = SpotService(self.spots, self.reviews, self.favorites, self.locks)
        self.search = SpotSearchService(self.spots)
        self.review_service = ReviewAggregationService(self.spots, self.reviews, self.locks)
        self.favorite_service = FavoriteService(self.spots, self.favorites)
        self.activity = UserActivityService(self.spots, self.reviews, self.favorites)

    def add_spot(self, owner_id="owner", **overrides):
        return self.spot_service.create(owner_id, spot_fields(**overrides))

