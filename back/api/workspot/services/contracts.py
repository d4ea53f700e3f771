"""サービス層で受け渡すデータ型。
- ORM に依存しない dataclass。ストア実装（ORM / インメモリ）はこの型で読み書きする
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from workspot.services.geo import Coordinates


class NoiseLevel(str, Enum):
    QUIET = "QUIET"
    MODERATE = "MODERATE"
    LOUD = "LOUD"


class PriceRange(str, Enum):
    FREE = "FREE"
    CHEAP = "CHEAP"
    MODERATE = "MODERATE"
    EXPENSIVE = "EXPENSIVE"


class SpotType(str, Enum):
    CAFE = "CAFE"
    LIBRARY = "LIBRARY"
    COWORKING = "COWORKING"
    PARK = "PARK"
    OTHER = "OTHER"


# PATCH で変更できるスポット項目。集計値・所有者・IDは対象外
SPOT_EDITABLE_FIELDS = (
    "name",
    "description",
    "address",
    "city",
    "country",
    "latitude",
    "longitude",
    "has_wifi",
    "has_power",
    "noise_level",
    "price_range",
    "spot_type",
    "opening_hours",
    "cover_image",
    "images",
    "playlist_url",
)

REVIEW_EDITABLE_FIELDS = ("rating", "comment", "images")


@dataclass
class SpotRecord:
    id: str
    name: str
    address: str
    city: str
    country: str
    latitude: float
    longitude: float
    owner_id: str
    has_wifi: bool = False
    has_power: bool = False
    noise_level: NoiseLevel = NoiseLevel.MODERATE
    price_range: PriceRange = PriceRange.MODERATE
    spot_type: SpotType = SpotType.OTHER
    description: Optional[str] = None
    opening_hours: Optional[str] = None
    cover_image: Optional[str] = None
    images: list[str] = field(default_factory=list)
    playlist_url: Optional[str] = None
    verified: bool = False
    average_rating: float = 0.0
    review_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def coordinates(self) -> Coordinates:
        return Coordinates(self.latitude, self.longitude)


@dataclass
class ReviewRecord:
    id: str
    spot_id: str
    user_id: str
    rating: int
    comment: Optional[str] = None
    images: list[str] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class FavoriteRecord:
    id: str
    user_id: str
    spot_id: str
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class GeoQuery:
    center: Coordinates
    radius_km: float


@dataclass(frozen=True)
class SpotFilters:
    """検索条件。各項目は独立して省略可能（None = 条件なし）。"""
    has_wifi: Optional[bool] = None
    has_power: Optional[bool] = None
    spot_type: Optional[SpotType] = None
    geo: Optional[GeoQuery] = None


@dataclass(frozen=True)
class UserStats:
    spots_created: int
    reviews_written: int
    favorite_spots: int
