"""レスポンス整形。サービス層のレコードを API の camelCase JSON に変換する。"""

from typing import Iterable

from django.contrib.auth import get_user_model

from workspot.services.contracts import FavoriteRecord, ReviewRecord, SpotRecord, UserStats

User = get_user_model()


def _iso(value) -> str | None:
    return value.isoformat() if value else None


def load_users(user_ids: Iterable[str]) -> dict[str, dict]:
    """ユーザー概要 {id, name, email} をまとめて取得する（N+1回避）。"""
    ids = {str(uid) for uid in user_ids}
    users = User.objects.filter(pk__in=ids) if ids else []
    return {
        str(user.pk): {
            "id": str(user.pk),
            "name": user.get_full_name() or user.get_username(),
            "email": user.email,
        }
        for user in users
    }


def _user_or_stub(users: dict[str, dict], user_id: str) -> dict:
    return users.get(user_id) or {"id": user_id, "name": None, "email": None}


def serialize_spot(spot: SpotRecord, users: dict[str, dict]) -> dict:
    return {
        "id": spot.id,
        "name": spot.name,
        "description": spot.description,
        "address": spot.address,
        "city": spot.city,
        "country": spot.country,
        "latitude": spot.latitude,
        "longitude": spot.longitude,
        "hasWifi": spot.has_wifi,
        "hasPower": spot.has_power,
        "noiseLevel": spot.noise_level.value,
        "priceRange": spot.price_range.value,
        "type": spot.spot_type.value,
        "openingHours": spot.opening_hours,
        "coverImage": spot.cover_image,
        "images": list(spot.images),
        "playlistUrl": spot.playlist_url,
        "averageRating": spot.average_rating,
        "reviewCount": spot.review_count,
        "verified": spot.verified,
        "createdById": spot.owner_id,
        "createdBy": _user_or_stub(users, spot.owner_id),
        "createdAt": _iso(spot.created_at),
        "updatedAt": _iso(spot.updated_at),
    }


def serialize_spots(spots: list[SpotRecord]) -> list[dict]:
    users = load_users(spot.owner_id for spot in spots)
    return [serialize_spot(spot, users) for spot in spots]


def serialize_review(review: ReviewRecord, users: dict[str, dict]) -> dict:
    return {
        "id": review.id,
        "spotId": review.spot_id,
        "userId": review.user_id,
        "rating": review.rating,
        "comment": review.comment,
        "images": list(review.images),
        "user": _user_or_stub(users, review.user_id),
        "createdAt": _iso(review.created_at),
        "updatedAt": _iso(review.updated_at),
    }


def serialize_reviews(reviews: list[ReviewRecord]) -> list[dict]:
    users = load_users(review.user_id for review in reviews)
    return [serialize_review(review, users) for review in reviews]


def serialize_favorites(favorites: list[FavoriteRecord], spots: dict[str, SpotRecord]) -> list[dict]:
    users = load_users(spot.owner_id for spot in spots.values())
    items = []
    for favorite in favorites:
        spot = spots.get(favorite.spot_id)
        items.append(
            {
                "id": favorite.id,
                "userId": favorite.user_id,
                "spotId": favorite.spot_id,
                "spot": serialize_spot(spot, users) if spot else None,
                "createdAt": _iso(favorite.created_at),
            }
        )
    return items


def serialize_stats(stats: UserStats) -> dict:
    return {
        "spotsCreated": stats.spots_created,
        "reviewsWritten": stats.reviews_written,
        "favoriteSpots": stats.favorite_spots,
    }
