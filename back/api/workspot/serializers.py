from rest_framework import serializers

from workspot.services.contracts import NoiseLevel, PriceRange, SpotType
from workspot.services.ratings import MAX_RATING, MIN_RATING

# APIのキー（camelCase）→ サービス層の項目名
SPOT_FIELD_MAP = {
    "name": "name",
    "description": "description",
    "address": "address",
    "city": "city",
    "country": "country",
    "latitude": "latitude",
    "longitude": "longitude",
    "hasWifi": "has_wifi",
    "hasPower": "has_power",
    "noiseLevel": "noise_level",
    "priceRange": "price_range",
    "type": "spot_type",
    "openingHours": "opening_hours",
    "coverImage": "cover_image",
    "images": "images",
    "playlistUrl": "playlist_url",
}


def to_spot_fields(validated_data: dict) -> dict:
    return {SPOT_FIELD_MAP[key]: value for key, value in validated_data.items()}


def _values(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


class SpotWriteSerializer(serializers.Serializer):
    """作成（全項目）と更新（partial=True）で共用する。"""
    name = serializers.CharField(max_length=200)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    address = serializers.CharField(max_length=255)
    city = serializers.CharField(max_length=120)
    country = serializers.CharField(max_length=120)
    latitude = serializers.FloatField(min_value=-90.0, max_value=90.0)
    longitude = serializers.FloatField(min_value=-180.0, max_value=180.0)
    hasWifi = serializers.BooleanField()
    hasPower = serializers.BooleanField()
    noiseLevel = serializers.ChoiceField(choices=_values(NoiseLevel))
    priceRange = serializers.ChoiceField(choices=_values(PriceRange))
    type = serializers.ChoiceField(choices=_values(SpotType))
    openingHours = serializers.CharField(max_length=120, required=False, allow_blank=True, allow_null=True)
    coverImage = serializers.URLField(max_length=500, required=False, allow_null=True)
    images = serializers.ListField(child=serializers.URLField(max_length=500), required=False)
    playlistUrl = serializers.URLField(max_length=500, required=False, allow_null=True)


class SpotSearchSerializer(serializers.Serializer):
    """GET /spots のクエリ。latitude/longitude/radius は3つ揃って指定する。"""
    latitude = serializers.FloatField(required=False, min_value=-90.0, max_value=90.0)
    longitude = serializers.FloatField(required=False, min_value=-180.0, max_value=180.0)
    radius = serializers.FloatField(required=False, help_text="Radius in km")
    hasWifi = serializers.BooleanField(required=False)
    hasPower = serializers.BooleanField(required=False)
    type = serializers.ChoiceField(choices=_values(SpotType), required=False)

    def validate(self, attrs):
        geo_keys = [key for key in ("latitude", "longitude", "radius") if key in attrs]
        if geo_keys and len(geo_keys) != 3:
            raise serializers.ValidationError(
                {"geo": "latitude, longitude and radius must be given together"}
            )
        return attrs


class ReviewWriteSerializer(serializers.Serializer):
    rating = serializers.IntegerField(min_value=MIN_RATING, max_value=MAX_RATING)
    comment = serializers.CharField(max_length=2000, required=False, allow_blank=True, allow_null=True)
    images = serializers.ListField(child=serializers.URLField(max_length=500), required=False)


class FavoriteCreateSerializer(serializers.Serializer):
    spotId = serializers.UUIDField()
