from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from uuid import uuid4

from workspot.services.contracts import NoiseLevel, PriceRange, SpotType


def _choices(enum_cls) -> list[tuple[str, str]]:
    return [(member.value, member.name.title()) for member in enum_cls]


class Spot(models.Model):
    """作業スポット（カフェ・図書館・コワーキングなど）。
    - average_rating / review_count はレビューからの導出値。レビュー書き込み時にのみ更新する
    - owner は作成者。作成後は変更しない
    """
    id = models.UUIDField(primary_key=True, default=uuid4, editable=False)
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True, null=True)
    address = models.CharField(max_length=255)
    city = models.CharField(max_length=120)
    country = models.CharField(max_length=120)
    latitude = models.FloatField(validators=[MinValueValidator(-90.0), MaxValueValidator(90.0)])
    longitude = models.FloatField(validators=[MinValueValidator(-180.0), MaxValueValidator(180.0)])
    has_wifi = models.BooleanField(default=False)
    has_power = models.BooleanField(default=False)
    noise_level = models.CharField(max_length=16, choices=_choices(NoiseLevel), default=NoiseLevel.MODERATE.value)
    price_range = models.CharField(max_length=16, choices=_choices(PriceRange), default=PriceRange.MODERATE.value)
    spot_type = models.CharField(max_length=16, choices=_choices(SpotType), default=SpotType.OTHER.value, db_column="type")
    opening_hours = models.CharField(max_length=120, blank=True, null=True)
    cover_image = models.URLField(max_length=500, blank=True, null=True)  # 画像本体は外部ストレージ
    images = models.JSONField(default=list, blank=True)
    playlist_url = models.URLField(max_length=500, blank=True, null=True)
    verified = models.BooleanField(default=False)
    average_rating = models.FloatField(default=0)
    review_count = models.PositiveIntegerField(default=0)
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, db_column="created_by_id", related_name="spots"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "spots"
        ordering = ("-created_at",)
        indexes = [
            models.Index(fields=["has_wifi", "has_power", "spot_type"], name="idx_spots_amenities"),
            models.Index(fields=["owner", "created_at"], name="idx_spots_owner_created"),
        ]

    def __str__(self) -> str:
        return self.name


class Review(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid4, editable=False)
    spot = models.ForeignKey(Spot, on_delete=models.CASCADE, db_column="spot_id", related_name="reviews")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, db_column="user_id", related_name="reviews")
    rating = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(5)])
    comment = models.TextField(blank=True, null=True)
    images = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "reviews"
        ordering = ("-created_at",)
        constraints = [
            models.UniqueConstraint(fields=["user", "spot"], name="uniq_reviews_user_spot"),
            models.CheckConstraint(condition=models.Q(rating__gte=1, rating__lte=5), name="chk_reviews_rating_range"),
        ]
        indexes = [
            models.Index(fields=["spot", "created_at"], name="idx_reviews_spot_created"),
        ]

    def __str__(self) -> str:
        return f"Review({self.id})"


class Favorite(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid4, editable=False)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, db_column="user_id", related_name="favorites")
    spot = models.ForeignKey(Spot, on_delete=models.CASCADE, db_column="spot_id", related_name="favorites")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "favorites"
        ordering = ("-created_at",)
        constraints = [
            models.UniqueConstraint(fields=["user", "spot"], name="uniq_favorites_user_spot"),
        ]

    def __str__(self) -> str:
        return f"Favorite({self.user_id}, {self.spot_id})"
