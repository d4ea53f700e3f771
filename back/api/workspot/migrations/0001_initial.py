import uuid

import django.core.validators
from django.conf import settings
from django.db import migrations, models

NOISE_LEVEL_CHOICES = [("QUIET", "Quiet"), ("MODERATE", "Moderate"), ("LOUD", "Loud")]
PRICE_RANGE_CHOICES = [("FREE", "Free"), ("CHEAP", "Cheap"), ("MODERATE", "Moderate"), ("EXPENSIVE", "Expensive")]
SPOT_TYPE_CHOICES = [
    ("CAFE", "Cafe"),
    ("LIBRARY", "Library"),
    ("COWORKING", "Coworking"),
    ("PARK", "Park"),
    ("OTHER", "Other"),
]


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Spot",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=200)),
                ("description", models.TextField(blank=True, null=True)),
                ("address", models.CharField(max_length=255)),
                ("city", models.CharField(max_length=120)),
                ("country", models.CharField(max_length=120)),
                ("latitude", models.FloatField(validators=[django.core.validators.MinValueValidator(-90.0), django.core.validators.MaxValueValidator(90.0)])),
                ("longitude", models.FloatField(validators=[django.core.validators.MinValueValidator(-180.0), django.core.validators.MaxValueValidator(180.0)])),
                ("has_wifi", models.BooleanField(default=False)),
                ("has_power", models.BooleanField(default=False)),
                ("noise_level", models.CharField(choices=NOISE_LEVEL_CHOICES, default="MODERATE", max_length=16)),
                ("price_range", models.CharField(choices=PRICE_RANGE_CHOICES, default="MODERATE", max_length=16)),
                ("spot_type", models.CharField(choices=SPOT_TYPE_CHOICES, db_column="type", default="OTHER", max_length=16)),
                ("opening_hours", models.CharField(blank=True, max_length=120, null=True)),
                ("cover_image", models.URLField(blank=True, max_length=500, null=True)),
                ("images", models.JSONField(blank=True, default=list)),
                ("playlist_url", models.URLField(blank=True, max_length=500, null=True)),
                ("verified", models.BooleanField(default=False)),
                ("average_rating", models.FloatField(default=0)),
                ("review_count", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("owner", models.ForeignKey(db_column="created_by_id", on_delete=models.deletion.CASCADE, related_name="spots", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "db_table": "spots",
                "ordering": ("-created_at",),
            },
        ),
        migrations.CreateModel(
            name="Review",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("rating", models.PositiveSmallIntegerField(validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(5)])),
                ("comment", models.TextField(blank=True, null=True)),
                ("images", models.JSONField(blank=True, default=list)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("spot", models.ForeignKey(db_column="spot_id", on_delete=models.deletion.CASCADE, related_name="reviews", to="workspot.spot")),
                ("user", models.ForeignKey(db_column="user_id", on_delete=models.deletion.CASCADE, related_name="reviews", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "db_table": "reviews",
                "ordering": ("-created_at",),
            },
        ),
        migrations.CreateModel(
            name="Favorite",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("spot", models.ForeignKey(db_column="spot_id", on_delete=models.deletion.CASCADE, related_name="favorites", to="workspot.spot")),
                ("user", models.ForeignKey(db_column="user_id", on_delete=models.deletion.CASCADE, related_name="favorites", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "db_table": "favorites",
                "ordering": ("-created_at",),
            },
        ),
        migrations.AddIndex(
            model_name="spot",
            index=models.Index(fields=["has_wifi", "has_power", "spot_type"], name="idx_spots_amenities"),
        ),
        migrations.AddIndex(
            model_name="spot",
            index=models.Index(fields=["owner", "created_at"], name="idx_spots_owner_created"),
        ),
        migrations.AddIndex(
            model_name="review",
            index=models.Index(fields=["spot", "created_at"], name="idx_reviews_spot_created"),
        ),
        migrations.AddConstraint(
            model_name="review",
            constraint=models.UniqueConstraint(fields=("user", "spot"), name="uniq_reviews_user_spot"),
        ),
        migrations.AddConstraint(
            model_name="review",
            constraint=models.CheckConstraint(condition=models.Q(("rating__gte", 1), ("rating__lte", 5)), name="chk_reviews_rating_range"),
        ),
        migrations.AddConstraint(
            model_name="favorite",
            constraint=models.UniqueConstraint(fields=("user", "spot"), name="uniq_favorites_user_spot"),
        ),
    ]
