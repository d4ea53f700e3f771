from django.contrib import admin
from workspot.models import Favorite, Review, Spot


@admin.register(Spot)
class SpotAdmin(admin.ModelAdmin):
    list_display = ("name", "city", "spot_type", "average_rating", "review_count", "verified", "owner")
    list_filter = ("spot_type", "has_wifi", "has_power", "verified")
    search_fields = ("name", "city", "owner__email")
    # 集計値はレビュー書き込み時にのみ更新する
    readonly_fields = ("average_rating", "review_count")


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ("id", "spot", "user", "rating", "created_at")
    list_filter = ("rating",)
    search_fields = ("id", "user__email", "spot__name")


@admin.register(Favorite)
class FavoriteAdmin(admin.ModelAdmin):
    list_display = ("user", "spot", "created_at")
    search_fields = ("user__email", "spot__name")
