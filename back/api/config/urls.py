from django.contrib import admin
from django.urls import path
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView
from workspot.favorite_views import FavoriteCheckView, FavoriteDetailView, FavoritesView
from workspot.review_views import ReviewDetailView, SpotReviewsView
from workspot.user_views import MySpotsView, MyStatsView
from workspot.views import PingView, SpotDetailView, SpotsView
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView, SpectacularRedocView

urlpatterns = [
    path('admin/', admin.site.urls),
    path('ping', PingView.as_view(), name='ping'),
    # 認証（トークン発行/更新は simplejwt に委譲）
    path('auth/token', TokenObtainPairView.as_view(), name='auth-token'),
    path('auth/token/refresh', TokenRefreshView.as_view(), name='auth-token-refresh'),
    # スポット検索（設備/種別フィルタ + 半径フィルタ）・作成
    path('spots', SpotsView.as_view(), name='spots'),
    # スポット詳細・更新・削除
    path('spots/<uuid:spot_id>', SpotDetailView.as_view(), name='spot-detail'),
    # レビュー
    path('reviews/spots/<uuid:spot_id>', SpotReviewsView.as_view(), name='spot-reviews'),
    path('reviews/<uuid:review_id>', ReviewDetailView.as_view(), name='review-detail'),
    # お気に入り
    path('favorites', FavoritesView.as_view(), name='favorites'),
    path('favorites/check/<uuid:spot_id>', FavoriteCheckView.as_view(), name='favorite-check'),
    path('favorites/<uuid:favorite_id>', FavoriteDetailView.as_view(), name='favorite-detail'),
    # 自分の集計・登録スポット
    path('users/me/stats', MyStatsView.as_view(), name='me-stats'),
    path('users/me/spots', MySpotsView.as_view(), name='me-spots'),
    # OpenAPI スキーマ（JSON）
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    # Swagger UI（/api/schema/ を参照）
    path('api/schema/swagger-ui/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
    # Redoc UI（/api/schema/ を参照）
    path('api/schema/redoc/', SpectacularRedocView.as_view(url_name='schema'), name='redoc'),
]
