from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from workspot.exceptions import error_response
from workspot.payloads import serialize_favorites
from workspot.serializers import FavoriteCreateSerializer
from workspot.views import actor_id
from workspot.wiring import favorite_service, spot_store


class FavoritesView(APIView):
    """自分のお気に入り一覧（新しい順、スポット情報付き）と追加。"""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        favorites = favorite_service.list(actor_id(request))
        spots = spot_store.get_many(favorite.spot_id for favorite in favorites)
        return Response(serialize_favorites(favorites, spots))

    def post(self, request):
        serializer = FavoriteCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return error_response(
                code="VALIDATION_ERROR",
                message="入力内容に誤りがあります",
                details=serializer.errors,
            )
        favorite = favorite_service.create(actor_id(request), str(serializer.validated_data["spotId"]))
        spots = spot_store.get_many([favorite.spot_id])
        return Response(serialize_favorites([favorite], spots)[0], status=status.HTTP_201_CREATED)


class FavoriteCheckView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, spot_id):
        return Response({"isFavorite": favorite_service.is_favorite(actor_id(request), str(spot_id))})


class FavoriteDetailView(APIView):
    """お気に入りの削除。他人のお気に入りは 404 として扱う。"""
    permission_classes = [IsAuthenticated]

    def delete(self, request, favorite_id):
        favorite_service.remove(str(favorite_id), actor_id(request))
        return Response(status=status.HTTP_204_NO_CONTENT)
