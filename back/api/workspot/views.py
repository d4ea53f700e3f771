from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from workspot.exceptions import error_response  # 共通エラーフォーマッタ
from workspot.payloads import load_users, serialize_reviews, serialize_spot, serialize_spots
from workspot.serializers import SpotSearchSerializer, SpotWriteSerializer, to_spot_fields
from workspot.services.contracts import GeoQuery, SpotFilters, SpotType
from workspot.services.geo import Coordinates
from workspot.wiring import review_service, search_service, spot_service


def actor_id(request) -> str:
    return str(request.user.pk)


class PingView(APIView):
    permission_classes = [AllowAny]

    def get(self, request):
        return Response({"pong": True})


class SpotsView(APIView):
    """スポット検索と作成。
    GET 任意: latitude, longitude, radius(km), hasWifi, hasPower, type
    - 位置条件は latitude/longitude/radius の3つ揃いでのみ有効（部分指定は400）
    - 並び順は作成日時の新しい順（ページングなし）
    POST は要認証。作成者がそのまま所有者になる。
    """

    def get_permissions(self):
        if self.request.method == "POST":
            return [IsAuthenticated()]
        return [AllowAny()]

    def get(self, request):
        serializer = SpotSearchSerializer(data=request.query_params.dict())
        if not serializer.is_valid():
            return error_response(
                code="VALIDATION_ERROR",
                message="検索条件に誤りがあります",
                details=serializer.errors,
            )
        data = serializer.validated_data

        geo = None
        if "radius" in data:
            geo = GeoQuery(center=Coordinates(data["latitude"], data["longitude"]), radius_km=data["radius"])
        filters = SpotFilters(
            has_wifi=data.get("hasWifi"),
            has_power=data.get("hasPower"),
            spot_type=SpotType(data["type"]) if data.get("type") else None,
            geo=geo,
        )
        spots = search_service.find(filters)
        return Response(serialize_spots(spots))

    def post(self, request):
        serializer = SpotWriteSerializer(data=request.data)
        if not serializer.is_valid():
            return error_response(
                code="VALIDATION_ERROR",
                message="入力内容に誤りがあります",
                details=serializer.errors,
            )
        spot = spot_service.create(actor_id(request), to_spot_fields(serializer.validated_data))
        return Response(serialize_spot(spot, load_users([spot.owner_id])), status=status.HTTP_201_CREATED)


class SpotDetailView(APIView):
    """スポット詳細（レビュー一覧付き）・更新・削除。
    - 更新/削除は所有者のみ。所有者以外は 404（存在を明かさない）
    """

    def get_permissions(self):
        if self.request.method in ("PATCH", "DELETE"):
            return [IsAuthenticated()]
        return [AllowAny()]

    def get(self, request, spot_id):
        spot = spot_service.get(str(spot_id))
        payload = serialize_spot(spot, load_users([spot.owner_id]))
        # 詳細ではレビュー（投稿者付き、新しい順）も返す
        payload["reviews"] = serialize_reviews(review_service.list_for_spot(spot.id))
        return Response(payload)

    def patch(self, request, spot_id):
        serializer = SpotWriteSerializer(data=request.data, partial=True)
        if not serializer.is_valid():
            return error_response(
                code="VALIDATION_ERROR",
                message="入力内容に誤りがあります",
                details=serializer.errors,
            )
        spot = spot_service.update(str(spot_id), actor_id(request), to_spot_fields(serializer.validated_data))
        return Response(serialize_spot(spot, load_users([spot.owner_id])))

    def delete(self, request, spot_id):
        spot_service.delete(str(spot_id), actor_id(request))
        return Response(status=status.HTTP_204_NO_CONTENT)
