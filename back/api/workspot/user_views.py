from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from workspot.payloads import serialize_spots, serialize_stats
from workspot.views import actor_id
from workspot.wiring import activity_service


class MyStatsView(APIView):
    """登録スポット数・レビュー数・お気に入り数。"""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(serialize_stats(activity_service.stats(actor_id(request))))


class MySpotsView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(serialize_spots(activity_service.my_spots(actor_id(request))))
