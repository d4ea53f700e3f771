from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from workspot.exceptions import error_response
from workspot.payloads import load_users, serialize_review, serialize_reviews
from workspot.serializers import ReviewWriteSerializer
from workspot.views import actor_id
from workspot.wiring import review_service


class SpotReviewsView(APIView):
    """スポットのレビュー一覧（新しい順）と投稿。
    - 投稿は1ユーザー1スポットにつき1件（重複は409）
    - 投稿後にスポットの平均★/件数を再集計する
    """

    def get_permissions(self):
        if self.request.method == "POST":
            return [IsAuthenticated()]
        return [AllowAny()]

    def get(self, request, spot_id):
        reviews = review_service.list_for_spot(str(spot_id))
        return Response(serialize_reviews(reviews))

    def post(self, request, spot_id):
        serializer = ReviewWriteSerializer(data=request.data)
        if not serializer.is_valid():
            return error_response(
                code="VALIDATION_ERROR",
                message="入力内容に誤りがあります",
                details=serializer.errors,
            )
        data = serializer.validated_data
        review = review_service.create_review(
            str(spot_id),
            actor_id(request),
            data["rating"],
            comment=data.get("comment"),
            images=data.get("images"),
        )
        return Response(serialize_review(review, load_users([review.user_id])), status=status.HTTP_201_CREATED)


class ReviewDetailView(APIView):
    """レビュー詳細・更新・削除。更新/削除は投稿者のみ（それ以外は403）。"""

    def get_permissions(self):
        if self.request.method in ("PATCH", "DELETE"):
            return [IsAuthenticated()]
        return [AllowAny()]

    def get(self, request, review_id):
        review = review_service.get_review(str(review_id))
        return Response(serialize_review(review, load_users([review.user_id])))

    def patch(self, request, review_id):
        serializer = ReviewWriteSerializer(data=request.data, partial=True)
        if not serializer.is_valid():
            return error_response(
                code="VALIDATION_ERROR",
                message="入力内容に誤りがあります",
                details=serializer.errors,
            )
        review = review_service.update_review(str(review_id), actor_id(request), dict(serializer.validated_data))
        return Response(serialize_review(review, load_users([review.user_id])))

    def delete(self, request, review_id):
        review_service.delete_review(str(review_id), actor_id(request))
        return Response(status=status.HTTP_204_NO_CONTENT)
