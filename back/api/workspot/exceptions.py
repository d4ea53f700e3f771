import logging
import uuid
from typing import Any

from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_default_exception_handler
from rest_framework.exceptions import (
    ValidationError,
    NotAuthenticated,
    AuthenticationFailed,
    PermissionDenied,
    NotFound,
    MethodNotAllowed,
    ParseError,
    UnsupportedMediaType,
    Throttled,
    APIException,
)

from workspot.errors import StorageError, WorkspotError

logger = logging.getLogger(__name__)


def _new_trace_id() -> str:
    """トレースIDを生成する（例: req_ab12cd34ef56）。
    - クライアント問い合わせ時の追跡に利用する。
    """
    return f"req_{uuid.uuid4().hex[:12]}"


def error_response(code: str, message: str, details: dict | list | None = None, status_code: int = 400) -> Response:
    """共通のエラーレスポンスを生成する。
    - code: エラー分類（VALIDATION_ERROR / UNAUTHORIZED / FORBIDDEN / NOT_FOUND / CONFLICT / STORAGE_ERROR / SERVER_ERROR など）
    - message: 人が読める説明
    - details: フィールドごとの詳細や補足
    - status_code: HTTPステータスコード
    """
    payload = {
        "error": {
            "code": code,
            "message": message,
            "details": details or {},
            "trace_id": _new_trace_id(),
        }
    }
    return Response(payload, status=status_code)


def custom_exception_handler(exc: Exception, context: dict) -> Response:
    """例外を共通フォーマット { error: { code, message, details, trace_id } } に変換するハンドラ。
    - サービス層のドメイン例外（WorkspotError）は自身の code/status をそのまま使う
    - DRFの例外は既定ハンドラでステータスを決めてからコード/メッセージを割り当てる
    - 想定外の例外は 500 SERVER_ERROR として扱う。
    """
    if isinstance(exc, WorkspotError):
        if isinstance(exc, StorageError):
            logger.error(f"Storage failure in {context.get('view').__class__.__name__}: {exc}", exc_info=exc)
        return error_response(code=exc.code, message=exc.message, details=exc.details, status_code=exc.status_code)

    resp = drf_default_exception_handler(exc, context)

    if resp is not None:
        status_code = resp.status_code
        code = "SERVER_ERROR"
        message = "internal server error"
        details: Any = None

        # 代表的なDRF例外ごとにコード/メッセージをマッピング
        if isinstance(exc, ValidationError):
            code = "VALIDATION_ERROR"
            message = "validation error"
            details = resp.data
        elif isinstance(exc, (NotAuthenticated, AuthenticationFailed)):
            code = "UNAUTHORIZED"
            message = "authentication required"
        elif isinstance(exc, PermissionDenied):
            code = "FORBIDDEN"
            message = "forbidden"
        elif isinstance(exc, NotFound):
            code = "NOT_FOUND"
            message = "not found"
        elif isinstance(exc, MethodNotAllowed):
            code = "METHOD_NOT_ALLOWED"
            message = "method not allowed"
        elif isinstance(exc, Throttled):
            code = "RATE_LIMITED"
            message = "too many requests"
            details = {"wait": getattr(exc, "wait", None)}
        elif isinstance(exc, ParseError):
            code = "BAD_REQUEST"
            message = "request parse error"
        elif isinstance(exc, UnsupportedMediaType):
            code = "UNSUPPORTED_MEDIA_TYPE"
            message = "unsupported media type"
        elif status_code == 409:
            code = "CONFLICT"
            message = "conflict"
        elif isinstance(exc, APIException):
            # 汎用API例外：DRFが整形したメッセージを尊重しつつコードは一般化
            code = "API_ERROR"
            message = str(getattr(exc, "detail", "api error")) or "api error"
            details = resp.data if isinstance(resp.data, (dict, list)) else None
        elif status_code == 404:
            # Http404（get_object_or_404 等）
            code = "NOT_FOUND"
            message = "not found"

        # 共通ペイロードに置き換えて返却
        resp.data = {
            "error": {
                "code": code,
                "message": message,
                "details": details or {},
                "trace_id": _new_trace_id(),
            }
        }
        return resp

    # DRFのハンドラで処理できなかった例外（想定外）
    logger.error(f"Unhandled exception: {exc!r}", exc_info=exc)
    return error_response(code="SERVER_ERROR", message="internal server error", status_code=500)
