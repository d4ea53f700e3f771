"""ドメイン例外。
- サービス層はHTTPを知らないため、ここで定義した例外だけを送出する
- HTTPステータス/エラーコードへの対応付けは exceptions.custom_exception_handler で行う
"""


class WorkspotError(Exception):
    status_code = 500
    code = "SERVER_ERROR"
    default_message = "internal server error"

    def __init__(self, message: str | None = None, details: dict | None = None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(WorkspotError):
    """対象が存在しない、または操作者から見えない。"""
    status_code = 404
    code = "NOT_FOUND"
    default_message = "not found"


class ConflictError(WorkspotError):
    """(user, spot) の組み合わせが既に存在する。"""
    status_code = 409
    code = "CONFLICT"
    default_message = "conflict"


class ForbiddenError(WorkspotError):
    status_code = 403
    code = "FORBIDDEN"
    default_message = "forbidden"


class ValidationError(WorkspotError):
    """評価値の範囲外、空のパッチ、不正な座標など。"""
    status_code = 400
    code = "VALIDATION_ERROR"
    default_message = "validation error"


class StorageError(WorkspotError):
    """ストア層の障害（接続断など）。中身は解釈せずに呼び出し元へ伝播する。"""
    status_code = 500
    code = "STORAGE_ERROR"
    default_message = "storage error"
