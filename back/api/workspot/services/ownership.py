"""所有者チェック。
- 判定は actor_id == owner_id のみ
- 拒否時にどの例外を返すかはリソース種別ごとに固定する
  - spot / favorite: NotFoundError（存在自体を漏らさない）
  - review: ForbiddenError
"""

import logging

from workspot.errors import ForbiddenError, NotFoundError, WorkspotError

logger = logging.getLogger(__name__)

DENIAL_POLICY: dict[str, type[WorkspotError]] = {
    "spot": NotFoundError,
    "favorite": NotFoundError,
    "review": ForbiddenError,
}


def can_mutate(actor_id: str, owner_id: str) -> bool:
    return str(actor_id) == str(owner_id)


def ensure_can_mutate(resource: str, resource_id: str, actor_id: str, owner_id: str) -> None:
    if can_mutate(actor_id, owner_id):
        return
    logger.warning(f"Denied {resource} mutation: actor={actor_id} resource_id={resource_id}")
    error_cls = DENIAL_POLICY[resource]
    if error_cls is NotFoundError:
        raise NotFoundError(f"{resource} not found", details={f"{resource}_id": str(resource_id)})
    raise error_cls(f"you can only modify your own {resource}s", details={f"{resource}_id": str(resource_id)})
