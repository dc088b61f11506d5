"""
Media Service Event Schemas
===========================

Wire format of the cascade topics this service consumes.

``user.deleted``     payload is the bare user id.
``product.deleted``  payload is ``{"id": "...", "mediaIds": [...]}``, or the
                     bare product id (optionally JSON-quoted).
"""

import json
from typing import List, Optional

from pydantic import BaseModel, Field

from ...core.exceptions import MalformedPayloadError

# ==============================================
# TOPIC NAMES
# ==============================================

USER_DELETED = "user.deleted"
PRODUCT_DELETED = "product.deleted"


# ==============================================
# PARSED EVENTS
# ==============================================


class ProductDeletion(BaseModel):
    """
    What a product.deleted event asks for.

    When ``media_ids`` is non-empty exactly those media are deleted;
    otherwise every media whose product_id equals ``product_id``.
    """

    product_id: Optional[str] = None
    media_ids: List[str] = Field(default_factory=list)


class CascadeResult(BaseModel):
    """Outcome of one cascade delete, logged as the idempotency record"""

    topic: str
    target_id: str
    requested: int = 0
    deleted: int = 0
    already_absent: int = 0

    @property
    def was_noop(self) -> bool:
        return self.deleted == 0


def _unquote(text: str, topic: str) -> str:
    try:
        value = json.loads(text)
    except ValueError as e:
        raise MalformedPayloadError(f"Unparseable {topic} payload: {e}")
    return value.strip() if isinstance(value, str) else ""


def parse_user_deleted(raw: str) -> str:
    """Extract the user id from a user.deleted payload"""
    text = (raw or "").strip()
    if text.startswith('"'):
        text = _unquote(text, USER_DELETED)

    if not text or text[0] in "{[":
        raise MalformedPayloadError(f"Unrecognized user.deleted payload: {raw!r}")
    return text


def parse_product_deleted(raw: str) -> ProductDeletion:
    """Interpret a product.deleted payload: mediaIds, then id, then bare id"""
    text = (raw or "").strip()
    if not text:
        raise MalformedPayloadError("Empty product.deleted payload")

    if text.startswith("{"):
        try:
            node = json.loads(text)
        except ValueError as e:
            raise MalformedPayloadError(f"Unparseable product.deleted payload: {e}")

        product_id = node.get("id")
        product_id = str(product_id).strip() if product_id is not None else ""

        media_ids = node.get("mediaIds")
        if isinstance(media_ids, list):
            ids = [str(m).strip() for m in media_ids if m is not None]
            ids = [m for m in ids if m]
            if ids:
                return ProductDeletion(product_id=product_id or None, media_ids=ids)

        if product_id:
            return ProductDeletion(product_id=product_id)
        raise MalformedPayloadError(
            f"product.deleted payload has neither mediaIds nor id: {raw!r}"
        )

    if text.startswith("["):
        raise MalformedPayloadError(f"Unrecognized product.deleted payload: {raw!r}")

    if text.startswith('"'):
        text = _unquote(text, PRODUCT_DELETED)
        if not text:
            raise MalformedPayloadError("Empty product id in product.deleted payload")

    return ProductDeletion(product_id=text)
