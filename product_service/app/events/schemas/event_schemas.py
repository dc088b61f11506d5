"""
Product Service Event Schemas
=============================

Wire format of the cascade topics.

``user.deleted``     payload is the bare user id.
``product.deleted``  payload is ``{"id": "...", "mediaIds": [...]}``, or the
                     bare product id when the document cannot be serialized.
"""

import json
from typing import List

from pydantic import BaseModel, ConfigDict, Field
from pydantic_core import PydanticSerializationError

from ...core.exceptions import MalformedPayloadError

# ==============================================
# TOPIC NAMES
# ==============================================

USER_DELETED = "user.deleted"
PRODUCT_DELETED = "product.deleted"


# ==============================================
# PAYLOAD SCHEMAS
# ==============================================


class ProductDeletedEvent(BaseModel):
    """Structured product.deleted payload"""

    id: str
    media_ids: List[str] = Field(default_factory=list, alias="mediaIds")

    model_config = ConfigDict(populate_by_name=True)

    def to_payload(self) -> str:
        return self.model_dump_json(by_alias=True)


class CascadeResult(BaseModel):
    """Outcome of applying one cascade event, logged as the idempotency record"""

    topic: str
    target_id: str
    deleted: int = 0
    already_absent: int = 0
    published: int = 0

    @property
    def was_noop(self) -> bool:
        return self.deleted == 0


def encode_product_deleted(product_id: str, media_ids: List[str]) -> str:
    """Canonical product.deleted payload, degrading to the bare id"""
    try:
        return ProductDeletedEvent(id=product_id, media_ids=list(media_ids)).to_payload()
    except (PydanticSerializationError, TypeError, ValueError):
        return product_id


def parse_user_deleted(raw: str) -> str:
    """Extract the user id from a user.deleted payload"""
    text = (raw or "").strip()

    if text.startswith('"'):
        # Tolerate producers that JSON-encode the bare id
        try:
            value = json.loads(text)
        except ValueError as e:
            raise MalformedPayloadError(f"Unparseable user.deleted payload: {e}")
        text = value.strip() if isinstance(value, str) else ""

    if not text or text[0] in "{[":
        raise MalformedPayloadError(f"Unrecognized user.deleted payload: {raw!r}")
    return text
