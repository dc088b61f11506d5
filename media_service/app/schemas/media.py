from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class MediaResponse(BaseModel):
    id: str
    original_filename: str
    content_type: str
    size: int
    user_id: str
    product_id: Optional[str] = None
    url: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MediaIdsRequest(BaseModel):
    """Body of the internal by-ids routes"""

    ids: List[str] = Field(default_factory=list)
