"""
Tag API schemas
"""
from pydantic import BaseModel
from typing import List

from app.domain.models import Tag


class TagListResponse(BaseModel):
    """Tags matching a search"""
    tags: List[Tag]
