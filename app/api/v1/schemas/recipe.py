"""
Recipe API schemas
"""
from pydantic import BaseModel, Field
from typing import List, Optional

from app.api.v1.schemas.common import PaginatedResponse
from app.domain.models import AssembledRecipe, Ingredient


# ============= Request Schemas =============

class RecipeCreateRequest(BaseModel):
    """Create recipe request"""
    name: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    ingredients: List[Ingredient] = Field(default_factory=list)
    steps: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)  # tag names
    picture: Optional[str] = None  # stored file name


class RecipeUpdateRequest(BaseModel):
    """Update recipe request"""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    ingredients: Optional[List[Ingredient]] = None
    steps: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    picture: Optional[str] = None


class RecipeFilterRequest(BaseModel):
    """Combined recipe search; empty criteria are ignored"""
    text: str = ""
    rating_min: float = Field(0, ge=0, le=5.0)
    tags: List[str] = Field(default_factory=list)


class RecipeTagsRequest(BaseModel):
    """Recipes by tag names"""
    tags: List[str] = Field(..., min_length=1)
    intersect: bool = False


# ============= Response Schemas =============

class RecipeResponse(AssembledRecipe):
    """Recipe with tags, owner, rating and picture resolved"""
    pass


class RecipeListResponse(PaginatedResponse):
    """Paginated recipes"""
    items: List[AssembledRecipe]


class RecipeDeleteResponse(BaseModel):
    """Recipe deletion result"""
    message: str
    failed_cleanups: List[str] = Field(default_factory=list)
