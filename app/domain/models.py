"""
Core domain models
"""
import math
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from app.domain.enums import RatingOperation, ListOperation, Unit, UserRole

# Reserved values meaning "reference intentionally absent"
UNRATED = ""
NO_PICTURE = "NO_PIC"


# ============= Recipe Models =============

class Ingredient(BaseModel):
    """Single ingredient with amount and unit"""
    name: str
    amount: float
    unit: Unit


class RecipeRecord(BaseModel):
    """Recipe as persisted: every reference is an id"""
    id: str
    name: str
    description: str = ""
    ingredients: List[Ingredient] = Field(default_factory=list)
    steps: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)  # tag ids
    owner: str  # user id
    rating_ref: str = UNRATED  # rating collection id
    picture: str = NO_PICTURE  # file name
    created_at: datetime
    updated_at: datetime

    @property
    def is_rated(self) -> bool:
        return self.rating_ref != UNRATED

    @property
    def has_picture(self) -> bool:
        return self.picture != NO_PICTURE


class Tag(BaseModel):
    """Recipe tag"""
    id: str
    name: str


# ============= Rating Models =============

class RatingEntry(BaseModel):
    """One user's rating of a recipe"""
    user_id: str
    rating: float


def calculate_average(entries: List[RatingEntry]) -> Optional[float]:
    """Mean of all ratings; None when there are no ratings"""
    if not entries:
        return None
    return math.fsum(entry.rating for entry in entries) / len(entries)


class RatingCollection(BaseModel):
    """Every rating of one recipe plus the derived average"""
    id: str
    recipe_id: str
    ratings: List[RatingEntry] = Field(default_factory=list)
    avg_rating: Optional[float] = None

    def index_of(self, user_id: str) -> int:
        """Position of the user's entry, -1 if the user has not rated"""
        for index, entry in enumerate(self.ratings):
            if entry.user_id == user_id:
                return index
        return -1

    def recalculate(self) -> "RatingCollection":
        """Recompute the average from scratch"""
        self.avg_rating = calculate_average(self.ratings)
        return self


class RatingInfo(BaseModel):
    """Aggregate rating shown with a recipe"""
    average_rating: float = 0
    number_of_ratings: int = 0


class RatingResponse(BaseModel):
    """Outcome of a rating mutation; business-rule rejections have success=False"""
    success: bool
    method: RatingOperation
    recipe_id: str
    user_id: str
    message: str


# ============= User Models =============

class SanitizedUser(BaseModel):
    """Public view of a user"""
    id: str
    username: str
    joined_at: Optional[datetime] = None
    avatar_url: str = ""
    role: UserRole = UserRole.USER


class ListResponse(BaseModel):
    """Outcome of a favorites / cook list mutation"""
    success: bool
    method: ListOperation
    recipe_id: str
    user_id: str
    message: str


# ============= Assembled Recipe =============

class AssembledRecipe(BaseModel):
    """
    Client-facing recipe with every reference resolved.
    Viewer fields stay None when the request has no viewer.
    """
    id: str
    name: str
    description: str
    ingredients: List[Ingredient]
    steps: List[str]
    tags: List[str]
    owner: SanitizedUser
    rating: RatingInfo
    picture: str = ""
    created_at: datetime
    updated_at: datetime

    is_favorite: Optional[bool] = None
    my_rating: Optional[float] = None
    is_on_cook_list: Optional[bool] = None


class RecipePage(BaseModel):
    """One page of assembled recipes"""
    items: List[AssembledRecipe]
    total: int
    page: int
    page_size: int
    total_pages: int
