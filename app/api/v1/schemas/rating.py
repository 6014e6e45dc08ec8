"""
Rating API schemas
"""
from pydantic import BaseModel, Field, field_validator


class RatingRequest(BaseModel):
    """Rate recipe request (supports half-stars: 0.5, 1.0, 1.5, ..., 5.0)"""
    rating: float = Field(..., ge=0.5, le=5.0)

    @field_validator("rating")
    @classmethod
    def validate_half_star(cls, v: float) -> float:
        if (v * 2) % 1 != 0:
            raise ValueError("Rating must be in half-star steps")
        return v


class MyRatingResponse(BaseModel):
    """The requesting user's rating, 0 when not rated"""
    recipe_id: str
    rating: float
