"""
Enumerations for domain models
"""
from enum import Enum


class Unit(str, Enum):
    """Ingredient measuring units"""
    GRAM = "g"
    KILOGRAM = "kg"
    MILLILITER = "ml"
    LITER = "l"
    TEASPOON = "tsp"
    TABLESPOON = "tbsp"
    CUP = "cup"
    PIECE = "piece"
    PINCH = "pinch"


class UserRole(str, Enum):
    """User roles"""
    USER = "user"
    ADMIN = "admin"


class RatingOperation(str, Enum):
    """Mutations supported by the rating aggregator"""
    ADD = "add"
    UPDATE = "update"
    REMOVE = "remove"


class ListOperation(str, Enum):
    """Mutations on per-user recipe lists (favorites, cook list)"""
    ADD = "add"
    REMOVE = "remove"


class ResolutionTarget(str, Enum):
    """Collaborator a recipe reference is resolved through"""
    TAG = "tag"
    USER = "user"
    RATING = "rating"
    PHOTO = "photo"
    FAVORITE = "favorite"
    COOK_LIST = "cook_list"
    RECIPE = "recipe"


class FilterType(str, Enum):
    """Recipe provider query kinds"""
    USER = "user"
    NAME = "name"
    TAG = "tag"
    RATING = "rating"
    NAME_AND_TAGS = "name_and_tags"
    RATING_AND_NAME = "rating_and_name"
    RATING_AND_TAGS = "rating_and_tags"
    RATING_AND_NAME_AND_TAGS = "rating_and_name_and_tags"
    FEATURED = "featured"
    INTERNAL = "internal"
