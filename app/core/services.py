"""
Service wiring

Every service is constructed once at startup from explicit client handles
and reached by the endpoints through the `get_services` dependency.
"""
from dataclasses import dataclass
from fastapi import Request
from supabase import Client
import logging

from app.core.config import Settings
from app.core.events import NotificationBus
from app.services.photo_service import PhotoService
from app.services.rating_service import RatingService
from app.services.recipe_assembler import RecipeAssembler
from app.services.recipe_provider_service import RecipeProviderService
from app.services.recipe_service import RecipeService
from app.services.tag_service import TagService
from app.services.user_recipe_list_service import CookListService, FavoriteService, RecentService
from app.services.user_service import UserService

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """All services of one application instance"""
    event_bus: NotificationBus
    tags: TagService
    photos: PhotoService
    users: UserService
    ratings: RatingService
    favorites: FavoriteService
    cook_list: CookListService
    recents: RecentService
    assembler: RecipeAssembler
    recipes: RecipeService
    provider: RecipeProviderService


def build_services(supabase: Client, event_bus: NotificationBus, settings: Settings) -> ServiceContainer:
    """Construct the services and subscribe their event handlers"""
    tags = TagService(supabase)
    photos = PhotoService(supabase, settings.PHOTO_BUCKET)
    users = UserService(supabase, photos)
    ratings = RatingService(supabase, event_bus)
    favorites = FavoriteService(supabase)
    cook_list = CookListService(supabase)
    recents = RecentService(supabase, size=settings.RECENTS_SIZE)

    assembler = RecipeAssembler(
        tag_service=tags,
        user_service=users,
        rating_service=ratings,
        photo_service=photos,
        favorite_service=favorites,
        cook_list_service=cook_list,
        event_bus=event_bus,
        timeout=settings.RESOLUTION_TIMEOUT_SECONDS,
        concurrency=settings.ASSEMBLY_CONCURRENCY,
    )
    recipes = RecipeService(supabase, assembler, users, event_bus)
    provider = RecipeProviderService(
        supabase,
        assembler,
        recipes,
        ratings,
        tags,
        featured_limit=settings.FEATURED_LIMIT,
        default_page_size=settings.DEFAULT_PAGE_SIZE,
        max_page_size=settings.MAX_PAGE_SIZE,
    )

    for service in (recipes, ratings, favorites, cook_list, recents, photos):
        service.register_handlers(event_bus)
    logger.info("Services built and event handlers registered")

    return ServiceContainer(
        event_bus=event_bus,
        tags=tags,
        photos=photos,
        users=users,
        ratings=ratings,
        favorites=favorites,
        cook_list=cook_list,
        recents=recents,
        assembler=assembler,
        recipes=recipes,
        provider=provider,
    )


def get_services(request: Request) -> ServiceContainer:
    """FastAPI dependency returning the services built at startup"""
    return request.app.state.services
