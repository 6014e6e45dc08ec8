"""
Supabase database client

Clients are created explicitly by the application lifespan and handed to
the services that need them; nothing here is cached at module level.
"""
from supabase import Client, create_client

from app.core.config import Settings


def create_supabase_client(settings: Settings) -> Client:
    """Client used for auth token verification (publishable key)"""
    return create_client(settings.SUPABASE_URL, settings.SUPABASE_PUBLISHABLE_KEY)


def create_supabase_admin_client(settings: Settings) -> Client:
    """Client with secret key - bypasses RLS, used by the data services"""
    return create_client(settings.SUPABASE_URL, settings.SUPABASE_SECRET_KEY)
