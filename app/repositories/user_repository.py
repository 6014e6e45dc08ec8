"""
User repository
"""
from supabase import Client

from app.repositories.base import BaseRepository


class UserRepository(BaseRepository):
    """Repository for user profiles"""

    def __init__(self, supabase: Client):
        super().__init__(supabase, "users")
