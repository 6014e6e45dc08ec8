"""
Base repository with common database operations
"""
import asyncio
from typing import Optional, List, Dict, Any
from supabase import Client
import logging

logger = logging.getLogger(__name__)


class BaseRepository:
    """
    Base repository class with common CRUD operations.

    The Supabase client is blocking, so every query runs in a worker thread;
    this keeps concurrent lookups (asyncio.gather) actually concurrent.
    """

    def __init__(self, supabase: Client, table_name: str):
        self.supabase = supabase
        self.table_name = table_name

    def table(self):
        return self.supabase.table(self.table_name)

    async def _execute(self, build_query):
        """Run a query built by `build_query()` off the event loop"""
        return await asyncio.to_thread(lambda: build_query().execute())

    async def create(self, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Create a new record"""
        try:
            response = await self._execute(lambda: self.table().insert(data))
            return response.data[0] if response.data else None
        except Exception as e:
            logger.error(f"Error creating record in {self.table_name}: {str(e)}")
            raise

    async def get_by_id(self, record_id: str) -> Optional[Dict[str, Any]]:
        """Get a record by ID"""
        try:
            response = await self._execute(lambda: self.table().select("*").eq("id", record_id))
            return response.data[0] if response.data else None
        except Exception as e:
            logger.error(f"Error fetching record from {self.table_name}: {str(e)}")
            raise

    async def get_many(self, record_ids: List[str]) -> List[Dict[str, Any]]:
        """Get several records by ID (order follows `record_ids`, missing ids are skipped)"""
        if not record_ids:
            return []
        try:
            response = await self._execute(lambda: self.table().select("*").in_("id", record_ids))
            by_id = {row["id"]: row for row in (response.data or [])}
            return [by_id[record_id] for record_id in record_ids if record_id in by_id]
        except Exception as e:
            logger.error(f"Error fetching records from {self.table_name}: {str(e)}")
            raise

    async def update(self, record_id: str, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Update a record by ID"""
        try:
            logger.debug(f"Updating {self.table_name} id={record_id} with data keys: {list(data.keys())}")
            response = await self._execute(lambda: self.table().update(data).eq("id", record_id))
            return response.data[0] if response.data else None
        except Exception as e:
            logger.error(f"Error updating record in {self.table_name}: {str(e)}")
            raise

    async def delete(self, record_id: str) -> bool:
        """Delete a record by ID"""
        try:
            response = await self._execute(lambda: self.table().delete().eq("id", record_id))
            return len(response.data) > 0
        except Exception as e:
            logger.error(f"Error deleting record from {self.table_name}: {str(e)}")
            raise

    async def find(
        self,
        filters: Optional[Dict[str, Any]] = None,
        limit: Optional[int] = None,
        offset: int = 0,
        order_by: Optional[str] = None,
        ascending: bool = False
    ) -> List[Dict[str, Any]]:
        """Find records with optional equality filters and pagination"""
        def build():
            query = self.table().select("*")

            if filters:
                for key, value in filters.items():
                    query = query.eq(key, value)

            if order_by:
                query = query.order(order_by, desc=not ascending)

            if limit is not None:
                query = query.limit(limit).offset(offset)
            return query

        try:
            response = await self._execute(build)
            return response.data or []
        except Exception as e:
            logger.error(f"Error listing records from {self.table_name}: {str(e)}")
            raise

    async def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        """Count records with optional filtering"""
        def build():
            query = self.table().select("id", count="exact")
            if filters:
                for key, value in filters.items():
                    query = query.eq(key, value)
            return query

        try:
            response = await self._execute(build)
            return response.count or 0
        except Exception as e:
            logger.error(f"Error counting records in {self.table_name}: {str(e)}")
            raise
