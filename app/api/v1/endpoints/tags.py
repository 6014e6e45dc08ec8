"""
Tag endpoints
"""
from fastapi import APIRouter, Depends, Query

from app.core.services import ServiceContainer, get_services
from app.api.v1.schemas.tag import TagListResponse

router = APIRouter(prefix="/tags", tags=["Tags"])


@router.get("/search", response_model=TagListResponse)
async def search_tags(
    name: str = Query(..., min_length=1),
    services: ServiceContainer = Depends(get_services)
):
    """Tags whose name contains the query"""
    return TagListResponse(tags=await services.tags.search(name))
