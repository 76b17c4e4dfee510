from fastapi import APIRouter, Depends, Query
from typing import Optional
from db.mongo import get_db
from services.search_service import SearchService
from services.serialization import make_serializable

router = APIRouter(prefix="/api/search", tags=["search"])


def init_search_routes():
    """
    Initialize search routes.
    Returns the router with the cross-entity search endpoint configured.
    """

    @router.get("")
    async def search(
        q: Optional[str] = Query(None),
        search_type: Optional[str] = Query(None, alias="type"),
        db=Depends(get_db),
    ):
        """Search across events and todo lists"""
        results = await SearchService(db).search(q, search_type)
        return make_serializable(results)

    return router
