from typing import Annotated

from fastapi import Depends, Request

from jobsearch.config import Settings, get_settings
from jobsearch.services.search import SearchService


def get_search_service(request: Request) -> SearchService:
    """The process-wide search service, created on first use."""
    service = getattr(request.app.state, "search_service", None)
    if service is None:
        service = SearchService(get_settings())
        request.app.state.search_service = service
    return service


SettingsDep = Annotated[Settings, Depends(get_settings)]
SearchServiceDep = Annotated[SearchService, Depends(get_search_service)]
