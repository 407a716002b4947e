import asyncio

import httpx
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from jobsearch.api.auth import router as auth_router
from jobsearch.api.geo import router as geo_router
from jobsearch.api.results import router as results_router
from jobsearch.api.search import router as search_router
from jobsearch.auth import require_api_token
from jobsearch.config import get_settings

app = FastAPI(
    title="Job Search",
    description="French job offer and company search",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://localhost:3001"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(geo_router)
app.include_router(auth_router, dependencies=[Depends(require_api_token)])
app.include_router(search_router, dependencies=[Depends(require_api_token)])
app.include_router(results_router, dependencies=[Depends(require_api_token)])


async def _check_external_api(
    name: str,
    url: str,
    *,
    configured: bool,
) -> tuple[str, dict[str, str | int]]:
    if not configured:
        return name, {"status": "not_configured"}
    try:
        async with httpx.AsyncClient(timeout=3.0) as client:
            response = await client.get(url)
        if response.status_code >= 500:
            return name, {"status": "error", "code": response.status_code}
        return name, {"status": "ok", "code": response.status_code}
    except httpx.HTTPError:
        return name, {"status": "error"}


@app.get("/health")
async def health() -> dict:
    settings = get_settings()
    status = "ok"
    external_status: dict[str, dict[str, str | int]] = {}

    checks = [
        _check_external_api(
            "france_travail",
            settings.france_travail_api_base_url,
            configured=settings.has_france_travail_credentials(),
        ),
        _check_external_api(
            "insee_sirene",
            settings.insee_api_base_url,
            configured=True,
        ),
        _check_external_api(
            "pappers",
            settings.pappers_api_base_url,
            configured=settings.has_pappers_api_key(),
        ),
    ]

    results = await asyncio.gather(*checks)
    for name, result in results:
        external_status[name] = result
        if result.get("status") == "error":
            status = "degraded"

    return {"status": status, "external_apis": external_status}


@app.exception_handler(Exception)
async def unhandled_exception_handler(_, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={"error": "internal_server_error", "message": str(exc)},
    )
