from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from jobsearch.api.deps import SearchServiceDep
from jobsearch.errors import AuthenticationError, ConfigurationError

router = APIRouter(prefix="/api/auth", tags=["auth"])


class TokenRequest(BaseModel):
    client_id: str | None = None
    client_secret: str | None = None
    scope: str | None = None


@router.post("/token")
async def request_token(
    service: SearchServiceDep, payload: TokenRequest | None = None
) -> dict:
    """Authenticate against France Travail; the token stays server-side."""
    overrides = payload.model_dump(exclude_none=True) if payload else {}
    try:
        await service.authenticate(**overrides)
    except ConfigurationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except AuthenticationError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return {"status": "authenticated"}
