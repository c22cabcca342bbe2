"""Optional bearer token authentication for the sync endpoints."""

from fastapi import Header, HTTPException

from .config import get_settings


async def verify_sync_token(authorization: str | None = Header(default=None)) -> None:
    """Validate the bearer token when SYNC_API_KEY is configured."""
    api_key = get_settings().SYNC_API_KEY
    if not api_key:
        return
    if authorization != f"Bearer {api_key}":
        raise HTTPException(status_code=401, detail="Invalid or missing bearer token")
