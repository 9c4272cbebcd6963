from functools import lru_cache
from typing import Optional

from fastapi import Header, HTTPException

from gymbooking.core.config_loader import load_gym_config
from gymbooking.core.errors import BookingError
from gymbooking.services.session import GymSession, open_session

@lru_cache
def get_gym_config() -> dict:
    return load_gym_config()

def bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return token.strip()

async def get_session(
    authorization: Optional[str] = Header(None),
    x_refresh_token: Optional[str] = Header(None),
) -> GymSession:
    """One explicit session per request, resumed from the caller's tokens."""
    try:
        return await open_session(get_gym_config(), bearer_token(authorization), x_refresh_token)
    except BookingError as e:
        raise HTTPException(status_code=503, detail=e.message)
