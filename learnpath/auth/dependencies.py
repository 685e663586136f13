# auth/dependencies.py
import logging
from typing import Any, Dict, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from redis.asyncio import Redis

from learnpath.auth.jwt import decode_token
from learnpath.deps import get_redis
from learnpath.services.cache_keys import blacklisted_jti_key
from learnpath.services.unlock_types import ANONYMOUS_USER_ID

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")
optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


async def _user_from_token(token: str, r: Redis) -> Dict[str, Any]:
    try:
        payload = decode_token(token)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))

    jti = payload.get("jti")
    if jti and await r.get(blacklisted_jti_key(jti)):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token revoked")

    try:
        user_id = int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token subject")

    return {"user_id": user_id, "role": payload.get("role", "student")}


def _anonymous() -> Dict[str, Any]:
    return {"user_id": ANONYMOUS_USER_ID, "role": "anonymous"}


async def get_current_user(token: str = Depends(oauth2_scheme), r: Redis = Depends(get_redis)) -> Dict[str, Any]:
    return await _user_from_token(token, r)


async def get_optional_user(
    token: Optional[str] = Depends(optional_oauth2_scheme),
    r: Redis = Depends(get_redis),
) -> Dict[str, Any]:
    # no usable token: browse as anonymous, with no completion records
    if not token:
        return _anonymous()
    try:
        return await _user_from_token(token, r)
    except HTTPException as e:
        logger.debug(f"Optional auth fell back to anonymous: {e.detail}")
        return _anonymous()


def require_role(*roles: str):
    async def role_checker(user=Depends(get_current_user)):
        if user["role"] not in roles:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
        return user
    return role_checker
