# auth/jwt.py
# Tokens are minted by the auth service; this side only verifies them.
from jwt import decode, ExpiredSignatureError, InvalidTokenError
from learnpath.config import settings
import logging

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"

def decode_token(token: str) -> dict:
    try:
        return decode(token, settings.JWT_SECRET, algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        logger.warning("Attempt to use expired token")
        raise ValueError("Token expired")
    except InvalidTokenError:
        logger.warning("Attempt to use invalid token")
        raise ValueError("Invalid token")
