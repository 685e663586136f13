# middleware/error_handler.py
from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware
import logging
import traceback
from typing import Callable

logger = logging.getLogger(__name__)


def _error_body(error: str, message: str, request: Request) -> dict:
    return {
        "success": False,
        "error": error,
        "message": message,
        "path": str(request.url.path)
    }


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Maps exceptions escaping the routers to JSON error envelopes.
    Store and cache outages become 503 so clients can retry.
    """

    async def dispatch(self, request: Request, call_next: Callable):
        try:
            return await call_next(request)

        except HTTPException:
            raise

        except ValueError as e:
            logger.warning(f"Validation error on {request.url}: {str(e)}")
            return JSONResponse(status_code=400, content=_error_body("VALIDATION_ERROR", str(e), request))

        except (ConnectionError, PyMongoError, RedisError) as e:
            logger.error(f"Backing store error on {request.url}: {str(e)}")
            return JSONResponse(
                status_code=503,
                content=_error_body("SERVICE_UNAVAILABLE", "Database connection error", request)
            )

        except Exception as e:
            logger.error(f"Unexpected error on {request.url}: {str(e)}")
            logger.error(f"Traceback: {traceback.format_exc()}")
            return JSONResponse(
                status_code=500,
                content=_error_body("INTERNAL_ERROR", "An unexpected error occurred", request)
            )
