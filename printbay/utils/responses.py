# printbay/utils/responses.py
from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Awaitable, Callable, Dict, Optional

from fastapi import HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from printbay.core.exceptions import UploadRejected

logger = logging.getLogger("uvicorn.error")


def _payload(data: Any) -> Dict[str, Any]:
    if data is None:
        return {}
    if isinstance(data, BaseModel):
        return data.model_dump(by_alias=True, mode="json")
    return dict(data)


def success_response(data: Any = None, status_code: int = 200, **extra: Any) -> JSONResponse:
    """`{"success": true, ...payload}`"""
    body = {"success": True, **_payload(data), **extra}
    return JSONResponse(status_code=status_code, content=body)


def error_response(
    message: str,
    status_code: int = 500,
    details: Optional[Any] = None,
    **extra: Any,
) -> JSONResponse:
    """`{"success": false, "error": message}` plus any extra fields."""
    body: Dict[str, Any] = {"success": False, "error": message}
    if details is not None:
        body["details"] = details
    body.update(extra)
    return JSONResponse(status_code=status_code, content=body)


def json_errors(message: str):
    """
    Handler boundary: anything a route raises past its own checks becomes
    a 500 carrying `message`. HTTPException and UploadRejected keep their
    status codes.
    """

    def _decorator(fn: Callable[..., Awaitable[Any]]):
        @wraps(fn)  # keeps the signature FastAPI inspects for params
        async def _w(*args, **kwargs):
            try:
                return await fn(*args, **kwargs)
            except HTTPException:
                raise
            except UploadRejected as e:
                return error_response(e.message, status_code=e.status_code, **e.details)
            except Exception as e:
                # exception text can carry SQL and customer data; it stays in the log
                logger.error("❌ %s: %s", message, e, exc_info=True)
                return error_response(message, status_code=500)

        return _w

    return _decorator
