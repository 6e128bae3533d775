"""Shared helper functions for tool implementations"""

import logging
from typing import Any, Callable, Dict

from models.errors import MintServiceError

logger = logging.getLogger("MCP_Server")


def error_response(exc: Exception, action: str) -> Dict[str, Any]:
    """Convert an exception into the structured failure dict returned by tools.

    Known service errors carry their own code and diagnostic payload.
    Anything else is logged with its traceback and reported as INTERNAL_ERROR.
    """
    if isinstance(exc, MintServiceError):
        logger.warning(f"{action} failed: [{exc.error_code}] {exc.message}")
        response = {"success": False}
        response.update(exc.to_dict())
        return response
    if isinstance(exc, ValueError):
        logger.warning(f"{action} rejected: {exc}")
        return {"success": False, "error": str(exc), "error_code": "INVALID_ARGUMENT"}

    logger.exception(f"{action} failed unexpectedly")
    return {"success": False, "error": f"{action} failed: {exc}", "error_code": "INTERNAL_ERROR"}


def guarded(action: str, func: Callable[..., Dict[str, Any]], *args, **kwargs) -> Dict[str, Any]:
    """Run a tool body, returning a structured error instead of raising"""
    try:
        return func(*args, **kwargs)
    except Exception as e:
        return error_response(e, action)
