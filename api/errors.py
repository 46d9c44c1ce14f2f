"""
Translation of platform errors into HTTP responses.

    ValidationError          -> 422
    NotFoundError            -> 404
    InsufficientStockError   -> 409
    PartialSaleError         -> 502 (detail lists the committed steps)
    PersistenceError         -> 502
    anything else            -> 500
"""

import logging

from fastapi import HTTPException

from domain.errors import (
    InsufficientStockError,
    NotFoundError,
    PartialSaleError,
    PersistenceError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def to_http_exception(error: Exception, action: str) -> HTTPException:
    """
    Map an exception raised while handling a request onto an HTTPException.

    Example:
        try:
            ...
        except Exception as e:
            raise to_http_exception(e, "record sale") from e
    """
    if isinstance(error, HTTPException):
        return error
    if isinstance(error, ValidationError):
        return HTTPException(status_code=422, detail=str(error))
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=404, detail=str(error))
    if isinstance(error, InsufficientStockError):
        return HTTPException(status_code=409, detail=str(error))
    if isinstance(error, PartialSaleError):
        return HTTPException(
            status_code=502,
            detail={"message": str(error), "committed_steps": error.committed_steps},
        )
    if isinstance(error, PersistenceError):
        return HTTPException(status_code=502, detail=str(error))

    logger.exception(f"Unhandled error while trying to {action}")
    return HTTPException(status_code=500, detail=f"Failed to {action}: {str(error)}")


__all__ = ["to_http_exception"]
