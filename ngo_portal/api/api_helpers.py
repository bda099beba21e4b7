"""
Endpoint Helpers
----------------
Shared error translation and response shaping for the API routers.
"""

from contextlib import contextmanager
from typing import Any, Iterable, Iterator, Type

from fastapi import HTTPException, status
from loguru import logger
from pydantic import BaseModel

from ngo_portal.core.exceptions import ServiceError
from ngo_portal.models.response_models import Pagination


@contextmanager
def service_errors(action: str) -> Iterator[None]:
    """
    Translate service failures raised inside the block.

    ValueError becomes 400; HTTPException and ServiceError pass through to
    the application handlers; anything else is logged and becomes 500.
    """
    try:
        yield
    except (HTTPException, ServiceError):
        raise
    except ValueError as e:
        logger.warning(f"Validation error while trying to {action}: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception:
        logger.exception(f"Unexpected error while trying to {action}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to {action}",
        )


def not_found(entity: str, identifier: Any) -> HTTPException:
    logger.warning(f"{entity} not found: {identifier}")
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"{entity} '{identifier}' not found",
    )


def paginated(
    rows: Iterable[Any], pagination: Pagination, model: Type[BaseModel]
) -> dict:
    """``{"items": [...], "pagination": {...}}`` with rows rendered through ``model``."""
    return {
        "items": [
            model.model_validate(row).model_dump(mode="json", by_alias=True)
            for row in rows
        ],
        "pagination": pagination.model_dump(),
    }
