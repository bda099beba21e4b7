"""
Base Database Service
--------------------
Base class for all database services with session management, pagination
and shared validation utilities.

This base class provides:
- SQLAlchemy session management
- Paginated listing over any ORM select
- Validation helpers
- Operation logging
"""

import math
from typing import Any, AsyncGenerator, Dict, List, Optional, Tuple, Type, Union
from contextlib import asynccontextmanager
from enum import Enum
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from ngo_portal.core.database_connection import DatabaseManager, db_manager
from ngo_portal.models.response_models import Pagination


class BaseDatabaseService:
    """
    Base class for all database service classes.

    Services return ORM instances. Sessions are created with
    ``expire_on_commit=False`` so returned rows stay readable after the
    session closes.
    """

    MAX_PAGE_SIZE = 100

    def __init__(self, database_manager: Optional[DatabaseManager] = None):
        """
        Args:
            database_manager: Optional DatabaseManager instance. If not provided,
                            uses the process-wide manager.
        """
        self.database_manager = database_manager or db_manager
        self._service_name = self.__class__.__name__

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Get a SQLAlchemy session with automatic commit/rollback.

        Example:
            async with self.get_session() as session:
                user = await session.get(User, user_id)
        """
        async with self.database_manager.get_session() as session:
            yield session

    async def paginate(
        self,
        query: Select,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[Any], Pagination]:
        """
        Run ``query`` for one page and count the unpaged total.

        Returns:
            Tuple of (rows, Pagination)
        """
        self.validate_pagination_parameters(page, limit)

        async with self.get_session() as session:
            count_query = select(func.count()).select_from(
                query.order_by(None).subquery()
            )
            total = (await session.execute(count_query)).scalar_one()
            result = await session.execute(
                query.offset((page - 1) * limit).limit(limit)
            )
            rows = list(result.scalars().all())

        return rows, Pagination(
            page=page,
            limit=limit,
            total=total,
            pages=math.ceil(total / limit) if total else 0,
        )

    # ========================================================================
    # VALIDATION UTILITIES
    # ========================================================================

    def validate_uuid(
        self, uuid_value: Union[UUID, str, None], parameter_name: str = "UUID"
    ) -> UUID:
        """
        Validate and coerce a UUID.

        Raises:
            ValueError: If value is None or not a valid UUID
        """
        if uuid_value is None:
            raise ValueError(f"{parameter_name} cannot be None")
        if isinstance(uuid_value, UUID):
            return uuid_value
        try:
            return UUID(str(uuid_value))
        except ValueError:
            raise ValueError(f"{parameter_name} must be a valid UUID")

    def validate_string_not_empty(
        self, string_value: Optional[str], parameter_name: str = "string"
    ) -> str:
        """
        Validate that a string is not None or empty and return it stripped.

        Raises:
            ValueError: If string is None or empty
        """
        if not string_value or not isinstance(string_value, str):
            raise ValueError(f"{parameter_name} must be a non-empty string")
        if not string_value.strip():
            raise ValueError(f"{parameter_name} cannot be only whitespace")
        return string_value.strip()

    def validate_enum_value(
        self, enum_value: Any, enum_class: Type[Enum], parameter_name: str = "value"
    ) -> Enum:
        """
        Coerce a raw value into ``enum_class``.

        Raises:
            ValueError: If value is not one of the enum values
        """
        try:
            return enum_class(enum_value)
        except ValueError:
            valid_values = [member.value for member in enum_class]
            raise ValueError(
                f"Invalid {parameter_name}: '{enum_value}'. "
                f"Must be one of: {', '.join(valid_values)}"
            )

    def validate_pagination_parameters(self, page: int, limit: int) -> None:
        """
        Raises:
            ValueError: If pagination parameters are invalid
        """
        if page < 1:
            raise ValueError(f"page must be positive, got {page}")
        if limit <= 0:
            raise ValueError(f"limit must be positive, got {limit}")
        if limit > self.MAX_PAGE_SIZE:
            raise ValueError(f"limit cannot exceed {self.MAX_PAGE_SIZE}, got {limit}")

    # ========================================================================
    # UTILITY METHODS
    # ========================================================================

    @staticmethod
    def apply_updates(entity: Any, update_fields: Dict[str, Any]) -> Dict[str, Any]:
        """
        Copy ``update_fields`` onto an ORM instance.

        Returns:
            Dictionary of the fields whose value actually changed
        """
        changed: Dict[str, Any] = {}
        for field_name, field_value in update_fields.items():
            if getattr(entity, field_name) != field_value:
                setattr(entity, field_name, field_value)
                changed[field_name] = field_value
        return changed

    def log_operation(
        self,
        operation_type: str,
        entity_identifier: Any,
        success: bool = True,
        additional_context: Optional[str] = None,
    ) -> None:
        """
        Log database operations for monitoring and debugging.

        Args:
            operation_type: Type of operation (e.g., "CREATE", "UPDATE", "DELETE")
            entity_identifier: Identifier of the entity being operated on
            success: Whether the operation was successful
            additional_context: Optional additional context information
        """
        log_level = "info" if success else "error"
        status = "succeeded" if success else "failed"

        message = (
            f"{self._service_name}: {operation_type} operation {status} "
            f"for entity: {entity_identifier}"
        )

        if additional_context:
            message += f" - {additional_context}"

        getattr(logger, log_level)(message)
