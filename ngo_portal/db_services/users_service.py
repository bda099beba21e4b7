"""
Users Service
-------------
Database service for the credential store's user records:
- User creation with the single-admin rule
- Lookup by id and email
- Role filtering and pagination
- Updates and admin-initiated deletion
"""

from typing import Any, Dict, List, Optional, Tuple, Union
from uuid import UUID

from email_validator import EmailNotValidError, validate_email
from loguru import logger
from sqlalchemy import delete, func, select

from ngo_portal.core.database_connection import DatabaseManager
from ngo_portal.db_services.base_service import BaseDatabaseService
from ngo_portal.models.db_tables import RefreshToken, User, UserRole
from ngo_portal.models.response_models import Pagination
from ngo_portal.utils.password_hashing import PasswordHasher


class UsersService(BaseDatabaseService):
    """
    Service for user database operations.

    At most one ADMIN may exist; the rule is checked on creation and when a
    role change would promote a second user. The ADMIN cannot be demoted, so
    the back office always keeps its administrator.
    """

    def __init__(self, database_manager: Optional[DatabaseManager] = None):
        super().__init__(database_manager)

    # ========================================================================
    # VALIDATION HELPERS
    # ========================================================================

    def validate_email_address(self, email_address: str) -> str:
        """
        Validate and normalize an email address.

        Raises:
            ValueError: If email format is invalid
        """
        if not email_address:
            raise ValueError("Email address cannot be empty")
        try:
            validated = validate_email(email_address, check_deliverability=False)
        except EmailNotValidError as e:
            raise ValueError(f"Invalid email: {str(e)}")
        return validated.normalized.lower()

    async def check_email_exists(self, email: str) -> bool:
        async with self.get_session() as session:
            result = await session.execute(
                select(User.id).where(User.email == email.lower()).limit(1)
            )
            return result.first() is not None

    async def admin_exists(self) -> bool:
        async with self.get_session() as session:
            result = await session.execute(
                select(User.id).where(User.role == UserRole.ADMIN).limit(1)
            )
            return result.first() is not None

    # ========================================================================
    # CREATE OPERATIONS
    # ========================================================================

    async def create_user(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        role: Union[UserRole, str] = UserRole.VOLUNTEER,
        phone: Optional[str] = None,
        verified: bool = False,
    ) -> User:
        """
        Create a new user with a bcrypt password hash.

        Raises:
            ValueError: If the email is invalid or taken, or an admin already exists
        """
        email = self.validate_email_address(email)
        role = self.validate_enum_value(role, UserRole, "role")
        first_name = self.validate_string_not_empty(first_name, "first_name")
        last_name = self.validate_string_not_empty(last_name, "last_name")
        if not password:
            raise ValueError("password must be a non-empty string")

        if await self.check_email_exists(email):
            raise ValueError(f"Email '{email}' already exists")

        if role == UserRole.ADMIN and await self.admin_exists():
            logger.warning(f"Rejected creation of a second admin account: {email}")
            raise ValueError("An admin user already exists")

        user = User(
            email=email,
            password_hash=PasswordHasher.hash_password(password),
            first_name=first_name,
            last_name=last_name,
            phone=phone,
            role=role,
            verified=verified,
        )
        async with self.get_session() as session:
            session.add(user)

        self.log_operation("CREATE", user.id, additional_context=f"role={role.value}")
        return user

    # ========================================================================
    # READ OPERATIONS
    # ========================================================================

    async def get_user_by_id(self, user_id: Union[UUID, str]) -> Optional[User]:
        user_id = self.validate_uuid(user_id, "user_id")
        async with self.get_session() as session:
            return await session.get(User, user_id)

    async def get_user_by_email(self, email: str) -> Optional[User]:
        if not email:
            return None
        async with self.get_session() as session:
            result = await session.execute(
                select(User).where(User.email == email.strip().lower())
            )
            return result.scalar_one_or_none()

    async def list_users(
        self,
        page: int = 1,
        limit: int = 10,
        role: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Tuple[List[User], Pagination]:
        query = select(User).order_by(User.created_at.desc())
        if role:
            query = query.where(
                User.role == self.validate_enum_value(role, UserRole, "role")
            )
        if search:
            pattern = f"%{search.lower()}%"
            query = query.where(
                func.lower(User.email).like(pattern)
                | func.lower(User.first_name).like(pattern)
                | func.lower(User.last_name).like(pattern)
            )
        return await self.paginate(query, page, limit)

    async def count_users_by_role(self) -> Dict[str, int]:
        async with self.get_session() as session:
            result = await session.execute(
                select(User.role, func.count(User.id)).group_by(User.role)
            )
            counts = {role.value: 0 for role in UserRole}
            for role, count in result.all():
                counts[UserRole(role).value] = count
            return counts

    # ========================================================================
    # UPDATE OPERATIONS
    # ========================================================================

    async def update_user(
        self, user_id: Union[UUID, str], update_fields: Dict[str, Any]
    ) -> Optional[User]:
        """
        Update profile fields, role, verified flag or password.

        Returns:
            Updated user or None if not found
        """
        user_id = self.validate_uuid(user_id, "user_id")
        update_fields = dict(update_fields)

        password = update_fields.pop("password", None)
        if password:
            update_fields["password_hash"] = PasswordHasher.hash_password(password)
        if "role" in update_fields and update_fields["role"] is not None:
            update_fields["role"] = self.validate_enum_value(
                update_fields["role"], UserRole, "role"
            )
        update_fields = {k: v for k, v in update_fields.items() if v is not None}

        async with self.get_session() as session:
            user = await session.get(User, user_id)
            if user is None:
                return None
            if update_fields.get("role") == UserRole.ADMIN and user.role != UserRole.ADMIN:
                existing = await session.execute(
                    select(User.id).where(User.role == UserRole.ADMIN).limit(1)
                )
                if existing.first() is not None:
                    raise ValueError("An admin user already exists")
            if (
                user.role == UserRole.ADMIN
                and update_fields.get("role", UserRole.ADMIN) != UserRole.ADMIN
            ):
                logger.warning(f"Rejected demotion of the admin account: {user.email}")
                raise ValueError("The admin user cannot be demoted")
            changed = self.apply_updates(user, update_fields)

        self.log_operation(
            "UPDATE", user_id, additional_context=f"fields={sorted(changed)}"
        )
        return user

    # ========================================================================
    # DELETE OPERATIONS
    # ========================================================================

    async def delete_user(self, user_id: Union[UUID, str]) -> bool:
        """
        Delete a user together with its refresh tokens.

        Returns:
            True if the user existed
        """
        user_id = self.validate_uuid(user_id, "user_id")
        async with self.get_session() as session:
            user = await session.get(User, user_id)
            if user is None:
                return False
            await session.execute(
                delete(RefreshToken).where(RefreshToken.user_id == user_id)
            )
            await session.delete(user)

        self.log_operation("DELETE", user_id)
        return True
