"""
Users Service Tests
-------------------
Credential store records against an in-memory database.
"""

from datetime import timedelta

import pytest
from sqlalchemy import func, select

from ngo_portal.db_services.refresh_tokens_service import RefreshTokensService
from ngo_portal.db_services.users_service import UsersService
from ngo_portal.models.db_tables import User, UserRole, utc_now
from ngo_portal.utils.password_hashing import PasswordHasher


@pytest.fixture
def users(database_manager):
    return UsersService(database_manager)


async def _create(users, email, role=UserRole.VOLUNTEER, password="correct-horse-battery"):
    return await users.create_user(
        email=email, password=password, first_name="Ana", last_name="Lopez", role=role
    )


class TestCreateUser:
    @pytest.mark.asyncio
    async def test_password_is_hashed_and_email_normalized(self, users):
        user = await _create(users, "Ana.Lopez@Example.org")

        assert user.email == "ana.lopez@example.org"
        assert user.password_hash != "correct-horse-battery"
        assert PasswordHasher.verify_password("correct-horse-battery", user.password_hash)
        assert user.role == UserRole.VOLUNTEER
        assert user.verified is False

    @pytest.mark.asyncio
    async def test_duplicate_email_rejected(self, users):
        await _create(users, "ana@example.org")

        with pytest.raises(ValueError, match="already exists"):
            await _create(users, "ANA@example.org")

    @pytest.mark.asyncio
    async def test_invalid_email_rejected(self, users):
        with pytest.raises(ValueError, match="Invalid email"):
            await _create(users, "not-an-email")

    @pytest.mark.asyncio
    async def test_only_one_admin(self, users, database_manager):
        await _create(users, "first-admin@example.org", role=UserRole.ADMIN)

        with pytest.raises(ValueError, match="An admin user already exists"):
            await _create(users, "second-admin@example.org", role=UserRole.ADMIN)

        async with database_manager.get_session() as session:
            admins = await session.execute(
                select(func.count(User.id)).where(User.role == UserRole.ADMIN)
            )
            assert admins.scalar_one() == 1


class TestReadUsers:
    @pytest.mark.asyncio
    async def test_lookup_by_email_is_case_insensitive(self, users):
        created = await _create(users, "sam@example.org")

        found = await users.get_user_by_email("  SAM@example.org ")

        assert found is not None
        assert found.id == created.id

    @pytest.mark.asyncio
    async def test_list_filters_by_role(self, users):
        await _create(users, "vol@example.org")
        await _create(users, "sponsor@example.org", role=UserRole.SPONSOR)

        rows, pagination = await users.list_users(role="SPONSOR")

        assert [u.email for u in rows] == ["sponsor@example.org"]
        assert pagination.total == 1
        assert pagination.pages == 1

    @pytest.mark.asyncio
    async def test_count_by_role_is_zero_filled(self, users):
        await _create(users, "vol@example.org")

        counts = await users.count_users_by_role()

        assert counts == {"ADMIN": 0, "SPONSOR": 0, "VOLUNTEER": 1}


class TestUpdateAndDelete:
    @pytest.mark.asyncio
    async def test_password_update_is_hashed(self, users):
        user = await _create(users, "ana@example.org")

        updated = await users.update_user(user.id, {"password": "another-long-secret"})

        assert PasswordHasher.verify_password("another-long-secret", updated.password_hash)

    @pytest.mark.asyncio
    async def test_promotion_to_second_admin_rejected(self, users):
        await _create(users, "admin@example.org", role=UserRole.ADMIN)
        user = await _create(users, "ana@example.org")

        with pytest.raises(ValueError, match="An admin user already exists"):
            await users.update_user(user.id, {"role": "ADMIN"})

        reloaded = await users.get_user_by_id(user.id)
        assert reloaded.role == UserRole.VOLUNTEER

    @pytest.mark.asyncio
    async def test_admin_cannot_be_demoted(self, users):
        admin = await _create(users, "admin@example.org", role=UserRole.ADMIN)

        with pytest.raises(ValueError, match="cannot be demoted"):
            await users.update_user(admin.id, {"role": "SPONSOR", "first_name": "Maria"})

        reloaded = await users.get_user_by_id(admin.id)
        assert reloaded.role == UserRole.ADMIN
        assert reloaded.first_name == "Ana"

    @pytest.mark.asyncio
    async def test_admin_profile_update_keeps_role(self, users):
        admin = await _create(users, "admin@example.org", role=UserRole.ADMIN)

        updated = await users.update_user(admin.id, {"first_name": "Maria", "role": "ADMIN"})

        assert updated.first_name == "Maria"
        assert updated.role == UserRole.ADMIN

    @pytest.mark.asyncio
    async def test_update_missing_user_returns_none(self, users):
        user = await _create(users, "ana@example.org")
        await users.delete_user(user.id)

        assert await users.update_user(user.id, {"first_name": "Maria"}) is None

    @pytest.mark.asyncio
    async def test_delete_removes_refresh_tokens(self, users, database_manager):
        user = await _create(users, "ana@example.org")
        tokens = RefreshTokensService(database_manager)
        await tokens.store(user.id, "a" * 64, utc_now() + timedelta(days=7))

        assert await users.delete_user(user.id) is True

        assert await tokens.get_by_hash("a" * 64) is None
        assert await users.get_user_by_id(user.id) is None
        assert await users.delete_user(user.id) is False
