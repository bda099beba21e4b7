"""
Unit Tests for the Database Connection Manager
==============================================
Runs against an in-memory SQLite database through aiosqlite.
"""

import pytest
from sqlalchemy import func, select

from ngo_portal.core.database_connection import DatabaseManager
from ngo_portal.models.db_tables import Setting


class TestDatabaseManager:
    @pytest.mark.asyncio
    async def test_session_before_initialize_raises(self):
        manager = DatabaseManager()

        with pytest.raises(RuntimeError, match="Database not initialized"):
            async with manager.get_session():
                pass

    @pytest.mark.asyncio
    async def test_ping_uninitialized_is_false(self):
        assert await DatabaseManager().ping() is False

    @pytest.mark.asyncio
    async def test_ping_initialized(self, database_manager):
        assert database_manager.is_initialized
        assert await database_manager.ping() is True

    @pytest.mark.asyncio
    async def test_session_commits_on_success(self, database_manager):
        async with database_manager.get_session() as session:
            session.add(Setting(key="site_name", value="Green Earth", category="general"))

        async with database_manager.get_session() as session:
            count = (await session.execute(select(func.count(Setting.id)))).scalar_one()
        assert count == 1

    @pytest.mark.asyncio
    async def test_session_rolls_back_on_error(self, database_manager):
        with pytest.raises(ValueError):
            async with database_manager.get_session() as session:
                session.add(Setting(key="site_name", value="Green Earth", category="general"))
                await session.flush()
                raise ValueError("abort")

        async with database_manager.get_session() as session:
            count = (await session.execute(select(func.count(Setting.id)))).scalar_one()
        assert count == 0

    @pytest.mark.asyncio
    async def test_close_resets_state(self):
        manager = DatabaseManager()
        await manager.initialize("sqlite+aiosqlite:///:memory:")
        await manager.close()

        assert manager.is_initialized is False
