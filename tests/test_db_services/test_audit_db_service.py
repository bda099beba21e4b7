"""
Audit Recorder Tests
--------------------
Audit rows are append-only and recording never fails the mutation.
"""

from uuid import uuid4

import pytest

from ngo_portal.core.database_connection import DatabaseManager
from ngo_portal.db_services.audit_service import AuditRecorder
from ngo_portal.db_services.campaigns_service import CampaignsService
from ngo_portal.models.db_tables import AuditAction, AuditEntityType


class TestLogAudit:
    @pytest.mark.asyncio
    async def test_row_is_stored_with_json_safe_data(self, database_manager, channel):
        recorder = AuditRecorder(database_manager, channel)
        performer = uuid4()
        entity_id = uuid4()

        entry = await recorder.log_audit(
            AuditEntityType.CAMPAIGN,
            entity_id,
            AuditAction.CREATE,
            performer,
            {"title": "Clean water", "goal": 5000.0},
        )

        assert entry is not None
        assert entry.entity_id == str(entity_id)
        assert entry.performed_by_id == str(performer)
        assert entry.changed_data == {"title": "Clean water", "goal": 5000.0}
        assert channel.failures == []

    @pytest.mark.asyncio
    async def test_failure_goes_to_channel(self, channel):
        # Never initialized, so every session raises
        recorder = AuditRecorder(DatabaseManager(), channel)

        entry = await recorder.log_audit(
            AuditEntityType.USER, uuid4(), AuditAction.DELETE, uuid4()
        )

        assert entry is None
        assert len(channel.failures) == 1
        assert channel.failures[0].name.startswith("audit:")
        assert "RuntimeError" in channel.failures[0].error

    @pytest.mark.asyncio
    async def test_mutation_succeeds_when_audit_fails(self, database_manager, channel):
        broken_recorder = AuditRecorder(DatabaseManager(), channel)
        campaigns = CampaignsService(database_manager, audit_recorder=broken_recorder)

        campaign = await campaigns.create(
            {"title": "School supplies", "description": "Books for 200 pupils"}, uuid4()
        )

        assert await campaigns.get_by_id(campaign.id) is not None
        assert len(channel.failures) == 1


class TestListAuditLogs:
    @pytest.mark.asyncio
    async def test_filters_and_newest_first(self, database_manager, channel):
        recorder = AuditRecorder(database_manager, channel)
        campaign_id = uuid4()
        await recorder.log_audit("CAMPAIGN", campaign_id, "CREATE", None)
        await recorder.log_audit("CAMPAIGN", campaign_id, "UPDATE", None, {"goal": 10})
        await recorder.log_audit("USER", uuid4(), "CREATE", None)

        rows, pagination = await recorder.list_audit_logs(entity_type="CAMPAIGN")
        assert pagination.total == 2
        assert {row.action for row in rows} == {AuditAction.CREATE, AuditAction.UPDATE}

        rows, _ = await recorder.list_audit_logs(action="UPDATE", entity_id=str(campaign_id))
        assert len(rows) == 1
        assert rows[0].changed_data == {"goal": 10}

    @pytest.mark.asyncio
    async def test_unknown_entity_type_rejected(self, database_manager):
        with pytest.raises(ValueError, match="Invalid entity_type"):
            await AuditRecorder(database_manager).list_audit_logs(entity_type="DONOR")
