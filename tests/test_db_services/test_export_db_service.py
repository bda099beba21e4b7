"""
Export Service Tests
--------------------
Per-type export columns and the CSV/JSON renderings.
"""

import csv
import io
import json

import pytest

from ngo_portal.db_services.audit_service import AuditRecorder
from ngo_portal.db_services.campaigns_service import CampaignsService
from ngo_portal.db_services.contacts_service import ContactsService
from ngo_portal.db_services.export_service import EXPORT_COLUMNS, ExportService
from ngo_portal.db_services.users_service import UsersService


@pytest.fixture
def exporter(database_manager):
    return ExportService(database_manager)


class TestValidation:
    def test_unknown_type(self, exporter):
        with pytest.raises(ValueError, match="Invalid export type"):
            exporter.validate_export("donations", "csv")

    def test_unknown_format(self, exporter):
        with pytest.raises(ValueError, match="Invalid format"):
            exporter.validate_export("users", "xlsx")


class TestFetchRows:
    @pytest.mark.asyncio
    async def test_users_never_include_password_hash(self, exporter, database_manager):
        await UsersService(database_manager).create_user(
            email="ana@example.org",
            password="correct-horse-battery",
            first_name="Ana",
            last_name="Lopez",
        )

        rows = await exporter.fetch_rows("users")

        assert len(rows) == 1
        assert tuple(rows[0]) == EXPORT_COLUMNS["users"]
        assert rows[0]["email"] == "ana@example.org"
        assert rows[0]["role"] == "VOLUNTEER"
        assert "passwordHash" not in rows[0]

    @pytest.mark.asyncio
    async def test_campaigns_flatten_creator(self, exporter, database_manager, channel):
        creator = await UsersService(database_manager).create_user(
            email="ana@example.org",
            password="correct-horse-battery",
            first_name="Ana",
            last_name="Lopez",
        )
        campaigns = CampaignsService(database_manager, AuditRecorder(database_manager, channel))
        await campaigns.create(
            {"title": "Water", "description": "Wells", "created_by_id": creator.id}
        )
        await campaigns.create({"title": "Books", "description": "Library"})

        rows = await exporter.fetch_rows("campaigns")

        by_title = {row["title"]: row for row in rows}
        assert set(by_title) == {"Water", "Books"}
        assert by_title["Water"]["createdBy.email"] == "ana@example.org"
        assert by_title["Water"]["createdBy.firstName"] == "Ana"
        assert by_title["Books"]["createdBy.email"] is None
        assert by_title["Water"]["status"] == "DRAFT"


class TestRendering:
    @pytest.mark.asyncio
    async def test_csv_quotes_commas_and_blanks_nulls(self, exporter, database_manager, channel):
        await ContactsService(database_manager, AuditRecorder(database_manager, channel)).submit(
            {
                "name": "Ana",
                "email": "ana@example.org",
                "subject": "Hello, team",
                "message": "Line one\nLine two",
            }
        )
        rows = await exporter.fetch_rows("contacts")

        content = exporter.to_csv("contacts", rows)

        parsed = list(csv.DictReader(io.StringIO(content)))
        assert content.splitlines()[0] == ",".join(EXPORT_COLUMNS["contacts"])
        assert parsed[0]["subject"] == "Hello, team"
        assert parsed[0]["message"] == "Line one\nLine two"
        assert parsed[0]["phone"] == ""
        assert parsed[0]["status"] == "NEW"

    def test_empty_export_keeps_header(self, exporter):
        assert exporter.to_csv("users", []) == ",".join(EXPORT_COLUMNS["users"]) + "\n"

    def test_json_is_a_list(self, exporter):
        assert json.loads(exporter.to_json([{"id": "1"}])) == [{"id": "1"}]

    def test_filename(self, exporter):
        name = exporter.filename("blog-posts", "csv")

        assert name.startswith("blog-posts_")
        assert name.endswith(".csv")
