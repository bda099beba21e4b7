"""
Export Service
--------------
Back-office data export as CSV or JSON.

Each export type has a fixed column list. Related users (campaign creator,
post author) are flattened into dotted columns such as ``createdBy.email``;
missing values export as empty strings.
"""

import csv
import io
import json
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Tuple
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import aliased

from ngo_portal.db_services.base_service import BaseDatabaseService
from ngo_portal.models.db_tables import BlogPost, Campaign, Contact, User, utc_now

EXPORT_FORMATS = ("csv", "json")

_USER_FIELDS = ("firstName", "lastName", "email")

EXPORT_COLUMNS: Dict[str, Tuple[str, ...]] = {
    "users": (
        "id", "email", "firstName", "lastName", "phone", "role", "verified",
        "createdAt", "updatedAt",
    ),
    "campaigns": (
        "id", "title", "description", "goal", "raised", "category", "location",
        "status", "createdAt", "updatedAt",
        *(f"createdBy.{field}" for field in _USER_FIELDS),
    ),
    "blog-posts": (
        "id", "title", "excerpt", "category", "status", "createdAt", "updatedAt",
        *(f"author.{field}" for field in _USER_FIELDS),
    ),
    "contacts": (
        "id", "name", "email", "phone", "organization", "subject", "message",
        "inquiryType", "status", "createdAt",
    ),
}


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def _user_columns(prefix: str, user: Any) -> Dict[str, Any]:
    if user is None:
        return {f"{prefix}.{field}": None for field in _USER_FIELDS}
    return {
        f"{prefix}.firstName": user.first_name,
        f"{prefix}.lastName": user.last_name,
        f"{prefix}.email": user.email,
    }


class ExportService(BaseDatabaseService):
    """Reads whole tables into flat rows keyed by export column."""

    def validate_export(self, export_type: str, export_format: str) -> None:
        """
        Raises:
            ValueError: On an unknown export type or format
        """
        if export_type not in EXPORT_COLUMNS:
            raise ValueError("Invalid export type")
        if export_format not in EXPORT_FORMATS:
            raise ValueError("Invalid format")

    async def fetch_rows(self, export_type: str) -> List[Dict[str, Any]]:
        """
        Returns:
            One dict per row with exactly the columns of ``export_type``
        """
        self.validate_export(export_type, "csv")
        fetch = {
            "users": self._users,
            "campaigns": self._campaigns,
            "blog-posts": self._blog_posts,
            "contacts": self._contacts,
        }[export_type]
        async with self.get_session() as session:
            rows = await fetch(session)

        columns = EXPORT_COLUMNS[export_type]
        self.log_operation("EXPORT", export_type, additional_context=f"rows={len(rows)}")
        return [{column: _plain(row.get(column)) for column in columns} for row in rows]

    async def _users(self, session) -> List[Dict[str, Any]]:
        result = await session.execute(select(User).order_by(User.created_at.asc()))
        return [
            {
                "id": user.id,
                "email": user.email,
                "firstName": user.first_name,
                "lastName": user.last_name,
                "phone": user.phone,
                "role": user.role,
                "verified": user.verified,
                "createdAt": user.created_at,
                "updatedAt": user.updated_at,
            }
            for user in result.scalars().all()
        ]

    async def _campaigns(self, session) -> List[Dict[str, Any]]:
        creator = aliased(User)
        result = await session.execute(
            select(Campaign, creator)
            .outerjoin(creator, Campaign.created_by_id == creator.id)
            .order_by(Campaign.created_at.asc())
        )
        return [
            {
                "id": campaign.id,
                "title": campaign.title,
                "description": campaign.description,
                "goal": campaign.goal,
                "raised": campaign.raised,
                "category": campaign.category,
                "location": campaign.location,
                "status": campaign.status,
                "createdAt": campaign.created_at,
                "updatedAt": campaign.updated_at,
                **_user_columns("createdBy", user),
            }
            for campaign, user in result.all()
        ]

    async def _blog_posts(self, session) -> List[Dict[str, Any]]:
        author = aliased(User)
        result = await session.execute(
            select(BlogPost, author)
            .outerjoin(author, BlogPost.author_id == author.id)
            .order_by(BlogPost.created_at.asc())
        )
        return [
            {
                "id": post.id,
                "title": post.title,
                "excerpt": post.excerpt,
                "category": post.category,
                "status": post.status,
                "createdAt": post.created_at,
                "updatedAt": post.updated_at,
                **_user_columns("author", user),
            }
            for post, user in result.all()
        ]

    async def _contacts(self, session) -> List[Dict[str, Any]]:
        result = await session.execute(select(Contact).order_by(Contact.created_at.asc()))
        return [
            {
                "id": contact.id,
                "name": contact.name,
                "email": contact.email,
                "phone": contact.phone,
                "organization": contact.organization,
                "subject": contact.subject,
                "message": contact.message,
                "inquiryType": contact.inquiry_type,
                "status": contact.status,
                "createdAt": contact.created_at,
            }
            for contact in result.scalars().all()
        ]

    # ========================================================================
    # RENDERING
    # ========================================================================

    @staticmethod
    def to_csv(export_type: str, rows: List[Dict[str, Any]]) -> str:
        """Header row plus one line per row; None becomes an empty cell."""
        output = io.StringIO()
        writer = csv.DictWriter(
            output, fieldnames=EXPORT_COLUMNS[export_type], lineterminator="\n"
        )
        writer.writeheader()
        for row in rows:
            writer.writerow({k: "" if v is None else v for k, v in row.items()})
        return output.getvalue()

    @staticmethod
    def to_json(rows: List[Dict[str, Any]]) -> str:
        return json.dumps(rows, indent=2)

    @staticmethod
    def filename(export_type: str, export_format: str) -> str:
        return f"{export_type}_{utc_now().date().isoformat()}.{export_format}"
