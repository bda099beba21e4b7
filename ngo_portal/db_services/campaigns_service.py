"""
Campaigns Service
-----------------
Audited CRUD for campaigns plus the public listing, search and dashboard counts.
"""

from typing import Dict, List, Optional, Tuple

from sqlalchemy import func, or_, select

from ngo_portal.db_services.crud_service import AuditedCrudService
from ngo_portal.models.db_tables import AuditEntityType, Campaign, CampaignStatus
from ngo_portal.models.response_models import Pagination

SEARCHABLE_STATUSES = (CampaignStatus.ACTIVE, CampaignStatus.COMPLETED)

SEARCH_SORT_FIELDS = {
    "createdAt": Campaign.created_at,
    "title": Campaign.title,
    "goal": Campaign.goal,
    "raised": Campaign.raised,
}


class CampaignsService(AuditedCrudService):
    model = Campaign
    entity_type = AuditEntityType.CAMPAIGN
    status_enum = CampaignStatus

    def prepare_fields(self, fields):
        fields = super().prepare_fields(fields)
        if "title" in fields and fields["title"] is not None:
            fields["title"] = self.validate_string_not_empty(fields["title"], "title")
        return fields

    async def list_campaigns(
        self,
        page: int = 1,
        limit: int = 10,
        status: Optional[str] = None,
        category: Optional[str] = None,
    ) -> Tuple[List[Campaign], Pagination]:
        filters = [Campaign.category == category] if category else []
        return await self.list_entities(page, limit, status=status, filters=filters)

    async def list_active(
        self, page: int = 1, limit: int = 10, category: Optional[str] = None
    ) -> Tuple[List[Campaign], Pagination]:
        return await self.list_campaigns(
            page, limit, status=CampaignStatus.ACTIVE.value, category=category
        )

    async def totals(self) -> Dict[str, float]:
        """Sum of goals and raised amounts across active campaigns."""
        async with self.get_session() as session:
            result = await session.execute(
                select(
                    func.coalesce(func.sum(Campaign.goal), 0.0),
                    func.coalesce(func.sum(Campaign.raised), 0.0),
                ).where(Campaign.status == CampaignStatus.ACTIVE)
            )
            goal, raised = result.one()
            return {"goal": float(goal), "raised": float(raised)}

    async def search(
        self,
        q: str = "",
        status: Optional[str] = None,
        category: Optional[str] = None,
        location: Optional[str] = None,
        sort_by: str = "createdAt",
        sort_order: str = "desc",
        page: int = 1,
        limit: int = 12,
    ) -> Tuple[List[Campaign], Pagination]:
        """
        Public campaign search.

        ``q`` matches title, description, category or location; category and
        location match by substring, with ``all`` meaning no filter. Only
        ACTIVE (the default) and COMPLETED campaigns can be searched.

        Raises:
            ValueError: On a hidden status or an unknown sort field/order
        """
        status_value = self.validate_enum_value(
            status or CampaignStatus.ACTIVE.value, CampaignStatus, "status"
        )
        if status_value not in SEARCHABLE_STATUSES:
            raise ValueError(f"Campaigns with status {status_value.value} are not public")
        if sort_by not in SEARCH_SORT_FIELDS:
            raise ValueError(
                f"Invalid sortBy: '{sort_by}'. Must be one of: {', '.join(SEARCH_SORT_FIELDS)}"
            )
        if sort_order not in ("asc", "desc"):
            raise ValueError(f"Invalid sortOrder: '{sort_order}'. Must be asc or desc")

        sort_column = SEARCH_SORT_FIELDS[sort_by]
        query = select(Campaign).order_by(
            sort_column.asc() if sort_order == "asc" else sort_column.desc()
        )
        filters = []
        if q.strip():
            pattern = f"%{q.strip().lower()}%"
            filters.append(
                or_(
                    func.lower(Campaign.title).like(pattern),
                    func.lower(Campaign.description).like(pattern),
                    func.lower(Campaign.category).like(pattern),
                    func.lower(Campaign.location).like(pattern),
                )
            )
        if category and category != "all":
            filters.append(func.lower(Campaign.category).like(f"%{category.lower()}%"))
        if location and location != "all":
            filters.append(func.lower(Campaign.location).like(f"%{location.lower()}%"))

        return await self.list_entities(
            page, limit, status=status_value.value, filters=filters, query=query
        )
