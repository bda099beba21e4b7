"""
Contacts Service
----------------
Contact form submissions: public creation, admin triage and deletion.
"""

from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, or_

from ngo_portal.db_services.crud_service import AuditedCrudService
from ngo_portal.models.db_tables import AuditEntityType, Contact, ContactStatus
from ngo_portal.models.response_models import Pagination


class ContactsService(AuditedCrudService):
    model = Contact
    entity_type = AuditEntityType.CONTACT
    status_enum = ContactStatus

    REQUIRED_FIELDS = ("name", "email", "subject", "message")

    def prepare_fields(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        fields = super().prepare_fields(fields)
        if not fields.get("inquiry_type"):
            fields["inquiry_type"] = "general"
        return fields

    async def submit(self, fields: Dict[str, Any]) -> Contact:
        """
        Store a public contact form submission.

        Raises:
            ValueError: If name, email, subject or message is missing
        """
        for field_name in self.REQUIRED_FIELDS:
            fields[field_name] = self.validate_string_not_empty(
                fields.get(field_name), field_name
            )
        fields["status"] = ContactStatus.NEW
        return await self.create(fields, performed_by_id=None)

    async def list_contacts(
        self,
        page: int = 1,
        limit: int = 10,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Tuple[List[Contact], Pagination]:
        filters = []
        if search:
            pattern = f"%{search.lower()}%"
            filters.append(
                or_(
                    func.lower(Contact.name).like(pattern),
                    func.lower(Contact.email).like(pattern),
                    func.lower(Contact.subject).like(pattern),
                )
            )
        return await self.list_entities(page, limit, status=status, filters=filters)
