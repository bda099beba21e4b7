"""
Admin Contact Endpoints
-----------------------
Triage of contact form submissions (ADMIN only).
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from ngo_portal.api.api_helpers import not_found, paginated, service_errors
from ngo_portal.auth.auth_dependencies import require_admin
from ngo_portal.db_services.contacts_service import ContactsService
from ngo_portal.models.auth_models import AuthTokenPayload
from ngo_portal.models.request_models import ContactUpdateRequest
from ngo_portal.models.response_models import ContactResponse

router = APIRouter(prefix="/api/admin/contacts", tags=["Admin - Contacts"])


@router.get("", summary="List contact submissions")
async def list_contacts(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status_filter: Optional[str] = Query(None, alias="status"),
    search: Optional[str] = None,
    current_user: AuthTokenPayload = Depends(require_admin),
):
    with service_errors("list contacts"):
        contacts, pagination = await ContactsService().list_contacts(
            page, limit, status=status_filter, search=search
        )
        return paginated(contacts, pagination, ContactResponse)


@router.get("/{contact_id}", response_model=ContactResponse)
async def get_contact(
    contact_id: UUID, current_user: AuthTokenPayload = Depends(require_admin)
):
    with service_errors("retrieve contact"):
        contact = await ContactsService().get_by_id(contact_id)
        if contact is None:
            raise not_found("Contact", contact_id)
        return contact


@router.patch("/{contact_id}", response_model=ContactResponse, summary="Change status")
async def update_contact(
    contact_id: UUID,
    request: ContactUpdateRequest,
    current_user: AuthTokenPayload = Depends(require_admin),
):
    with service_errors("update contact"):
        contact = await ContactsService().update(
            contact_id, {"status": request.status}, current_user.user_id
        )
        if contact is None:
            raise not_found("Contact", contact_id)
        return contact


@router.delete("/{contact_id}")
async def delete_contact(
    contact_id: UUID, current_user: AuthTokenPayload = Depends(require_admin)
):
    with service_errors("delete contact"):
        if not await ContactsService().delete(contact_id, current_user.user_id):
            raise not_found("Contact", contact_id)
    return {"message": "Contact deleted successfully"}
