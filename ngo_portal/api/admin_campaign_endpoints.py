"""
Admin Campaign Endpoints
------------------------
Back-office CRUD over campaigns (ADMIN only, audited).
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from ngo_portal.api.api_helpers import not_found, paginated, service_errors
from ngo_portal.auth.auth_dependencies import require_admin
from ngo_portal.db_services.campaigns_service import CampaignsService
from ngo_portal.models.auth_models import AuthTokenPayload
from ngo_portal.models.request_models import CampaignCreateRequest, CampaignUpdateRequest
from ngo_portal.models.response_models import CampaignResponse

router = APIRouter(prefix="/api/admin/campaigns", tags=["Admin - Campaigns"])


@router.get("", summary="List campaigns")
async def list_campaigns(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status_filter: Optional[str] = Query(None, alias="status"),
    category: Optional[str] = None,
    current_user: AuthTokenPayload = Depends(require_admin),
):
    with service_errors("list campaigns"):
        campaigns, pagination = await CampaignsService().list_campaigns(
            page, limit, status=status_filter, category=category
        )
        return paginated(campaigns, pagination, CampaignResponse)


@router.get("/{campaign_id}", response_model=CampaignResponse)
async def get_campaign(
    campaign_id: UUID, current_user: AuthTokenPayload = Depends(require_admin)
):
    with service_errors("retrieve campaign"):
        campaign = await CampaignsService().get_by_id(campaign_id)
        if campaign is None:
            raise not_found("Campaign", campaign_id)
        return campaign


@router.post(
    "",
    response_model=CampaignResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a campaign",
)
async def create_campaign(
    request: CampaignCreateRequest,
    current_user: AuthTokenPayload = Depends(require_admin),
):
    with service_errors("create campaign"):
        fields = request.model_dump()
        fields["created_by_id"] = current_user.user_id
        return await CampaignsService().create(fields, current_user.user_id)


@router.put("/{campaign_id}", response_model=CampaignResponse)
async def update_campaign(
    campaign_id: UUID,
    request: CampaignUpdateRequest,
    current_user: AuthTokenPayload = Depends(require_admin),
):
    with service_errors("update campaign"):
        campaign = await CampaignsService().update(
            campaign_id, request.model_dump(exclude_unset=True), current_user.user_id
        )
        if campaign is None:
            raise not_found("Campaign", campaign_id)
        return campaign


@router.delete("/{campaign_id}")
async def delete_campaign(
    campaign_id: UUID, current_user: AuthTokenPayload = Depends(require_admin)
):
    with service_errors("delete campaign"):
        if not await CampaignsService().delete(campaign_id, current_user.user_id):
            raise not_found("Campaign", campaign_id)
    return {"message": "Campaign deleted successfully"}
