"""
Admin Settings Endpoints
------------------------
Key/value site settings (ADMIN only). POST creates or overwrites a key.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends

from ngo_portal.api.api_helpers import not_found, service_errors
from ngo_portal.auth.auth_dependencies import require_admin
from ngo_portal.db_services.settings_service import SettingsService
from ngo_portal.models.auth_models import AuthTokenPayload
from ngo_portal.models.request_models import SettingUpdateRequest, SettingUpsertRequest
from ngo_portal.models.response_models import SettingResponse

router = APIRouter(prefix="/api/admin/settings", tags=["Admin - Settings"])


@router.get("", response_model=List[SettingResponse])
async def list_settings(
    category: Optional[str] = None,
    current_user: AuthTokenPayload = Depends(require_admin),
):
    with service_errors("list settings"):
        return await SettingsService().list_settings(category)


@router.post("", response_model=SettingResponse, summary="Create or overwrite a setting")
async def upsert_setting(
    request: SettingUpsertRequest,
    current_user: AuthTokenPayload = Depends(require_admin),
):
    with service_errors("save setting"):
        return await SettingsService().upsert(
            request.key,
            request.value,
            description=request.description,
            category=request.category,
            performed_by_id=current_user.user_id,
        )


@router.get("/{key}", response_model=SettingResponse)
async def get_setting(key: str, current_user: AuthTokenPayload = Depends(require_admin)):
    with service_errors("retrieve setting"):
        setting = await SettingsService().get_by_key(key)
        if setting is None:
            raise not_found("Setting", key)
        return setting


@router.put("/{key}", response_model=SettingResponse)
async def update_setting(
    key: str,
    request: SettingUpdateRequest,
    current_user: AuthTokenPayload = Depends(require_admin),
):
    with service_errors("update setting"):
        setting = await SettingsService().update_by_key(
            key,
            request.value,
            description=request.description,
            category=request.category,
            performed_by_id=current_user.user_id,
        )
        if setting is None:
            raise not_found("Setting", key)
        return setting


@router.delete("/{key}")
async def delete_setting(key: str, current_user: AuthTokenPayload = Depends(require_admin)):
    with service_errors("delete setting"):
        if not await SettingsService().delete_by_key(key, current_user.user_id):
            raise not_found("Setting", key)
    return {"message": "Setting deleted successfully"}
