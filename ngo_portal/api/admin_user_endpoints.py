"""
Admin User Management Endpoints
-------------------------------
Back-office CRUD over user accounts. All routes require the ADMIN role and
every mutation is audited.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from loguru import logger

from ngo_portal.api.api_helpers import not_found, paginated, service_errors
from ngo_portal.auth.auth_dependencies import require_admin
from ngo_portal.db_services.audit_service import AuditRecorder
from ngo_portal.db_services.users_service import UsersService
from ngo_portal.models.auth_models import AuthTokenPayload
from ngo_portal.models.db_tables import AuditAction, AuditEntityType
from ngo_portal.models.request_models import UserCreateRequest, UserUpdateRequest
from ngo_portal.models.response_models import UserResponse


# ============================================================================
# ROUTER INITIALIZATION
# ============================================================================

router = APIRouter(prefix="/api/admin/users", tags=["Admin - Users"])


# ============================================================================
# LIST / READ
# ============================================================================
@router.get("", summary="List users")
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    role: Optional[str] = Query(None, description="ADMIN, SPONSOR or VOLUNTEER"),
    search: Optional[str] = Query(None, description="Matches email or name"),
    current_user: AuthTokenPayload = Depends(require_admin),
):
    with service_errors("list users"):
        users, pagination = await UsersService().list_users(page, limit, role, search)
        return paginated(users, pagination, UserResponse)


@router.get("/{user_id}", response_model=UserResponse, summary="Get user by ID")
async def get_user(
    user_id: UUID, current_user: AuthTokenPayload = Depends(require_admin)
):
    with service_errors("retrieve user"):
        user = await UsersService().get_user_by_id(user_id)
        if user is None:
            raise not_found("User", user_id)
        return user


# ============================================================================
# CREATE
# ============================================================================
@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a user",
    description="Admin-created accounts are verified. Only one ADMIN may exist.",
)
async def create_user(
    request: UserCreateRequest,
    current_user: AuthTokenPayload = Depends(require_admin),
):
    """
    Raises:
        HTTPException 400: Email taken, invalid input, or an admin already exists
    """
    logger.info(f"Admin {current_user.user_id} creating user {request.email}")

    with service_errors("create user"):
        user = await UsersService().create_user(
            email=request.email,
            password=request.password,
            first_name=request.first_name,
            last_name=request.last_name,
            phone=request.phone,
            role=request.role,
            verified=True,
        )

    await AuditRecorder().log_audit(
        AuditEntityType.USER,
        user.id,
        AuditAction.CREATE,
        current_user.user_id,
        {"email": user.email, "role": user.role.value},
    )
    return user


# ============================================================================
# UPDATE
# ============================================================================
@router.put("/{user_id}", response_model=UserResponse, summary="Update a user")
async def update_user(
    user_id: UUID,
    request: UserUpdateRequest,
    current_user: AuthTokenPayload = Depends(require_admin),
):
    update_fields = request.model_dump(exclude_unset=True)
    if not update_fields:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="No fields to update"
        )

    with service_errors("update user"):
        user = await UsersService().update_user(user_id, update_fields)
        if user is None:
            raise not_found("User", user_id)

    audit_data = {k: v for k, v in update_fields.items() if k != "password"}
    if "password" in update_fields:
        audit_data["passwordChanged"] = True
    await AuditRecorder().log_audit(
        AuditEntityType.USER, user_id, AuditAction.UPDATE, current_user.user_id, audit_data
    )
    return user


# ============================================================================
# DELETE
# ============================================================================
@router.delete("/{user_id}", summary="Delete a user")
async def delete_user(
    user_id: UUID, current_user: AuthTokenPayload = Depends(require_admin)
):
    if user_id == current_user.user_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Administrators cannot delete their own account",
        )

    with service_errors("delete user"):
        deleted = await UsersService().delete_user(user_id)
        if not deleted:
            raise not_found("User", user_id)

    await AuditRecorder().log_audit(
        AuditEntityType.USER, user_id, AuditAction.DELETE, current_user.user_id
    )
    return {"message": "User deleted successfully"}
