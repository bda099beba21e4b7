"""
Admin Blog Endpoints
--------------------
Back-office CRUD over blog posts (ADMIN only, audited).
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from ngo_portal.api.api_helpers import not_found, paginated, service_errors
from ngo_portal.auth.auth_dependencies import require_admin
from ngo_portal.db_services.blog_posts_service import BlogPostsService
from ngo_portal.models.auth_models import AuthTokenPayload
from ngo_portal.models.request_models import BlogPostCreateRequest, BlogPostUpdateRequest
from ngo_portal.models.response_models import BlogPostResponse

router = APIRouter(prefix="/api/admin/blogs", tags=["Admin - Blog"])


@router.get("", summary="List blog posts")
async def list_posts(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status_filter: Optional[str] = Query(None, alias="status"),
    category: Optional[str] = None,
    current_user: AuthTokenPayload = Depends(require_admin),
):
    with service_errors("list blog posts"):
        posts, pagination = await BlogPostsService().list_posts(
            page, limit, status=status_filter, category=category
        )
        return paginated(posts, pagination, BlogPostResponse)


@router.get("/{post_id}", response_model=BlogPostResponse)
async def get_post(post_id: UUID, current_user: AuthTokenPayload = Depends(require_admin)):
    with service_errors("retrieve blog post"):
        post = await BlogPostsService().get_by_id(post_id)
        if post is None:
            raise not_found("Blog post", post_id)
        return post


@router.post(
    "",
    response_model=BlogPostResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a blog post",
)
async def create_post(
    request: BlogPostCreateRequest,
    current_user: AuthTokenPayload = Depends(require_admin),
):
    with service_errors("create blog post"):
        fields = request.model_dump()
        fields["author_id"] = current_user.user_id
        return await BlogPostsService().create(fields, current_user.user_id)


@router.put("/{post_id}", response_model=BlogPostResponse)
async def update_post(
    post_id: UUID,
    request: BlogPostUpdateRequest,
    current_user: AuthTokenPayload = Depends(require_admin),
):
    with service_errors("update blog post"):
        post = await BlogPostsService().update(
            post_id, request.model_dump(exclude_unset=True), current_user.user_id
        )
        if post is None:
            raise not_found("Blog post", post_id)
        return post


@router.delete("/{post_id}")
async def delete_post(post_id: UUID, current_user: AuthTokenPayload = Depends(require_admin)):
    with service_errors("delete blog post"):
        if not await BlogPostsService().delete(post_id, current_user.user_id):
            raise not_found("Blog post", post_id)
    return {"message": "Blog post deleted successfully"}
