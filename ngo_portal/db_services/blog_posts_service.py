"""
Blog Posts Service
------------------
Audited CRUD for blog posts. Slugs are derived from the title when not
given and must be unique; ``published_at`` is stamped the first time a post
is published and kept afterwards.
"""

import re
import unicodedata
from typing import Any, Dict, List, Optional, Tuple, Union
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from ngo_portal.db_services.crud_service import AuditedCrudService
from ngo_portal.models.db_tables import (
    AuditEntityType,
    BlogPost,
    PostStatus,
    utc_now,
)
from ngo_portal.models.response_models import Pagination


def slugify(value: str) -> str:
    """Lower-case ASCII slug with single dashes."""
    normalized = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode()
    slug = re.sub(r"[^a-z0-9]+", "-", normalized.lower()).strip("-")
    return slug or "post"


class BlogPostsService(AuditedCrudService):
    model = BlogPost
    entity_type = AuditEntityType.BLOG_POST
    status_enum = PostStatus

    def prepare_fields(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        fields = super().prepare_fields(fields)
        fields["slug"] = slugify(fields.get("slug") or fields.get("title") or "")
        if fields.get("status") == PostStatus.PUBLISHED:
            fields.setdefault("published_at", utc_now())
        return fields

    def prepare_update(self, entity: BlogPost, fields: Dict[str, Any]) -> Dict[str, Any]:
        fields = AuditedCrudService.prepare_fields(self, fields)
        if fields.get("slug"):
            fields["slug"] = slugify(fields["slug"])
        else:
            fields.pop("slug", None)
        if fields.get("status") == PostStatus.PUBLISHED and entity.published_at is None:
            fields["published_at"] = utc_now()
        return fields

    async def create(self, fields, performed_by_id=None):
        try:
            return await super().create(fields, performed_by_id)
        except IntegrityError:
            raise ValueError("A post with this slug already exists")

    async def update(self, entity_id, fields, performed_by_id=None):
        try:
            return await super().update(entity_id, fields, performed_by_id)
        except IntegrityError:
            raise ValueError("A post with this slug already exists")

    async def get_by_slug(self, slug: str) -> Optional[BlogPost]:
        async with self.get_session() as session:
            result = await session.execute(select(BlogPost).where(BlogPost.slug == slug))
            return result.scalar_one_or_none()

    async def get_published(self, id_or_slug: Union[UUID, str]) -> Optional[BlogPost]:
        """Published post by id or slug; drafts and archived posts are hidden."""
        try:
            post = await self.get_by_id(id_or_slug)
        except ValueError:
            post = await self.get_by_slug(str(id_or_slug))
        if post is None or post.status != PostStatus.PUBLISHED:
            return None
        return post

    async def list_posts(
        self,
        page: int = 1,
        limit: int = 10,
        status: Optional[str] = None,
        category: Optional[str] = None,
    ) -> Tuple[List[BlogPost], Pagination]:
        filters = [BlogPost.category == category] if category else []
        return await self.list_entities(page, limit, status=status, filters=filters)

    async def list_published(
        self, page: int = 1, limit: int = 10, category: Optional[str] = None
    ) -> Tuple[List[BlogPost], Pagination]:
        query = select(BlogPost).order_by(
            BlogPost.published_at.desc(), BlogPost.created_at.desc()
        )
        filters = [BlogPost.category == category] if category else []
        return await self.list_entities(
            page, limit, status=PostStatus.PUBLISHED.value, filters=filters, query=query
        )

    async def published_categories(self) -> Tuple[List[Dict[str, Any]], int]:
        """
        Categories used by published posts with their post counts.

        Returns:
            Tuple of ([{"name", "count"}] sorted by name, total published posts)
        """
        async with self.get_session() as session:
            result = await session.execute(
                select(BlogPost.category, func.count(BlogPost.id))
                .where(
                    BlogPost.status == PostStatus.PUBLISHED,
                    BlogPost.category.is_not(None),
                    BlogPost.category != "",
                )
                .group_by(BlogPost.category)
                .order_by(BlogPost.category.asc())
            )
            categories = [{"name": name, "count": count} for name, count in result.all()]
            total = (
                await session.execute(
                    select(func.count(BlogPost.id)).where(
                        BlogPost.status == PostStatus.PUBLISHED
                    )
                )
            ).scalar_one()
        return categories, total
