# prompt_gallery/services/tag_service.py
import logging
import uuid

from sqlmodel import Session

from prompt_gallery.core.errors import BadRequestError, ConflictError, NotFoundError
from prompt_gallery.models.tag import Tag
from prompt_gallery.models.user import utcnow
from prompt_gallery.repositories.tag_repo import TagRepository
from prompt_gallery.schemas.tag import CategoryCount, TagCreate, TagStats, TagUpdate

logger = logging.getLogger(__name__)

TAG_DELETE_POLICIES = ("detach", "block")


class TagService:
    """
    Business logic for the tag catalog.

    Responsibilities:
      - name uniqueness (exact match)
      - listing order: usage_count DESC, name ASC
      - delete policy for tags still attached to submissions:
          * "detach": drop the links, then the tag
          * "block":  refuse with ConflictError
    """

    def __init__(self, repo: TagRepository, delete_policy: str = "detach"):
        if delete_policy not in TAG_DELETE_POLICIES:
            raise ValueError(f"Unknown tag delete policy: {delete_policy}")
        self.repo = repo
        self.delete_policy = delete_policy

    # ----- Public reads -----

    def list_tags(
        self,
        session: Session,
        category: str | None = None,
        is_active: bool | None = None,
    ) -> list[Tag]:
        return self.repo.list(session, category=category, is_active=is_active)

    def get_tag(self, session: Session, tag_id: uuid.UUID) -> Tag:
        tag = self.repo.get_by_id(session, tag_id)
        if not tag:
            raise NotFoundError("Tag not found")
        return tag

    def search_tags(self, session: Session, query: str | None, limit: int = 10) -> list[Tag]:
        query = (query or "").strip()
        if not query:
            raise BadRequestError("Search query required")
        return self.repo.search(session, query, limit=limit)

    def get_stats(self, session: Session) -> TagStats:
        return TagStats(
            total_tags=self.repo.count(session),
            category_stats=[
                CategoryCount(category=category, count=count)
                for category, count in self.repo.count_by_category(session)
            ],
        )

    # ----- Admin -----

    def create_tag(self, session: Session, payload: TagCreate) -> Tag:
        if self.repo.get_by_name(session, payload.name) is not None:
            raise ConflictError("Tag with this name already exists")

        tag = Tag(
            name=payload.name,
            category=payload.category,
            description=payload.description,
            is_active=True,
        )
        return self.repo.create(session, tag)

    def update_tag(self, session: Session, tag_id: uuid.UUID, payload: TagUpdate) -> Tag:
        tag = self.get_tag(session, tag_id)

        if payload.name is not None and payload.name != tag.name:
            other = self.repo.get_by_name(session, payload.name)
            if other is not None and other.id != tag.id:
                raise ConflictError("Tag with this name already exists")
            tag.name = payload.name

        if payload.category is not None:
            tag.category = payload.category
        if payload.description is not None:
            tag.description = payload.description
        if payload.is_active is not None:
            tag.is_active = payload.is_active

        tag.updated_at = utcnow()
        return self.repo.update(session, tag)

    def delete_tag(self, session: Session, tag_id: uuid.UUID) -> None:
        tag = self.get_tag(session, tag_id)

        if self.delete_policy == "block":
            if self.repo.is_referenced(session, tag.id):
                raise ConflictError("Tag is still attached to submissions")
        else:
            removed = self.repo.detach_everywhere(session, tag.id)
            if removed:
                logger.info(f"Detached tag {tag.name} from {removed} submission(s)")

        self.repo.delete(session, tag)
