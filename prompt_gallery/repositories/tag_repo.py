# prompt_gallery/repositories/tag_repo.py
import uuid

from sqlalchemy import func
from sqlmodel import Session, select

from prompt_gallery.models.submission import TAG_LINK_MODELS
from prompt_gallery.models.tag import Tag


class TagRepository:
    """
    Data access layer for Tag and the per-kind tag link tables.

    - Pure DB operations (CRUD + queries).
    - No FastAPI, no business logic.
    """

    # ----- Tags -----

    def get_by_id(self, session: Session, tag_id: uuid.UUID) -> Tag | None:
        return session.get(Tag, tag_id)

    def get_by_name(self, session: Session, name: str) -> Tag | None:
        stmt = select(Tag).where(Tag.name == name)
        return session.exec(stmt).first()

    def get_many(self, session: Session, tag_ids: list[uuid.UUID]) -> list[Tag]:
        if not tag_ids:
            return []
        stmt = select(Tag).where(Tag.id.in_(tag_ids))
        return session.exec(stmt).all()

    def search(self, session: Session, query: str, limit: int = 10) -> list[Tag]:
        stmt = (
            select(Tag)
            .where(Tag.name.contains(query))
            .order_by(Tag.usage_count.desc(), Tag.name.asc())
            .limit(limit)
        )
        return session.exec(stmt).all()

    def count(self, session: Session) -> int:
        return session.exec(select(func.count()).select_from(Tag)).one()

    def count_by_category(self, session: Session) -> list[tuple[str, int]]:
        stmt = (
            select(Tag.category, func.count())
            .group_by(Tag.category)
            .order_by(Tag.category)
        )
        return [(category, count) for category, count in session.exec(stmt).all()]

    def list(
        self,
        session: Session,
        category: str | None = None,
        is_active: bool | None = None,
    ) -> list[Tag]:
        stmt = select(Tag)
        if category is not None:
            stmt = stmt.where(Tag.category == category)
        if is_active is not None:
            stmt = stmt.where(Tag.is_active == is_active)
        stmt = stmt.order_by(Tag.usage_count.desc(), Tag.name.asc())
        return session.exec(stmt).all()

    def create(self, session: Session, tag: Tag) -> Tag:
        session.add(tag)
        session.commit()
        session.refresh(tag)
        return tag

    def update(self, session: Session, tag: Tag) -> Tag:
        session.add(tag)
        session.commit()
        session.refresh(tag)
        return tag

    def delete(self, session: Session, tag: Tag) -> None:
        session.delete(tag)
        session.commit()

    # ----- Links -----

    def is_referenced(self, session: Session, tag_id: uuid.UUID) -> bool:
        """True if any submission of any kind carries this tag."""
        for link_model in TAG_LINK_MODELS:
            stmt = select(link_model).where(link_model.tag_id == tag_id)
            if session.exec(stmt).first() is not None:
                return True
        return False

    def detach_everywhere(self, session: Session, tag_id: uuid.UUID) -> int:
        """Remove the tag from every submission; no commit."""
        removed = 0
        for link_model in TAG_LINK_MODELS:
            stmt = select(link_model).where(link_model.tag_id == tag_id)
            for link in session.exec(stmt).all():
                session.delete(link)
                removed += 1
        session.flush()
        return removed
