import uuid
from datetime import timedelta

import pytest
from sqlalchemy.exc import SQLAlchemyError

from prompt_gallery.core.errors import (
    BadRequestError,
    ForbiddenError,
    NotFoundError,
    PayloadTooLargeError,
)
from prompt_gallery.core.permissions import Caller
from prompt_gallery.models.submission import GifSubmission, ImageSubmission
from prompt_gallery.models.tag import Tag
from prompt_gallery.models.user import utcnow
from prompt_gallery.repositories.submission_repo import SubmissionRepository
from prompt_gallery.repositories.tag_repo import TagRepository
from prompt_gallery.schemas.submission import SubmissionCreate, SubmissionUpdate
from prompt_gallery.services.media_kinds import GIF, IMAGE, VIDEO
from prompt_gallery.services.moderation_service import ModerationService


def make_service(kind, store, **kwargs) -> ModerationService:
    return ModerationService(
        kind,
        SubmissionRepository(kind.model),
        TagRepository(),
        store,
        max_upload_bytes=kwargs.pop("max_upload_bytes", 1024),
        signed_url_ttl=3600,
        **kwargs,
    )


def payload(**overrides) -> SubmissionCreate:
    data = {
        "project_title": "Neon city",
        "prompt": "a neon city at dusk, volumetric fog",
        "creator_credit": "alice",
    }
    data.update(overrides)
    return SubmissionCreate(**data)


@pytest.fixture
def image_service(stores):
    return make_service(IMAGE, stores["image"])


@pytest.fixture
def gif_service(stores):
    return make_service(GIF, stores["gif"])


@pytest.fixture
def as_alice(alice):
    return Caller.from_user(alice)


@pytest.fixture
def as_bob(bob):
    return Caller.from_user(bob)


@pytest.fixture
def as_admin(admin):
    return Caller.from_user(admin)


def upload_image(service, session, caller, **overrides):
    return service.create(
        session,
        caller,
        payload(**overrides),
        file_bytes=b"\x89PNG fake",
        filename="city.png",
        content_type="image/png",
    )


def upload_gif(service, session, caller):
    return service.create(
        session,
        caller,
        payload(),
        file_bytes=b"GIF89a fake",
        filename="loop.gif",
        content_type="image/gif",
    )


class TestCreate:
    def test_new_submission_is_pending_and_unpublished(
        self, session, image_service, as_alice, stores
    ):
        item = upload_image(image_service, session, as_alice)

        assert item.status == "pending"
        assert item.is_published is False
        assert item.is_featured is False
        assert item.user_id == as_alice.user_id
        assert item.media_url == stores["image"].uploads[0]
        assert item.media_size_bytes == len(b"\x89PNG fake")

    def test_wrong_content_type_is_rejected_before_upload(
        self, session, gif_service, as_alice, stores
    ):
        with pytest.raises(BadRequestError):
            gif_service.create(
                session,
                as_alice,
                payload(),
                file_bytes=b"data",
                filename="clip.mp4",
                content_type="video/mp4",
            )
        assert stores["gif"].uploads == []

    def test_empty_file_is_rejected(self, session, image_service, as_alice):
        with pytest.raises(BadRequestError, match="empty"):
            image_service.create(
                session, as_alice, payload(), b"", "x.png", "image/png"
            )

    def test_oversized_file_is_rejected(self, session, stores, as_alice):
        service = make_service(IMAGE, stores["image"], max_upload_bytes=4)
        with pytest.raises(PayloadTooLargeError):
            service.create(session, as_alice, payload(), b"12345", "x.png", "image/png")
        assert stores["image"].uploads == []

    def test_known_tags_are_attached_and_unknown_ignored(
        self, session, image_service, as_alice
    ):
        tag = Tag(name="cyberpunk", category="Style")
        session.add(tag)
        session.commit()
        session.refresh(tag)

        item = upload_image(image_service, session, as_alice, tag_ids=[tag.id, uuid.uuid4()])

        assert [t.name for t in item.tags] == ["cyberpunk"]

    def test_failed_insert_removes_uploaded_object(self, session, stores, as_alice):
        class BrokenRepository(SubmissionRepository):
            def create(self, session, submission):
                raise SQLAlchemyError("insert failed")

        store = stores["image"]
        service = ModerationService(IMAGE, BrokenRepository(ImageSubmission), TagRepository(), store)

        with pytest.raises(SQLAlchemyError):
            upload_image(service, session, as_alice)

        assert len(store.uploads) == 1
        assert store.deletes == store.uploads
        assert store.objects == {}

    def test_failed_cleanup_still_reraises_db_error(self, session, stores, as_alice):
        class BrokenRepository(SubmissionRepository):
            def create(self, session, submission):
                raise SQLAlchemyError("insert failed")

        store = stores["image"]
        store.fail_delete = True
        service = ModerationService(IMAGE, BrokenRepository(ImageSubmission), TagRepository(), store)

        with pytest.raises(SQLAlchemyError):
            upload_image(service, session, as_alice)
        assert len(store.deletes) == 1


class TestPublishing:
    def test_publish_requires_approval(self, session, image_service, as_alice, as_admin):
        item = upload_image(image_service, session, as_alice)

        with pytest.raises(BadRequestError, match="approved"):
            image_service.publish(session, as_admin, item.id)

        image_service.approve(session, as_admin, item.id)
        published = image_service.publish(session, as_admin, item.id)

        assert published.status == "approved"
        assert published.is_published is True

    def test_rejected_cannot_be_published(self, session, image_service, as_alice, as_admin):
        item = upload_image(image_service, session, as_alice)
        image_service.reject(session, as_admin, item.id, reason="blurry")

        with pytest.raises(BadRequestError):
            image_service.publish(session, as_admin, item.id)

    @pytest.mark.parametrize("moderate", [None, "approve", "reject"])
    def test_unpublish_succeeds_in_any_state(
        self, session, image_service, as_alice, as_admin, moderate
    ):
        item = upload_image(image_service, session, as_alice)
        if moderate:
            getattr(image_service, moderate)(session, as_admin, item.id)

        result = image_service.unpublish(session, as_admin, item.id)
        assert result.is_published is False

    def test_moderation_requires_admin(self, session, image_service, as_alice):
        item = upload_image(image_service, session, as_alice)

        for action in ("approve", "reject", "publish", "unpublish"):
            with pytest.raises(ForbiddenError):
                getattr(image_service, action)(session, as_alice, item.id)

    def test_reject_keeps_publish_flag_by_default(
        self, session, image_service, as_alice, as_admin
    ):
        item = upload_image(image_service, session, as_alice)
        image_service.approve(session, as_admin, item.id)
        image_service.publish(session, as_admin, item.id)

        rejected = image_service.reject(session, as_admin, item.id, reason="license")

        assert rejected.status == "rejected"
        assert rejected.rejection_reason == "license"
        assert rejected.is_published is True

    def test_reject_can_unpublish(self, session, stores, as_alice, as_admin):
        service = make_service(IMAGE, stores["image"], unpublish_on_reject=True)
        item = upload_image(service, session, as_alice)
        service.approve(session, as_admin, item.id)
        service.publish(session, as_admin, item.id)

        assert service.reject(session, as_admin, item.id).is_published is False

    def test_approve_records_verification_for_images(
        self, session, image_service, as_alice, as_admin
    ):
        item = upload_image(image_service, session, as_alice)
        approved = image_service.approve(session, as_admin, item.id)

        assert approved.verified_at is not None
        assert approved.verified_by == as_admin.user_id

    def test_approve_skips_verification_for_gifs(
        self, session, gif_service, as_alice, as_admin
    ):
        item = upload_gif(gif_service, session, as_alice)
        approved = gif_service.approve(session, as_admin, item.id)

        assert approved.status == "approved"
        assert approved.verified_at is None

    def test_verification_can_be_enabled_for_all_kinds(
        self, session, stores, as_alice, as_admin
    ):
        service = make_service(GIF, stores["gif"], record_verification=True)
        item = upload_gif(service, session, as_alice)

        assert service.approve(session, as_admin, item.id).verified_at is not None


class TestOwnership:
    def test_stranger_cannot_delete(self, session, gif_service, as_alice, as_bob, stores):
        item = upload_gif(gif_service, session, as_alice)

        with pytest.raises(ForbiddenError):
            gif_service.delete(session, as_bob, item.id)
        assert stores["gif"].deletes == []

    def test_admin_delete_removes_object_then_row(
        self, session, gif_service, as_alice, as_admin, stores
    ):
        item = upload_gif(gif_service, session, as_alice)
        url = stores["gif"].uploads[0]

        gif_service.delete(session, as_admin, item.id)

        assert stores["gif"].deletes == [url]
        assert session.get(GifSubmission, item.id) is None

    def test_owner_can_delete(self, session, gif_service, as_alice):
        item = upload_gif(gif_service, session, as_alice)
        gif_service.delete(session, as_alice, item.id)

        with pytest.raises(NotFoundError):
            gif_service.get(session, item.id)

    def test_delete_survives_storage_failure(
        self, session, gif_service, as_alice, stores
    ):
        item = upload_gif(gif_service, session, as_alice)
        stores["gif"].fail_delete = True

        gif_service.delete(session, as_alice, item.id)

        assert session.get(GifSubmission, item.id) is None

    def test_owner_update_ignores_featured_flag(self, session, image_service, as_alice):
        item = upload_image(image_service, session, as_alice)

        updated = image_service.update(
            session,
            as_alice,
            item.id,
            SubmissionUpdate(project_title="Neon harbor", is_featured=True),
        )

        assert updated.project_title == "Neon harbor"
        assert updated.is_featured is False

    def test_admin_can_feature(self, session, image_service, as_alice, as_admin):
        item = upload_image(image_service, session, as_alice)
        updated = image_service.update(
            session, as_admin, item.id, SubmissionUpdate(is_featured=True)
        )
        assert updated.is_featured is True

    def test_stranger_cannot_update(self, session, image_service, as_alice, as_bob):
        item = upload_image(image_service, session, as_alice)
        with pytest.raises(ForbiddenError):
            image_service.update(session, as_bob, item.id, SubmissionUpdate(prompt="mine now"))


class TestReads:
    def test_private_kinds_return_signed_urls(self, session, gif_service, as_alice, stores):
        item = upload_gif(gif_service, session, as_alice)

        assert item.media_url == f"{stores['gif'].uploads[0]}?signed=1&ttl=3600"

    def test_public_images_return_stored_url(self, session, image_service, as_alice, stores):
        item = upload_image(image_service, session, as_alice)
        assert image_service.get(session, item.id).media_url == stores["image"].uploads[0]

    def test_signing_failure_falls_back_to_stored_url(
        self, session, gif_service, as_alice, stores
    ):
        item = upload_gif(gif_service, session, as_alice)
        stores["gif"].fail_presign = True

        assert gif_service.get(session, item.id).media_url == stores["gif"].uploads[0]

    def test_list_filters_and_orders_newest_first(
        self, session, image_service, as_alice, as_bob, as_admin
    ):
        first = upload_image(image_service, session, as_alice, project_title="first")
        second = upload_image(image_service, session, as_bob, project_title="second")
        third = upload_image(image_service, session, as_alice, project_title="third")
        image_service.approve(session, as_admin, first.id)

        # Timestamps disagree with insertion order
        now = utcnow()
        for item_id, age in ((first.id, 1), (second.id, 30), (third.id, 10)):
            row = session.get(ImageSubmission, item_id)
            row.created_at = now - timedelta(minutes=age)
            session.add(row)
        session.commit()

        assert [i.id for i in image_service.list(session, status="approved")] == [first.id]
        assert [i.id for i in image_service.list(session, user_id=as_bob.user_id)] == [second.id]
        assert [i.id for i in image_service.list(session)] == [first.id, third.id, second.id]
        assert [i.id for i in image_service.list(session, skip=1, limit=1)] == [third.id]

    def test_missing_submission_is_not_found(self, session, stores):
        service = make_service(VIDEO, stores["video"])
        with pytest.raises(NotFoundError, match="Video prompt not found"):
            service.get(session, uuid.uuid4())
