# prompt_gallery/services/media_kinds.py
from dataclasses import dataclass

from prompt_gallery.models.submission import (
    GifSubmission,
    ImageSubmission,
    SubmissionBase,
    VideoSubmission,
)
from prompt_gallery.schemas.submission import (
    GifSubmissionRead,
    ImageSubmissionRead,
    SubmissionRead,
    VideoSubmissionRead,
)


@dataclass(frozen=True)
class MediaKind:
    """
    Static description of one media kind.

    The moderation lifecycle is identical for every kind; only these
    knobs differ.

    Attributes:
        name: singular id used in logs and storage folders ("gif")
        path: URL segment ("gifs")
        label: human label for messages ("GIF")
        model: submission table
        read_model: response schema
        content_type_prefix: accepted upload MIME prefix
        signs_urls: private bucket, so reads mint presigned URLs
        records_verification: approve stamps verified_at / verified_by
    """

    name: str
    path: str
    label: str
    model: type[SubmissionBase]
    read_model: type[SubmissionRead]
    content_type_prefix: str
    signs_urls: bool
    records_verification: bool


IMAGE = MediaKind(
    name="image",
    path="images",
    label="Image",
    model=ImageSubmission,
    read_model=ImageSubmissionRead,
    content_type_prefix="image/",
    signs_urls=False,
    records_verification=True,
)

GIF = MediaKind(
    name="gif",
    path="gifs",
    label="GIF",
    model=GifSubmission,
    read_model=GifSubmissionRead,
    content_type_prefix="image/gif",
    signs_urls=True,
    records_verification=False,
)

VIDEO = MediaKind(
    name="video",
    path="videos",
    label="Video",
    model=VideoSubmission,
    read_model=VideoSubmissionRead,
    content_type_prefix="video/",
    signs_urls=True,
    records_verification=False,
)

MEDIA_KINDS: dict[str, MediaKind] = {kind.name: kind for kind in (IMAGE, GIF, VIDEO)}
