# prompt_gallery/core/storage.py
import logging
import os
import uuid
from typing import Any

from prompt_gallery.core.errors import UpstreamServiceError

logger = logging.getLogger(__name__)


def generate_filename(ext: str) -> str:
    """
    Generate a random filename using UUID4.

    Args:
        ext: File extension without dot (e.g. "png", "gif"). May be empty.

    Returns:
        A filename like "<uuid4>.png"
    """
    name = str(uuid.uuid4())
    return f"{name}.{ext}" if ext else name


def extension_of(filename: str | None) -> str:
    """'cat.GIF' -> 'gif', 'noext' -> ''"""
    if not filename:
        return ""
    return os.path.splitext(filename)[1].lstrip(".").lower()


class SupabaseBucket:
    """
    One Supabase Storage bucket used as a media store.

    Covers both external collaborators the service needs:

      - Image CDN (public bucket): upload -> public URL, delete by URL.
        The object id ("public_id") is the object path, taken from the
        trailing part of the public URL.
      - Object Storage (private GIF / video buckets): upload -> URL,
        delete by URL, presign_get(url, ttl) -> time-limited URL.

    `client` may be None when storage is not configured; every operation
    then raises UpstreamServiceError so only the dependent requests fail.
    """

    def __init__(self, client: Any | None, bucket: str, folder: str):
        self.client = client
        self.bucket = bucket
        self.folder = folder.strip("/")

    # ----- Helpers -----

    def _storage(self):
        if self.client is None:
            raise UpstreamServiceError(f"Storage for bucket '{self.bucket}' is not configured")
        return self.client.storage.from_(self.bucket)

    def public_id_from_url(self, url: str) -> str | None:
        """
        Given a stored URL, extract the object path relative to the bucket.

        Example:
            https://<proj>.supabase.co/storage/v1/object/public/gifs/gifs/a.gif
            -> 'gifs/a.gif'
        """
        marker = f"/storage/v1/object/public/{self.bucket}/"
        idx = url.find(marker)
        if idx == -1:
            return None
        path = url[idx + len(marker):]
        # Drop any query string appended by the CDN
        return path.split("?", 1)[0] or None

    # ----- Operations -----

    def upload(self, file_bytes: bytes, filename: str | None, content_type: str) -> str:
        """
        Upload raw bytes under `<folder>/<uuid>.<ext>` and return the object URL.

        Raises:
            UpstreamServiceError: if storage is not configured or the upload fails.
        """
        storage = self._storage()
        path = f"{self.folder}/{generate_filename(extension_of(filename))}"
        try:
            storage.upload(path, file_bytes, {"content-type": content_type, "upsert": "true"})
            return storage.get_public_url(path)
        except Exception as e:
            logger.error(f"Upload to bucket {self.bucket} failed: {e}")
            raise UpstreamServiceError(f"Failed to upload file: {e}") from e

    def delete(self, url: str) -> None:
        """
        Delete the object behind `url`.

        Raises:
            UpstreamServiceError: if storage is not configured, the URL does
                not belong to this bucket, or the delete call fails.
        """
        storage = self._storage()
        path = self.public_id_from_url(url)
        if not path:
            raise UpstreamServiceError(f"URL does not belong to bucket '{self.bucket}'")
        try:
            # Supabase Python client expects a list of paths.
            storage.remove([path])
        except Exception as e:
            raise UpstreamServiceError(f"Failed to delete {path}: {e}") from e

    def presign_get(self, url: str, ttl_seconds: int) -> str:
        """
        Mint a time-limited read URL for a private object.

        Raises:
            UpstreamServiceError: on missing config, foreign URL or client failure.
        """
        storage = self._storage()
        path = self.public_id_from_url(url)
        if not path:
            raise UpstreamServiceError(f"URL does not belong to bucket '{self.bucket}'")
        try:
            result = storage.create_signed_url(path, ttl_seconds)
        except Exception as e:
            raise UpstreamServiceError(f"Failed to sign {path}: {e}") from e

        # storage3 has used both spellings across releases
        signed = result.get("signedURL") or result.get("signedUrl")
        if not signed:
            raise UpstreamServiceError(f"No signed URL returned for {path}")
        return signed
