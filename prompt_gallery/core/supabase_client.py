# prompt_gallery/core/supabase_client.py
from supabase import create_client, Client

from prompt_gallery.core.config import Settings


def create_storage_client(settings: Settings) -> Client:
    """
    Create a Supabase client with the service role key.

    Used for:
      - uploading to the media buckets (two of them private)
      - minting signed URLs for private objects
      - deleting objects on submission delete / upload rollback

    WARNING:
      - Never expose service role key to frontend.
      - Only backend should call this.

    Raises:
        RuntimeError: if SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY is not set.
    """
    if not settings.SUPABASE_URL:
        raise RuntimeError("Missing SUPABASE_URL in .env")
    if not settings.SUPABASE_SERVICE_ROLE_KEY:
        raise RuntimeError("Missing SUPABASE_SERVICE_ROLE_KEY in .env")
    return create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)
