"""Supabase Storage photo repository."""

from dataclasses import dataclass

from supabase import Client

from puppy_class.services.sessions import PhotoRepository


@dataclass
class SupabasePhotoRepository(PhotoRepository):
    """Store session photos in a Supabase Storage bucket."""

    client: Client
    bucket: str = "puppy-class"

    def save_photo(self, filename: str, content: bytes, content_type: str) -> str:
        """Upload the photo and return its public URL."""
        storage = self.client.storage.from_(self.bucket)
        storage.upload(
            path=filename,
            file=content,
            file_options={"content-type": content_type, "upsert": "true"},
        )
        return storage.get_public_url(filename)
