"""Supabase Storage adapter for contributed images."""

from dataclasses import dataclass

from supabase import Client

from image_catalog.services.contributions import ObjectStorage


@dataclass
class SupabaseObjectStorage(ObjectStorage):
    """Object storage backed by a public Supabase Storage bucket."""

    client: Client
    bucket: str
    cache_control: str = "3600"

    def upload(self, path: str, content: bytes, content_type: str) -> None:
        """Upload bytes to the bucket without overwriting existing objects."""
        self.client.storage.from_(self.bucket).upload(
            path=path,
            file=content,
            file_options={
                "content-type": content_type,
                "cache-control": self.cache_control,
                "upsert": "false",
            },
        )

    def get_public_url(self, path: str) -> str:
        """Return the public URL of an object in the bucket."""
        url = self.client.storage.from_(self.bucket).get_public_url(path)
        if not url:
            raise RuntimeError("Supabase returned an empty public URL")
        return url

    def remove(self, path: str) -> None:
        """Delete an object from the bucket."""
        self.client.storage.from_(self.bucket).remove([path])
