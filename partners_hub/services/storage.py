"""Object storage on the auth provider — uploads, public and signed URLs."""

from __future__ import annotations

import logging
import re
from urllib.parse import quote

from partners_hub.core.config import settings
from partners_hub.core.exceptions import UpstreamServiceError
from partners_hub.services.supabase_api import SupabaseServiceClient

logger = logging.getLogger(__name__)

BUCKET_PRODUCT_IMAGES = "product-images"
BUCKET_COMPANY_NOTES = "company-notes"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def safe_file_name(name: str) -> str:
    """Object-key-safe version of an uploaded file name."""
    cleaned = _UNSAFE_CHARS.sub("_", name.strip()).strip("._")
    return cleaned or "file"


class StorageClient(SupabaseServiceClient):
    service_name = "Storage API"

    @staticmethod
    def _object_path(bucket: str, path: str) -> str:
        return f"{quote(bucket)}/{quote(path.lstrip('/'))}"

    async def upload(
        self,
        bucket: str,
        path: str,
        content: bytes,
        content_type: str = "application/octet-stream",
        *,
        upsert: bool = False,
    ) -> str:
        """Store *content* at *path* in *bucket* and return the path."""
        response = await self._request(
            "POST",
            f"/storage/v1/object/{self._object_path(bucket, path)}",
            content=content,
            headers={"Content-Type": content_type, "x-upsert": "true" if upsert else "false"},
        )
        self._raise_for_status(response, f"upload {bucket}/{path}")
        logger.info("Uploaded %s/%s (%d bytes)", bucket, path, len(content))
        return path

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self.base_url}/storage/v1/object/public/{self._object_path(bucket, path)}"

    async def create_signed_url(self, bucket: str, path: str, expires_in: int = 3600) -> str:
        response = await self._request(
            "POST",
            f"/storage/v1/object/sign/{self._object_path(bucket, path)}",
            json={"expiresIn": expires_in},
        )
        self._raise_for_status(response, f"sign {bucket}/{path}")
        signed = response.json().get("signedURL")
        if not signed:
            raise UpstreamServiceError("Failed to sign URL: response had no signedURL")
        return f"{self.base_url}/storage/v1{signed}"

    async def remove(self, bucket: str, paths: list[str]) -> None:
        response = await self._request(
            "DELETE", f"/storage/v1/object/{quote(bucket)}", json={"prefixes": paths}
        )
        self._raise_for_status(response, f"remove objects from {bucket}")


def get_storage() -> StorageClient:
    """FastAPI dependency; overridden in tests."""
    return StorageClient(
        settings.supabase_url,
        settings.supabase_service_role_key,
        timeout=settings.supabase_timeout,
    )
