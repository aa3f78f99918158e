"""Storage service for handling Supabase storage operations."""

import asyncio
from typing import Any, Dict, List, Optional

import httpx

from bidsmart.core.config import settings
from bidsmart.core.exceptions import APIClientError
from bidsmart.utils.logging import get_logger

LOGGER = get_logger(__name__)


class StorageService:
    """Service for managing bid PDFs in Supabase storage."""

    def __init__(self, bucket: Optional[str] = None):
        self.url = settings.supabase_url.rstrip("/")
        self.service_role_key = settings.supabase_service_role_key
        self.bucket = bucket or settings.supabase.storage_bucket
        self.base_api_url = f"{self.url}/storage/v1"
        self.headers = {
            "Authorization": f"Bearer {self.service_role_key}",
            "apikey": self.service_role_key,
        }

    async def upload_file(
        self,
        file: Any,
        path: str,
        content_type: str = "application/pdf"
    ) -> Dict[str, Any]:
        """Upload a file to the bid bucket.

        Args:
            file: Raw bytes or an object with a (possibly async) ``read``
            path: Target path within the bucket
            content_type: MIME type to store

        Returns:
            Dict containing the upload result.

        Raises:
            APIClientError: If the upload fails.
        """
        upload_url = f"{self.base_api_url}/object/{self.bucket}/{path}"

        if hasattr(file, "read"):
            content = file.read()
            if asyncio.iscoroutine(content):
                content = await content
        else:
            content = file

        final_content_type = content_type
        if getattr(file, "content_type", None):
            final_content_type = file.content_type

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    upload_url,
                    headers={**self.headers, "Content-Type": final_content_type},
                    content=content,
                    timeout=settings.http_timeout
                )
        except httpx.HTTPError as e:
            LOGGER.error(f"Error uploading file to Supabase: {str(e)}", exc_info=True)
            raise APIClientError(f"Storage upload error: {str(e)}", original_error=e)

        if response.status_code != 200:
            LOGGER.error(
                f"Failed to upload file to Supabase: {response.text}",
                extra={"bucket": self.bucket, "path": path, "status_code": response.status_code}
            )
            raise APIClientError(f"Upload failed: {response.text}")

        return response.json()

    async def create_signed_url(self, path: str, expires_in: Optional[int] = None) -> str:
        """Generate a signed download URL for a stored PDF.

        Args:
            path: Object path.
            expires_in: Expiration time in seconds, defaults to the configured TTL.

        Returns:
            Absolute signed URL.

        Raises:
            APIClientError: If URL generation fails.
        """
        url = f"{self.base_api_url}/object/sign/{self.bucket}/{path}"
        ttl = expires_in or settings.supabase.signed_url_ttl

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    url,
                    headers=self.headers,
                    json={"expiresIn": ttl},
                    timeout=settings.http_timeout
                )
        except httpx.HTTPError as e:
            LOGGER.error(f"Error generating signed URL: {str(e)}", exc_info=True)
            raise APIClientError(f"Signed URL error: {str(e)}", original_error=e)

        if response.status_code != 200:
            LOGGER.error(
                f"Failed to generate signed URL: {response.text}",
                extra={"bucket": self.bucket, "path": path, "status_code": response.status_code}
            )
            raise APIClientError(f"Signed URL generation failed: {response.text}")

        signed_path = response.json().get("signedURL")
        if not signed_path:
            raise APIClientError("Supabase response did not contain signedURL")

        # Supabase returns a path relative to /storage/v1
        if signed_path.startswith("/object/"):
            return f"{self.base_api_url}{signed_path}"
        if signed_path.startswith("/"):
            return f"{self.url}{signed_path}"
        return signed_path

    async def delete_files(self, paths: List[str]) -> None:
        """Remove objects from the bid bucket.

        Raises:
            APIClientError: If Supabase rejects the request.
        """
        if not paths:
            return

        url = f"{self.base_api_url}/object/{self.bucket}"
        try:
            async with httpx.AsyncClient() as client:
                response = await client.request(
                    "DELETE",
                    url,
                    headers=self.headers,
                    json={"prefixes": paths},
                    timeout=settings.http_timeout
                )
        except httpx.HTTPError as e:
            raise APIClientError(f"Storage delete error: {str(e)}", original_error=e)

        if response.status_code >= 400:
            LOGGER.error(
                f"Failed to delete files: {response.text}",
                extra={"bucket": self.bucket, "count": len(paths), "status_code": response.status_code}
            )
            raise APIClientError(f"Delete failed: {response.text}")
