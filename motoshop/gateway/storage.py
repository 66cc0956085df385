"""
Client for the platform's object storage REST API.
"""

from typing import Callable, Dict, List, Optional
import logging
from urllib.parse import quote

import httpx

from motoshop.core.errors import GatewayError
from motoshop.gateway.auth import error_message

logger = logging.getLogger(__name__)


class StorageClient:
    """
    Upload / download / remove objects in one bucket.

    ``token_provider`` returns the signed-in user's access token so the
    platform's bucket policies apply to the rider, not to the anon key.
    """

    def __init__(
        self,
        http: httpx.Client,
        base_url: Optional[str],
        api_key: Optional[str],
        bucket: str,
        token_provider: Callable[[], Optional[str]] = lambda: None,
    ):
        self._http = http
        self._base_url = f"{(base_url or '').rstrip('/')}/storage/v1"
        self._api_key = api_key or ""
        self.bucket = bucket
        self._token_provider = token_provider

    def _headers(self) -> Dict[str, str]:
        token = self._token_provider() or self._api_key
        return {"apikey": self._api_key, "Authorization": f"Bearer {token}"}

    def _request(self, method: str, path: str, headers: Optional[Dict[str, str]] = None,
                 **kwargs) -> httpx.Response:
        try:
            response = self._http.request(
                method, f"{self._base_url}{path}", headers={**self._headers(), **(headers or {})}, **kwargs
            )
        except httpx.HTTPError as e:
            raise GatewayError(str(e)) from e
        if response.is_error:
            raise GatewayError(error_message(response), response.status_code)
        return response

    def _object_path(self, path: str) -> str:
        return f"{quote(self.bucket)}/{quote(path)}"

    def upload(self, path: str, content: bytes, content_type: Optional[str] = None,
               upsert: bool = False) -> str:
        """Store ``content`` at ``path``. Without ``upsert`` an existing object is an error."""
        self._request(
            "POST", f"/object/{self._object_path(path)}",
            headers={
                "Content-Type": content_type or "application/octet-stream",
                "Cache-Control": "max-age=3600",
                "x-upsert": "true" if upsert else "false",
            },
            content=content,
        )
        logger.info(f"Uploaded {len(content)} bytes to {self.bucket}/{path}")
        return path

    def download(self, path: str) -> bytes:
        response = self._request("GET", f"/object/authenticated/{self._object_path(path)}")
        return response.content

    def remove(self, paths: List[str]) -> None:
        self._request("DELETE", f"/object/{quote(self.bucket)}", json={"prefixes": paths})
        logger.info(f"Removed {len(paths)} object(s) from {self.bucket}")
