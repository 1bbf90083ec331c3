"""
Uploadcare Adapters

HTTP adapters for the Uploadcare REST, upload and CDN endpoints.
UploadcareAssetGateway implements IAssetGateway; UploadcareBlobStore
implements IBlobStore.
"""

import logging
from typing import Any, Dict, Iterator, List, Optional

import requests

from ..config.uploadcare_config import UploadcareConfig
from ..domain.conversion.gateway import IAssetGateway, ReadyInfo
from ..domain.errors import AssetGatewayError, StorageError
from ..domain.file_storage.blob_store import IBlobStore, StoredBlob

logger = logging.getLogger(__name__)

REST_ACCEPT = "application/vnd.uploadcare-v0.7+json"
STREAM_CHUNK_SIZE = 64 * 1024


class UploadcareClient:
    """Thin session wrapper that signs REST calls and decodes JSON bodies."""

    def __init__(self, config: UploadcareConfig, session: Optional[requests.Session] = None):
        self.config = config
        self.session = session or requests.Session()
        self.session.headers.update({
            "Accept": REST_ACCEPT,
            "Authorization": f"Uploadcare.Simple {config.public_key}:{config.secret_key}",
        })

    def request(self, method: str, path: str, **kwargs) -> Any:
        """
        Call the REST API.

        Raises:
            AssetGatewayError: On transport errors, error statuses or
                undecodable bodies
        """
        url = f"{self.config.api_base}{path}"
        kwargs.setdefault("timeout", self.config.request_timeout)

        try:
            response = self.session.request(method, url, **kwargs)
        except requests.exceptions.RequestException as e:
            raise AssetGatewayError(f"{method} {path} failed: {e}", original_error=e)

        if response.status_code >= 400:
            raise AssetGatewayError(
                f"{method} {path} returned {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise AssetGatewayError(f"{method} {path} returned invalid JSON", original_error=e)


class UploadcareAssetGateway(IAssetGateway):
    """IAssetGateway backed by the Uploadcare REST API and CDN."""

    def __init__(self, client: UploadcareClient):
        self.client = client
        self.cdn_base = client.config.cdn_base

    def submit_conversion(self, paths: List[str]) -> Dict[str, Any]:
        return self.client.request(
            "POST",
            "/convert/document/",
            json={"paths": paths, "store": "1"},
        )

    def get_conversion_status(self, token: str) -> Any:
        return self.client.request("GET", f"/convert/document/status/{token}/")

    def get_asset_info(self, asset_id: str) -> ReadyInfo:
        data = self.client.request("GET", f"/files/{asset_id}/")
        if not isinstance(data, dict):
            raise AssetGatewayError(f"Unexpected file info payload for {asset_id}")
        size = data.get("size")
        return ReadyInfo(
            asset_id=asset_id,
            is_ready=bool(data.get("is_ready")),
            mime_type=data.get("mime_type"),
            size=int(size) if isinstance(size, (int, float)) else None,
        )

    def content_url(self, asset_id: str) -> str:
        return f"{self.cdn_base}/{asset_id}/"

    def preview_url(self, asset_id: str, size: int) -> str:
        return f"{self.cdn_base}/{asset_id}/-/preview/{size}x{size}/"


class UploadcareBlobStore(IBlobStore):
    """
    IBlobStore backed by the Uploadcare upload API and CDN.

    Uploads and CDN reads go through public_session, which never carries
    the REST secret key. Deletes use the signed REST client.
    """

    def __init__(self, client: UploadcareClient, public_session: Optional[requests.Session] = None):
        self.client = client
        self.config = client.config
        self.public_session = public_session or requests.Session()

    def upload(self, content: bytes, filename: str, mime_type: str) -> StoredBlob:
        url = f"{self.config.upload_base}/base/"
        try:
            response = self.public_session.post(
                url,
                data={"UPLOADCARE_PUB_KEY": self.config.public_key, "UPLOADCARE_STORE": "1"},
                files={"file": (filename, content, mime_type)},
                timeout=self.config.request_timeout,
            )
        except requests.exceptions.RequestException as e:
            raise StorageError(f"Upload of {filename} failed: {e}", original_error=e)

        if response.status_code >= 400:
            raise StorageError(f"Upload of {filename} returned {response.status_code}: {response.text[:200]}")

        try:
            asset_id = response.json().get("file")
        except ValueError as e:
            raise StorageError(f"Upload of {filename} returned invalid JSON", original_error=e)
        if not asset_id:
            raise StorageError(f"Upload of {filename} returned no file id")

        return StoredBlob(asset_id=asset_id, url=f"{self.config.cdn_base}/{asset_id}/")

    def delete(self, asset_id: str) -> bool:
        try:
            self.client.request("DELETE", f"/files/{asset_id}/storage/")
        except AssetGatewayError as e:
            if e.status_code == 404:
                logger.info(f"Asset {asset_id} already deleted")
                return True
            raise StorageError(f"Deleting asset {asset_id} failed: {e}", original_error=e)
        return True

    def open_stream(self, url: str) -> Iterator[bytes]:
        try:
            response = self.public_session.get(url, stream=True, timeout=self.config.request_timeout)
        except requests.exceptions.RequestException as e:
            raise StorageError(f"Fetching {url} failed: {e}", original_error=e)

        if response.status_code >= 400:
            response.close()
            raise StorageError(f"Fetching {url} returned {response.status_code}")

        return self._iter_chunks(response)

    @staticmethod
    def _iter_chunks(response) -> Iterator[bytes]:
        try:
            for chunk in response.iter_content(chunk_size=STREAM_CHUNK_SIZE):
                if chunk:
                    yield chunk
        finally:
            response.close()
