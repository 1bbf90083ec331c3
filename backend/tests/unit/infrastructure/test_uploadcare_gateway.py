"""
Unit tests for the Uploadcare adapters with a mocked HTTP session.
"""

from unittest.mock import Mock

import pytest
import requests

from filevault.config.uploadcare_config import ConversionConfig, UploadcareConfig
from filevault.domain.errors import AssetGatewayError, StorageError
from filevault.infrastructure.uploadcare_gateway import (
    REST_ACCEPT,
    UploadcareAssetGateway,
    UploadcareBlobStore,
    UploadcareClient,
)


def make_response(status_code=200, payload=None, text=""):
    response = Mock()
    response.status_code = status_code
    response.text = text
    response.content = b"{}" if payload is not None else b""
    if isinstance(payload, Exception):
        response.json.side_effect = payload
    else:
        response.json.return_value = payload
    return response


@pytest.fixture
def config(monkeypatch):
    monkeypatch.setenv("UPLOADCARE_PUBLIC_KEY", "pub")
    monkeypatch.setenv("UPLOADCARE_SECRET_KEY", "sec")
    monkeypatch.setenv("UPLOADCARE_CDN_BASE", "https://cdn.example/")
    return UploadcareConfig()


@pytest.fixture
def session():
    session = Mock()
    session.headers = {}
    return session


@pytest.fixture
def client(config, session):
    return UploadcareClient(config, session=session)


class TestUploadcareClient:
    def test_signs_requests(self, client, session):
        assert session.headers["Authorization"] == "Uploadcare.Simple pub:sec"
        assert session.headers["Accept"] == REST_ACCEPT

    def test_error_status(self, client, session):
        session.request.return_value = make_response(503, {}, "maintenance")

        with pytest.raises(AssetGatewayError) as exc_info:
            client.request("GET", "/files/x/")

        assert exc_info.value.status_code == 503

    def test_transport_error(self, client, session):
        session.request.side_effect = requests.exceptions.ConnectionError("reset")

        with pytest.raises(AssetGatewayError) as exc_info:
            client.request("GET", "/files/x/")

        assert isinstance(exc_info.value.original_error, requests.exceptions.ConnectionError)

    def test_invalid_json(self, client, session):
        session.request.return_value = make_response(200, ValueError("bad json"))

        with pytest.raises(AssetGatewayError):
            client.request("GET", "/files/x/")

    def test_empty_body(self, client, session):
        session.request.return_value = make_response(204)

        assert client.request("DELETE", "/files/x/storage/") == {}

    def test_default_timeout(self, client, session, config):
        session.request.return_value = make_response(200, {})

        client.request("GET", "/files/x/")

        assert session.request.call_args.kwargs["timeout"] == config.request_timeout


class TestUploadcareAssetGateway:
    def test_submit_conversion(self, client, session):
        session.request.return_value = make_response(200, {"problems": {}, "result": []})
        gateway = UploadcareAssetGateway(client)

        gateway.submit_conversion(["abc/document/-/format/jpg/-/page/1/"])

        args, kwargs = session.request.call_args
        assert args == ("POST", "https://api.uploadcare.com/convert/document/")
        assert kwargs["json"] == {"paths": ["abc/document/-/format/jpg/-/page/1/"], "store": "1"}

    def test_status(self, client, session):
        session.request.return_value = make_response(200, {"status": "finished"})

        assert UploadcareAssetGateway(client).get_conversion_status("42") == {"status": "finished"}
        assert session.request.call_args.args[1].endswith("/convert/document/status/42/")

    def test_asset_info(self, client, session):
        session.request.return_value = make_response(
            200, {"is_ready": True, "mime_type": "application/pdf", "size": 1024}
        )

        info = UploadcareAssetGateway(client).get_asset_info("abc")

        assert info.is_ready
        assert info.mime_type == "application/pdf"
        assert info.size == 1024

    def test_asset_info_unexpected_payload(self, client, session):
        session.request.return_value = make_response(200, ["not", "a", "dict"])

        with pytest.raises(AssetGatewayError):
            UploadcareAssetGateway(client).get_asset_info("abc")

    def test_urls(self, client):
        gateway = UploadcareAssetGateway(client)

        assert gateway.content_url("abc") == "https://cdn.example/abc/"
        assert gateway.preview_url("abc", 300) == "https://cdn.example/abc/-/preview/300x300/"


class TestUploadcareBlobStore:
    @pytest.fixture
    def public_session(self):
        public_session = Mock()
        public_session.headers = {}
        return public_session

    @pytest.fixture
    def store(self, client, public_session):
        return UploadcareBlobStore(client, public_session=public_session)

    def test_upload(self, store, public_session):
        public_session.post.return_value = make_response(200, {"file": "new-uuid"})

        blob = store.upload(b"data", "a.pdf", "application/pdf")

        assert blob.asset_id == "new-uuid"
        assert blob.url == "https://cdn.example/new-uuid/"
        assert public_session.post.call_args.kwargs["data"]["UPLOADCARE_PUB_KEY"] == "pub"
        assert public_session.post.call_args.kwargs["files"]["file"] == ("a.pdf", b"data", "application/pdf")

    def test_upload_does_not_send_secret_key(self, store, session, public_session):
        public_session.post.return_value = make_response(200, {"file": "new-uuid"})

        store.upload(b"data", "a.pdf", "application/pdf")

        session.post.assert_not_called()
        assert "Authorization" not in public_session.headers
        assert "headers" not in public_session.post.call_args.kwargs

    def test_default_public_session_is_unsigned(self, client):
        store = UploadcareBlobStore(client)

        assert store.public_session is not client.session
        assert "Authorization" not in store.public_session.headers

    @pytest.mark.parametrize("response", [
        make_response(413, {}, "too large"),
        make_response(200, {}),
        make_response(200, ValueError("html")),
    ])
    def test_upload_failures(self, store, public_session, response):
        public_session.post.return_value = response

        with pytest.raises(StorageError):
            store.upload(b"data", "a.pdf", "application/pdf")

    def test_upload_transport_error(self, store, public_session):
        public_session.post.side_effect = requests.exceptions.Timeout("slow")

        with pytest.raises(StorageError):
            store.upload(b"data", "a.pdf", "application/pdf")

    def test_open_stream(self, store, public_session, config):
        response = make_response(200)
        response.iter_content.return_value = iter([b"%PDF", b"", b"-1.7"])
        public_session.get.return_value = response

        chunks = list(store.open_stream("https://cdn.example/abc/"))

        assert chunks == [b"%PDF", b"-1.7"]
        assert public_session.get.call_args.kwargs == {"stream": True, "timeout": config.request_timeout}
        response.close.assert_called_once()

    def test_open_stream_error_status(self, store, public_session):
        response = make_response(404, {}, "gone")
        public_session.get.return_value = response

        with pytest.raises(StorageError):
            store.open_stream("https://cdn.example/abc/")
        response.close.assert_called_once()

    def test_open_stream_transport_error(self, store, public_session):
        public_session.get.side_effect = requests.exceptions.ConnectionError("reset")

        with pytest.raises(StorageError):
            store.open_stream("https://cdn.example/abc/")

    def test_delete(self, client, session):
        session.request.return_value = make_response(200, {})

        assert UploadcareBlobStore(client).delete("abc")
        assert session.request.call_args.args == ("DELETE", "https://api.uploadcare.com/files/abc/storage/")

    def test_delete_missing_asset(self, client, session):
        session.request.return_value = make_response(404, {}, "not found")

        assert UploadcareBlobStore(client).delete("abc") is True

    def test_delete_failure(self, client, session):
        session.request.return_value = make_response(500, {}, "oops")

        with pytest.raises(StorageError):
            UploadcareBlobStore(client).delete("abc")


class TestConfig:
    def test_defaults(self, monkeypatch):
        for name in ("UPLOADCARE_PUBLIC_KEY", "UPLOADCARE_SECRET_KEY", "CONVERSION_TIMEOUT_SECONDS"):
            monkeypatch.delenv(name, raising=False)

        assert not UploadcareConfig().is_configured
        assert ConversionConfig().conversion_timeout == 60.0
        assert ConversionConfig().readiness_timeout == 30.0

    @pytest.mark.parametrize("value", ["abc", "0", "-5"])
    def test_rejects_bad_numbers(self, monkeypatch, value):
        monkeypatch.setenv("CONVERSION_TIMEOUT_SECONDS", value)

        with pytest.raises(ValueError):
            ConversionConfig()
