"""
Unit tests for ThumbnailService.
"""

import threading

import pytest

from filevault.application import ThumbnailService, ThumbnailStatus
from filevault.domain.conversion import ConversionOrchestrator, ReadinessGate
from filevault.domain.errors import (
    AssetGatewayError,
    ErrorCategory,
    FileNotPdfError,
    StorageError,
    StoredFileNotFoundError,
)
from filevault.domain.events import (
    ThumbnailFallbackEvent,
    ThumbnailGeneratedEvent,
    ThumbnailSkippedEvent,
)
from tests.fixtures import FakeAssetGateway, create_stored_file, create_trashed_file

PREVIEW = "https://cdn.test/asset-1/-/preview/300x300/"


def build_service(gateway, clock, file_manager, event_publisher=None):
    return ThumbnailService(
        gateway,
        ReadinessGate(gateway, clock=clock),
        ConversionOrchestrator(gateway, poll_interval=2.0, timeout=60.0, clock=clock),
        file_manager,
        event_publisher=event_publisher,
    )


@pytest.fixture
def pdf(file_repository):
    file = create_stored_file()
    file_repository.save(file)
    return file


class TestGenerateAndStore:
    def test_converted(self, thumbnail_service, file_repository, published_events, pdf):
        result = thumbnail_service.generate_and_store(pdf)

        assert result.status == ThumbnailStatus.CONVERTED
        assert result.thumbnail_url == "https://cdn.test/thumb-uuid/"
        stored = file_repository.get(pdf.id)
        assert stored.thumbnail_asset_id == "thumb-uuid"
        assert stored.thumbnail_is_fallback is False
        assert [type(e) for e in published_events] == [ThumbnailGeneratedEvent]

    def test_failed_conversion_falls_back(self, fake_clock, file_manager, file_repository,
                                          event_publisher, published_events, pdf):
        gateway = FakeAssetGateway(status_script=[{"status": "failed", "error": "corrupt"}])
        service = build_service(gateway, fake_clock, file_manager, event_publisher)

        result = service.generate_and_store(pdf)

        assert result.status == ThumbnailStatus.FALLBACK
        assert result.thumbnail_url == PREVIEW
        assert result.error_category == ErrorCategory.CONVERSION_FAILED
        stored = file_repository.get(pdf.id)
        assert stored.thumbnail_is_fallback
        assert stored.thumbnail_asset_id == pdf.remote_asset_id
        assert pdf.thumbnail_url == PREVIEW
        assert [type(e) for e in published_events] == [ThumbnailFallbackEvent]

    def test_conversion_timeout_falls_back(self, fake_clock, file_manager, pdf):
        gateway = FakeAssetGateway(status_script=[{"status": "processing"}])
        service = build_service(gateway, fake_clock, file_manager)

        result = service.generate_and_store(pdf)

        assert result.status == ThumbnailStatus.FALLBACK
        assert result.error_category == ErrorCategory.CONVERSION_TIMEOUT

    def test_no_thumbnail_when_fallback_fails(self, fake_clock, file_manager, file_repository,
                                              event_publisher, published_events, pdf):
        gateway = FakeAssetGateway(submit_response={"problems": {}, "result": []})
        gateway.preview_error = AssetGatewayError("no preview")
        service = build_service(gateway, fake_clock, file_manager, event_publisher)

        result = service.generate_and_store(pdf)

        assert result.status == ThumbnailStatus.NONE
        assert result.error_category == ErrorCategory.CONVERSION_FAILED
        assert not file_repository.get(pdf.id).has_thumbnail()
        assert [type(e) for e in published_events] == [ThumbnailSkippedEvent]

    def test_readiness_timeout_still_attempts_conversion(self, fake_clock, file_manager, pdf):
        gateway = FakeAssetGateway(ready_script=[False])
        service = build_service(gateway, fake_clock, file_manager)

        result = service.generate_and_store(pdf)

        assert result.status == ThumbnailStatus.CONVERTED
        assert len(gateway.info_calls) == 31
        assert len(gateway.submitted_paths) == 1

    def test_cancellation_falls_back(self, thumbnail_service, gateway, pdf):
        cancel = threading.Event()
        cancel.set()

        result = thumbnail_service.generate_and_store(pdf, cancel_event=cancel)

        assert result.status == ThumbnailStatus.FALLBACK
        assert gateway.submitted_paths == []

    def test_non_pdf_is_skipped(self, thumbnail_service, gateway, file_repository):
        image = create_stored_file(name="a.png", mime_type="image/png")
        file_repository.save(image)

        result = thumbnail_service.generate_and_store(image)

        assert result.status == ThumbnailStatus.NOT_PDF
        assert not result.changed
        assert gateway.info_calls == []

    def test_existing_conversion_is_kept(self, thumbnail_service, gateway, pdf):
        pdf.apply_converted_thumbnail("old", "https://cdn.test/old/")

        result = thumbnail_service.generate_and_store(pdf)

        assert result.status == ThumbnailStatus.EXISTING
        assert result.thumbnail_url == "https://cdn.test/old/"
        assert gateway.submitted_paths == []

    def test_file_deleted_during_conversion(self, thumbnail_service, file_repository, pdf):
        file_repository.delete(pdf.id)

        result = thumbnail_service.generate_and_store(pdf)

        assert result.status == ThumbnailStatus.CONVERTED
        assert file_repository.get(pdf.id) is None

    def test_save_failure_clears_thumbnail(self, thumbnail_service, file_manager, monkeypatch, pdf):
        def fail(file):
            raise StorageError("metadata store unavailable")

        monkeypatch.setattr(file_manager, "record_thumbnail", fail)

        with pytest.raises(StorageError):
            thumbnail_service.generate_and_store(pdf)

        assert pdf.thumbnail_url is None
        assert pdf.thumbnail_asset_id is None
        assert not pdf.has_thumbnail()


class TestRefreshThumbnail:
    def test_refresh(self, thumbnail_service, pdf):
        file, result = thumbnail_service.refresh_thumbnail(pdf.id, "user-1")

        assert result.status == ThumbnailStatus.CONVERTED
        assert file.thumbnail_asset_id == "thumb-uuid"

    def test_not_pdf(self, thumbnail_service, file_repository):
        image = create_stored_file(name="a.png", mime_type="image/png")
        file_repository.save(image)

        with pytest.raises(FileNotPdfError):
            thumbnail_service.refresh_thumbnail(image.id, "user-1")

    def test_other_owner(self, thumbnail_service, pdf):
        with pytest.raises(StoredFileNotFoundError):
            thumbnail_service.refresh_thumbnail(pdf.id, "user-2")


class TestRetryFallbackThumbnails:
    def test_converts_pending_pdfs_only(self, thumbnail_service, file_repository, gateway):
        fallback = create_stored_file(name="fallback.pdf")
        fallback.apply_fallback_thumbnail(PREVIEW)
        bare = create_stored_file(name="bare.pdf")
        converted = create_stored_file(name="done.pdf")
        converted.apply_converted_thumbnail("done", "https://cdn.test/done/")
        image = create_stored_file(name="pic.png", mime_type="image/png")
        trashed = create_trashed_file(name="old.pdf")
        for f in (fallback, bare, converted, image, trashed):
            file_repository.save(f)

        counts = thumbnail_service.retry_fallback_thumbnails()

        assert counts["converted"] == 2
        assert sum(counts.values()) == 2
        assert file_repository.get(fallback.id).has_converted_thumbnail()
        assert file_repository.get(converted.id).thumbnail_asset_id == "done"

    def test_failed_retry_keeps_fallback(self, fake_clock, file_manager, file_repository):
        file = create_stored_file()
        file.apply_fallback_thumbnail(PREVIEW)
        file_repository.save(file)
        gateway = FakeAssetGateway(status_script=[{"status": "failed"}])
        service = build_service(gateway, fake_clock, file_manager)

        counts = service.retry_fallback_thumbnails()

        assert counts["fallback"] == 1
        assert file_repository.get(file.id).thumbnail_url == PREVIEW

    def test_respects_limit(self, thumbnail_service, file_repository, gateway):
        for i in range(5):
            file_repository.save(create_stored_file(name=f"doc-{i}.pdf"))

        counts = thumbnail_service.retry_fallback_thumbnails(limit=2)

        assert counts["converted"] == 2
        assert len(gateway.submitted_paths) == 2
