"""
Unit tests for error categories and API error responses.
"""

import pytest

from filevault.domain.errors import (
    ERROR_MESSAGES,
    HTTP_STATUS,
    ApplicationError,
    ConversionTimeoutError,
    ErrorCategory,
    NoTokenError,
    PasswordIncorrectError,
    QuotaExceededError,
    ShareNotFoundError,
    StoredFileNotFoundError,
    create_error_response,
    error_response_for,
)


class TestErrorCatalog:
    @pytest.mark.parametrize("category", list(ErrorCategory))
    def test_every_category_has_messages_and_status(self, category):
        assert set(ERROR_MESSAGES[category]) >= {"title", "message", "action"}
        assert category in HTTP_STATUS


class TestApplicationError:
    def test_to_dict_hides_technical_message(self):
        error = ApplicationError(ErrorCategory.SHARE_EXPIRED, "link abc expired at 2024-01-01")

        payload = error.to_dict()

        assert payload["success"] is False
        assert payload["error"] == "share_expired"
        assert "abc" not in payload["message"]
        assert error.http_status_code == 403

    def test_create_error_response_status_override(self):
        payload, status = create_error_response(ErrorCategory.SYSTEM_ERROR, status_code=503)

        assert status == 503
        assert payload["error"] == "system_error"


class TestErrorResponseFor:
    @pytest.mark.parametrize("error,status", [
        (StoredFileNotFoundError("x"), 404),
        (ShareNotFoundError("x"), 404),
        (QuotaExceededError("x"), 403),
        (PasswordIncorrectError("x"), 401),
        (NoTokenError("x"), 502),
        (ConversionTimeoutError("x"), 504),
    ])
    def test_status_follows_category(self, error, status):
        payload, code = error_response_for(error)

        assert code == status
        assert payload["error"] == error.category.value
