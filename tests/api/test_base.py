"""Tests for api/base.py - Unified API response format."""

from datetime import timezone

from api.base import (
    success_response,
    error_response,
    ErrorCodes,
)


class TestSuccessResponse:
    """Tests for success_response()."""

    def test_structure(self):
        resp = success_response({"id": "abc"})
        assert resp.success is True
        assert resp.data == {"id": "abc"}
        assert resp.error is None

    def test_request_id_passed_through(self):
        assert success_response({}, "req-1").meta.request_id == "req-1"

    def test_request_id_generated(self):
        resp = success_response({})
        assert resp.meta.request_id is not None
        assert len(resp.meta.request_id) > 0

    def test_timestamp_is_utc(self):
        resp = success_response({})
        assert resp.meta.timestamp.tzinfo == timezone.utc


class TestErrorResponse:
    """Tests for error_response()."""

    def test_structure(self):
        resp = error_response(ErrorCodes.INVALID_CREDENTIALS, "Invalid credentials")
        assert resp.success is False
        assert resp.data is None
        assert resp.error.code == "INVALID_CREDENTIALS"
        assert resp.error.message == "Invalid credentials"

    def test_same_shape_as_success(self):
        ok = success_response({"success": True}).model_dump()
        err = error_response("ERR", "msg").model_dump()
        assert set(ok) == set(err)

    def test_timestamp_is_utc(self):
        resp = error_response("ERR", "msg")
        assert resp.meta.timestamp.tzinfo == timezone.utc
