"""可观测性模块的单元测试：logging、metrics、access_log。"""

import logging
import os
import tempfile

import pytest

from filesync.observability.logging import (
    add_request_id,
    configure_logging,
    get_logger,
    get_request_id,
    request_id_ctx,
    set_request_id,
)
from filesync.observability.metrics import (
    hash_seconds,
    operation_errors_total,
    transfer_bytes_total,
    tree_build_seconds,
)


# ---------------------------------------------------------------------------
# logging
# ---------------------------------------------------------------------------


class TestRequestId:
    def test_set_and_get(self):
        rid = set_request_id("test-rid-123")
        assert rid == "test-rid-123"
        assert get_request_id() == "test-rid-123"

    def test_auto_generate(self):
        rid = set_request_id(None)
        assert len(rid) > 0
        assert get_request_id() == rid

    def test_default_empty(self):
        token = request_id_ctx.set("")
        assert get_request_id() == ""
        request_id_ctx.reset(token)


class TestAddRequestId:
    def test_adds_request_id(self):
        set_request_id("test-abc")
        result = add_request_id(None, None, {"event": "test"})
        assert result["request_id"] == "test-abc"

    def test_no_request_id(self):
        token = request_id_ctx.set("")
        result = add_request_id(None, None, {"event": "test"})
        assert "request_id" not in result
        request_id_ctx.reset(token)


class TestConfigureLogging:
    def test_creates_log_dir(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            log_dir = os.path.join(tmpdir, "test_logs")
            configure_logging("INFO", log_dir)
            assert os.path.isdir(log_dir)

    def test_attaches_handlers(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            configure_logging("DEBUG", tmpdir, json_console=False)
            app_logger = logging.getLogger("filesync")
            assert app_logger.level == logging.DEBUG
            assert len(app_logger.handlers) == 3
            assert app_logger.propagate is False
            assert get_logger("filesync.test_module") is not None

    def test_idempotent_handlers(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            configure_logging("INFO", tmpdir)
            configure_logging("INFO", tmpdir)
            assert len(logging.getLogger("filesync").handlers) == 3


# ---------------------------------------------------------------------------
# metrics
# ---------------------------------------------------------------------------


class TestMetrics:
    def test_transfer_bytes(self):
        transfer_bytes_total.labels(direction="upload").inc(10)

    def test_operation_errors(self):
        operation_errors_total.labels(kind="not_found").inc()

    def test_histograms(self):
        tree_build_seconds.observe(0.01)
        hash_seconds.observe(0.001)


# ---------------------------------------------------------------------------
# access_log helpers
# ---------------------------------------------------------------------------


class TestAccessLogHelpers:
    def test_mask_sensitive(self):
        from filesync.observability.access_log import _mask_sensitive
        data = {"password": "secret", "name": "test", "nested": {"token": "tok123"}}
        result = _mask_sensitive(data)
        assert result["password"] == "***"
        assert result["name"] == "test"
        assert result["nested"]["token"] == "***"

    def test_mask_sensitive_list(self):
        from filesync.observability.access_log import _mask_sensitive
        result = _mask_sensitive([{"authorization": "Bearer x"}, {"name": "ok"}])
        assert result[0]["authorization"] == "***"
        assert result[1]["name"] == "ok"

    def test_truncate(self):
        from filesync.observability.access_log import _truncate
        assert _truncate("hello", 100) == "hello"
        result = _truncate("x" * 3000, 100)
        assert len(result) < 200
        assert "truncated" in result

    @pytest.mark.asyncio
    async def test_binary_upload_body_not_read(self):
        from unittest.mock import AsyncMock, MagicMock

        from filesync.observability.access_log import _json_body_for_log
        request = MagicMock()
        request.method = "PUT"
        request.headers = {"content-type": "application/octet-stream"}
        request.body = AsyncMock(return_value=b"\x00\x01")
        preview, same = await _json_body_for_log(request)
        assert preview is None
        assert same is request
        request.body.assert_not_awaited()
