"""Unit tests for CancelToken."""

import threading

import pytest

from cafe.application.cancel_token import CancelToken
from cafe.domain.exceptions import OperationCancelledError


class TestCancelToken:

    def test_fresh_token_is_live(self):
        token = CancelToken()
        assert token.is_cancelled is False
        assert token.reason is None
        token.raise_if_cancelled()

    def test_cancel_with_reason(self):
        token = CancelToken()
        token.cancel("client disconnected")
        assert token.is_cancelled is True
        with pytest.raises(OperationCancelledError, match="client disconnected"):
            token.raise_if_cancelled()

    def test_first_reason_wins(self):
        token = CancelToken()
        token.cancel("first")
        token.cancel("second")
        assert token.reason == "first"

    def test_deadline(self):
        token = CancelToken(timeout=0)
        assert token.is_cancelled is True
        assert token.reason == "deadline exceeded"

    def test_generous_deadline_not_yet_hit(self):
        assert CancelToken(timeout=60).is_cancelled is False

    def test_cancel_from_another_thread(self):
        token = CancelToken()
        worker = threading.Thread(target=token.cancel)
        worker.start()
        worker.join()
        assert token.is_cancelled is True

    def test_http_status(self):
        assert OperationCancelledError.http_status == 499
