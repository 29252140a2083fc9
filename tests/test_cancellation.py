"""Tests for cooperative cancellation."""

import threading

from gitlogue.cancellation import CancellationToken


class TestCancellationToken:
    """Test CancellationToken behavior."""

    def test_token_starts_unrequested(self):
        """New token should not be requested."""
        token = CancellationToken()
        assert not token.is_requested

    def test_request_sets_flag(self):
        """request() should set is_requested to True."""
        token = CancellationToken()
        token.request()
        assert token.is_requested

    def test_request_is_idempotent(self):
        """request() can be called multiple times safely."""
        token = CancellationToken()
        token.request()
        token.request()
        assert token.is_requested

    def test_request_from_another_thread(self):
        """A request made on another thread is visible to the loop."""
        token = CancellationToken()
        worker = threading.Thread(target=token.request)
        worker.start()
        worker.join()
        assert token.is_requested

    def test_tokens_are_independent(self):
        """Requesting one token leaves others untouched."""
        first, second = CancellationToken(), CancellationToken()
        first.request()
        assert not second.is_requested
