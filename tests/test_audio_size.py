"""Tests for audio file size lookup and the backfill job."""

import asyncio
import logging
from unittest.mock import Mock, patch

import httpx

from src.services.audio_size import (
    backfill_audio_sizes,
    fetch_audio_file_size,
    fetch_audio_file_size_async,
    parse_content_length,
)

_RealClient = httpx.Client
_RealAsyncClient = httpx.AsyncClient


def _transport(status_code=200, headers=None, exc=None):
    """Build a MockTransport answering every request the same way."""
    def handler(request):
        if exc is not None:
            raise exc
        assert request.method == "HEAD"
        return httpx.Response(status_code, headers=headers or {})

    return httpx.MockTransport(handler)


def _patched_client(transport):
    return patch(
        "src.services.audio_size.httpx.Client",
        side_effect=lambda **kwargs: _RealClient(transport=transport, **kwargs),
    )


def _patched_async_client(transport):
    return patch(
        "src.services.audio_size.httpx.AsyncClient",
        side_effect=lambda **kwargs: _RealAsyncClient(transport=transport, **kwargs),
    )


class TestParseContentLength:
    def test_valid(self):
        assert parse_content_length(httpx.Headers({"content-length": "1234"})) == 1234

    def test_missing(self):
        assert parse_content_length(httpx.Headers({})) is None

    def test_malformed(self):
        assert parse_content_length(httpx.Headers({"content-length": "abc"})) is None
        assert parse_content_length(httpx.Headers({"content-length": "-5"})) is None


class TestFetchAudioFileSize:
    """Tests for the HEAD request lookups."""

    def test_reads_content_length(self):
        with _patched_client(_transport(headers={"content-length": "5000"})):
            assert fetch_audio_file_size("https://cdn.example.com/a.mp3") == 5000

    def test_error_status(self):
        with _patched_client(_transport(status_code=404)):
            assert fetch_audio_file_size("https://cdn.example.com/a.mp3") is None

    def test_network_error(self):
        exc = httpx.ConnectError("connection refused")
        with _patched_client(_transport(exc=exc)):
            assert fetch_audio_file_size("https://cdn.example.com/a.mp3") is None

    def test_async_variant(self):
        with _patched_async_client(_transport(headers={"content-length": "42"})):
            size = asyncio.run(fetch_audio_file_size_async("https://cdn.example.com/a.mp3"))

        assert size == 42

    def test_async_without_header(self):
        with _patched_async_client(_transport()):
            size = asyncio.run(fetch_audio_file_size_async("https://cdn.example.com/a.mp3"))

        assert size is None


class TestBackfill:
    """Tests for backfill_audio_sizes."""

    def test_updates_found_sizes(self, repository, make_user, make_podcast, make_episode):
        """Test that found sizes are stored and failures are counted."""
        owner = make_user()
        podcast = make_podcast(owner)
        ok = make_episode(podcast, audio_url="https://cdn.example.com/ok.mp3", audio_file_size=None)
        bad = make_episode(podcast, audio_url="https://cdn.example.com/bad.mp3", audio_file_size=None)
        sizes = {"https://cdn.example.com/ok.mp3": 777}
        sleep = Mock()

        counts = backfill_audio_sizes(repository, delay=0.5, fetch=sizes.get, sleep=sleep)

        assert counts == {"success": 1, "failure": 1, "total": 2}
        assert repository.get_episode(ok.id).audio_file_size == 777
        assert repository.get_episode(bad.id).audio_file_size is None
        # No pause after the last episode
        sleep.assert_called_once_with(0.5)

    def test_nothing_to_do(self, repository):
        fetch = Mock()

        counts = backfill_audio_sizes(repository, fetch=fetch, sleep=Mock())

        assert counts == {"success": 0, "failure": 0, "total": 0}
        fetch.assert_not_called()

    def test_reports_progress_through_logging(self, repository, make_user, make_podcast, make_episode, caplog, capsys):
        podcast = make_podcast(make_user())
        make_episode(podcast, audio_url="https://cdn.example.com/bad.mp3", audio_file_size=None)

        with caplog.at_level(logging.INFO, logger="src.services.audio_size"):
            backfill_audio_sizes(repository, fetch=lambda url: None, sleep=Mock())

        assert "Found 1 episodes without audio file size" in caplog.text
        assert any(r.levelno == logging.WARNING and "Failed to get size" in r.message for r in caplog.records)
        assert capsys.readouterr().out == ""
