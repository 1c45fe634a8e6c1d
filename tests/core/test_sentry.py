"""Tests for Sentry initialization."""

from unittest.mock import patch

from gbr_reserve.core import sentry
from gbr_reserve.core.config import settings


def test_init_sentry_skipped_without_dsn() -> None:
    original = settings.sentry_dsn
    try:
        settings.sentry_dsn = None
        with patch.object(sentry.sentry_sdk, "init") as init:
            assert sentry.init_sentry() is False
        init.assert_not_called()
    finally:
        settings.sentry_dsn = original


def test_init_sentry_never_sends_pii() -> None:
    original = settings.sentry_dsn
    try:
        settings.sentry_dsn = "https://key@o0.ingest.sentry.io/0"
        with patch.object(sentry.sentry_sdk, "init") as init:
            assert sentry.init_sentry() is True
        kwargs = init.call_args.kwargs
        assert kwargs["send_default_pii"] is False
        assert kwargs["max_request_body_size"] == "never"
        assert kwargs["environment"] == settings.environment
    finally:
        settings.sentry_dsn = original
