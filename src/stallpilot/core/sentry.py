"""Optional Sentry error tracking."""

import os

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from sentry_sdk.utils import BadDsn

from stallpilot.core.logging import get_logger

logger = get_logger(__name__)

_sentry_initialized = False

# Event keys that may carry customer names, phones or PIN form fields
_SENSITIVE_KEYS = ("pin", "phone", "sql")


def init_sentry() -> bool:
    """
    Initialize Sentry when SENTRY_DSN holds a usable DSN.

    Returns True when error tracking is active. Placeholder DSNs (anything
    not starting with http:// or https://) leave it disabled.
    """
    global _sentry_initialized

    if _sentry_initialized:
        return True

    sentry_dsn = (os.getenv("SENTRY_DSN") or "").strip()
    if not sentry_dsn:
        logger.info("sentry.disabled", reason="no_dsn")
        return False

    if not sentry_dsn.startswith(("https://", "http://")):
        logger.info("sentry.disabled", reason="invalid_dsn", dsn_preview=sentry_dsn[:20])
        return False

    environment = os.getenv("ENVIRONMENT", "development")
    try:
        sentry_sdk.init(
            dsn=sentry_dsn,
            environment=environment,
            traces_sample_rate=0.0,
            send_default_pii=False,
            integrations=[
                FastApiIntegration(transaction_style="endpoint"),
                # structlog already ships the logs
                LoggingIntegration(level=None, event_level=None),
            ],
            before_send=filter_sensitive_data,
        )
    except BadDsn as exc:
        logger.warning("sentry.init_failed", error=str(exc))
        return False

    _sentry_initialized = True
    logger.info("sentry.initialized", environment=environment)
    return True


def _is_sensitive(key) -> bool:
    key_str = str(key).lower()
    return any(word in key_str for word in _SENSITIVE_KEYS)


def filter_sensitive_data(event: dict, hint: dict) -> dict:
    """Strip PINs, phone numbers and SQL from extras and breadcrumbs."""
    extra = event.get("extra")
    if isinstance(extra, dict):
        event["extra"] = {k: v for k, v in extra.items() if not _is_sensitive(k)}

    request = event.get("request")
    if isinstance(request, dict) and isinstance(request.get("data"), dict):
        request["data"] = {k: v for k, v in request["data"].items() if not _is_sensitive(k)}

    breadcrumbs = event.get("breadcrumbs")
    if isinstance(breadcrumbs, list):
        event["breadcrumbs"] = [
            b
            for b in breadcrumbs
            if "sql" not in str(b.get("message", "") if isinstance(b, dict) else b).lower()
        ]
    return event
