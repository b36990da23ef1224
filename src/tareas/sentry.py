"""Optional Sentry reporting.

Every helper here is safe to call before init_sentry or without sentry-sdk
installed; they simply do nothing. Task text typed by the user is personal
data, so it is redacted along with credentials before an event is sent.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, cast

try:
    import sentry_sdk
    from sentry_sdk.integrations.logging import LoggingIntegration

    SENTRY_AVAILABLE = True
except ImportError:
    SENTRY_AVAILABLE = False
    sentry_sdk = None
    LoggingIntegration = None

if TYPE_CHECKING:
    from sentry_sdk._types import Event, Hint

logger = logging.getLogger(__name__)

REDACTED = "[REDACTED]"

SENSITIVE_KEYS = frozenset(
    {
        "token",
        "api_key",
        "apikey",
        "x-api-key",
        "secret",
        "password",
        "authorization",
        "bearer",
        "anthropic_api_key",
        "sentry_dsn",
    }
)

# Fields carrying what the user typed
PERSONAL_KEYS = frozenset({"text", "raw_text", "task_text", "taskText"})

# Expected conditions rather than bugs: being offline, or input the CLI
# already reported back to the user
IGNORED_ERRORS = frozenset(
    {
        "TimeoutError",
        "ConnectionError",
        "ConnectError",
        "NoCategoriesError",
        "EmptyTaskError",
    }
)

_initialized = False


def init_sentry(
    dsn: str | None = None,
    environment: str = "production",
    release: str | None = None,
    traces_sample_rate: float = 0.0,
    debug: bool = False,
) -> bool:
    """Start error reporting if a DSN is configured.

    Args:
        dsn: Project DSN; empty or None leaves reporting off
        environment: Reported environment name
        release: Release tag; defaults to tareas@<installed version>
        traces_sample_rate: Fraction of transactions to trace
        debug: Turn on the SDK's own debug output

    Returns:
        Whether reporting is active after the call.
    """
    global _initialized

    if _initialized:
        return True

    if not SENTRY_AVAILABLE:
        logger.info("sentry-sdk not importable, error reporting off")
        return False

    if not dsn:
        logger.info("No Sentry DSN, error reporting off")
        return False

    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        release=release or _installed_release(),
        traces_sample_rate=traces_sample_rate,
        debug=debug,
        integrations=[LoggingIntegration(level=logging.INFO, event_level=logging.ERROR)],
        send_default_pii=False,
        attach_stacktrace=True,
        before_send=_before_send,
    )

    _initialized = True
    logger.info(f"Sentry reporting to environment {environment!r}")
    return True


def _installed_release() -> str:
    from importlib.metadata import PackageNotFoundError, version

    try:
        return f"tareas@{version('tareas')}"
    except PackageNotFoundError:
        return "tareas@unknown"


def _before_send(event: Event, hint: Hint) -> Event | None:
    exc_info = hint.get("exc_info")
    if exc_info and exc_info[0].__name__ in IGNORED_ERRORS:
        return None

    request = event.get("request")
    if request:
        _scrub_dict(cast(dict[str, Any], request))

    breadcrumbs = cast(dict[str, Any], event.get("breadcrumbs") or {})
    for breadcrumb in breadcrumbs.get("values", []):
        if breadcrumb.get("data"):
            _scrub_dict(breadcrumb["data"])

    return event


def _scrub_dict(data: dict[str, Any]) -> None:
    """Redact credentials and task text in place, recursing into nested dicts."""
    for key, value in data.items():
        if key.lower() in SENSITIVE_KEYS or key in PERSONAL_KEYS:
            data[key] = REDACTED
        elif isinstance(value, dict):
            _scrub_dict(value)


def add_breadcrumb(
    message: str,
    category: str = "tareas",
    level: str = "info",
    data: dict[str, Any] | None = None,
) -> None:
    """Record a step (task created, queue drained) for later error reports."""
    if not is_enabled():
        return

    sentry_sdk.add_breadcrumb(message=message, category=category, level=level, data=data or {})


def capture_exception(exception: BaseException | None = None) -> str | None:
    """Report an exception; returns the event id, or None when reporting is off."""
    if not is_enabled():
        return None

    return sentry_sdk.capture_exception(exception)


def flush(timeout: float = 2.0) -> None:
    if is_enabled():
        sentry_sdk.flush(timeout=timeout)


def is_enabled() -> bool:
    return SENTRY_AVAILABLE and _initialized
