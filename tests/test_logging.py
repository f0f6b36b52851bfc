import logging

import pytest

from app.core.log import SanitizingFilter, sanitize_message


@pytest.mark.parametrize(
    "raw, leaked",
    [
        ("connect failed: postgresql+asyncpg://app:hunter2@db:5432/reading", "hunter2"),
        ("bad query SELECT password_hash FROM users WHERE email = 'a@b.c'", "password_hash"),
        ("DELETE FROM session WHERE id = 'abc'", "session WHERE"),
        ("error in /srv/app/core/security.py line 4", "/srv/app"),
        (r"error in C:\Users\deploy\app\main.py", "deploy"),
        ("(sqlite3.OperationalError) no such table [SQL: SELECT * FROM session] (Background)", "SELECT"),
    ],
)
def test_sanitize_message_redacts(raw, leaked):
    assert leaked not in sanitize_message(raw)


@pytest.mark.parametrize(
    "message",
    [
        "Staff login user=42 role=teacher",
        "Please update your password",
        "Swept 3 expired sessions",
    ],
)
def test_sanitize_message_leaves_plain_text_alone(message):
    assert sanitize_message(message) == message


def _record(msg, *args, exc_info=None):
    return logging.LogRecord("app.test", logging.ERROR, __file__, 1, msg, args, exc_info)


def test_filter_formats_then_redacts_args():
    record = _record("db down: %s", "postgresql://u:secret@h/db")

    assert SanitizingFilter().filter(record) is True
    assert "secret" not in record.getMessage()
    assert record.args is None


def test_filter_drops_tracebacks_but_keeps_exception_name():
    try:
        raise RuntimeError("/srv/app/private/thing.py")
    except RuntimeError:
        import sys
        record = _record("Unhandled failure", exc_info=sys.exc_info())

    SanitizingFilter(keep_tracebacks=False).filter(record)

    assert record.exc_info is None
    assert record.getMessage() == "Unhandled failure (RuntimeError)"


def test_filter_keeps_tracebacks_in_debug():
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        import sys
        record = _record("Unhandled failure", exc_info=sys.exc_info())

    SanitizingFilter(keep_tracebacks=True).filter(record)

    assert record.exc_info is not None


def test_configure_logging_sanitizes_server_and_root_loggers():
    from app.core.log import configure_logging

    configure_logging()
    configure_logging()

    for name in ("uvicorn.error", ""):
        logger = logging.getLogger(name)
        assert sum(isinstance(f, SanitizingFilter) for f in logger.filters) == 1

    app_handlers = logging.getLogger("app").handlers
    assert sum(any(isinstance(f, SanitizingFilter) for f in h.filters) for h in app_handlers) == 1


def test_server_error_log_never_carries_credentials():
    from app.core.log import configure_logging

    configure_logging()
    server = logging.getLogger("uvicorn.error")
    try:
        raise RuntimeError("could not connect postgresql+asyncpg://u:pw@db.internal/reading")
    except RuntimeError:
        import sys
        record = server.makeRecord(
            server.name, logging.ERROR, __file__, 1, "Exception in ASGI application: %s",
            ("postgresql+asyncpg://u:pw@db.internal/reading",), sys.exc_info(),
        )

    server.filter(record)

    assert "pw@" not in record.getMessage()
    assert record.exc_info is None
