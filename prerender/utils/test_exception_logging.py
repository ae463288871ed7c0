import logging
from unittest.mock import Mock

from prerender.pipeline.errors import RenderFailure
from prerender.utils.exception_logging import (
    exception_chain,
    format_exception_message,
    log_exception_with_details,
)


class BrokenStrException(Exception):
    """An exception that breaks when __str__ is called."""

    def __str__(self):
        raise RuntimeError("Cannot convert to string!")

    def __repr__(self):
        return "BrokenStrException(cannot convert to string)"


class BrokenReprException(Exception):
    """An exception that breaks when both __str__ and __repr__ are called."""

    def __str__(self):
        raise RuntimeError("Cannot convert to string!")

    def __repr__(self):
        raise RuntimeError("Cannot convert to repr!")


def _wrapped_failure():
    try:
        try:
            raise ConnectionResetError("browser went away")
        except ConnectionResetError as e:
            raise RenderFailure("Render failed", url="http://example.com/") from e
    except RenderFailure as e:
        return e


def test_exception_chain_follows_causes():
    failure = _wrapped_failure()
    chain = exception_chain(failure)
    assert [type(e) for e in chain] == [RenderFailure, ConnectionResetError]


def test_exception_chain_stops_on_cycles():
    first = ValueError("a")
    second = ValueError("b")
    first.__cause__ = second
    second.__cause__ = first
    assert exception_chain(first) == [first, second]


def test_format_exception_message_includes_causes():
    message = format_exception_message(_wrapped_failure())
    assert message == "RenderFailure: Render failed <- ConnectionResetError: browser went away"


def test_format_exception_message_none():
    assert format_exception_message(None) == "None"


def test_format_exception_message_broken_str():
    assert "BrokenStrException(cannot convert to string)" in format_exception_message(
        BrokenStrException()
    )


def test_format_exception_message_broken_repr():
    message = format_exception_message(BrokenReprException())
    assert "string conversion failed" in message


def test_log_exception_with_details_logs_chain(caplog):
    logger = logging.getLogger("test.exception_logging")
    with caplog.at_level(logging.ERROR, logger="test.exception_logging"):
        log_exception_with_details(logger, "[Prerender]", _wrapped_failure())
    assert len(caplog.records) == 1
    record = caplog.records[0]
    assert record.getMessage().startswith("[Prerender] Exception: RenderFailure")
    assert "browser went away" in record.getMessage()
    assert record.exc_info is not None


def test_log_exception_with_details_respects_level(caplog):
    logger = logging.getLogger("test.exception_logging")
    with caplog.at_level(logging.WARNING, logger="test.exception_logging"):
        log_exception_with_details(
            logger, "[Cache]", ValueError("x"), level=logging.WARNING
        )
    assert caplog.records[0].levelno == logging.WARNING


def test_log_exception_with_details_never_raises():
    logger = Mock()
    logger.log.side_effect = RuntimeError("logger broken")
    log_exception_with_details(logger, "[Prerender]", ValueError("x"))
    log_exception_with_details(None, None, None)
