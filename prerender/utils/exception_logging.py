"""
Utility functions for exception logging that include the chain of causes,
so a wrapped renderer or cache failure still shows what went wrong underneath.
"""

import logging


def _safe_str(obj) -> str:
    """
    Safely convert an object to string, handling cases where __str__ or __repr__ might fail.

    Args:
        obj: The object to convert to string

    Returns:
        A string representation of the object, falling back to safe alternatives
    """
    try:
        return str(obj)
    except Exception:
        try:
            return repr(obj)
        except Exception:
            try:
                return f"<{type(obj).__name__} object (string conversion failed)>"
            except Exception:
                return "<object (all string conversions failed)>"


def exception_chain(exception: BaseException, limit: int = 10) -> list:
    """
    Return the exception followed by its causes (__cause__, then __context__).

    Stops at cycles and after `limit` entries.
    """
    chain = []
    seen = set()
    current = exception
    while current is not None and id(current) not in seen and len(chain) < limit:
        chain.append(current)
        seen.add(id(current))
        current = current.__cause__ or current.__context__
    return chain


def format_exception_message(exception: BaseException) -> str:
    """
    Format an exception and its causes as "Type: message <- Type: message".
    Never raises, even for exceptions whose __str__ is broken.
    """
    if exception is None:
        return "None"
    try:
        parts = [
            f"{type(exc).__name__}: {_safe_str(exc)}"
            for exc in exception_chain(exception)
        ]
        return " <- ".join(parts)
    except Exception:
        return _safe_str(exception)


def log_exception_with_details(
    logger: logging.Logger,
    prefix: str,
    exception: BaseException,
    level: int = logging.ERROR,
) -> None:
    """
    Log an exception with its cause chain and traceback.
    This function is designed to never throw exceptions itself, even when dealing with
    broken exception objects or logger failures.

    Args:
        logger: The logger instance to use
        prefix: Prefix for the log message (e.g., "[Prerender]", "[RendererPool]")
        exception: The exception to log
        level: The logging level to use (default: ERROR)
    """
    try:
        safe_prefix = _safe_str(prefix) if prefix is not None else ""
        message = f"{safe_prefix} Exception: {format_exception_message(exception)}"
        try:
            logger.log(
                level,
                message,
                exc_info=exception if exception is not None else False,
            )
        except Exception:
            # Retry without the traceback
            logger.log(level, message)
    except Exception:
        try:
            if logger is not None:
                logger.log(logging.ERROR, "Exception logging failed")
        except Exception:
            # Nothing left to report to
            pass
