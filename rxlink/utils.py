"""Utility helpers used across ``rxlink`` modules."""

import traceback


def get_short_error_info(e: BaseException) -> str:
    """
    Get a short error information from an exception.

    Args:
        e (BaseException): The exception to get the error information from.

    Returns:
        str: A short error information, e.g. ``"TimeoutError: timed out"``.
    """
    return f"{type(e).__name__}: {str(e)}"


# the function to get the full error information from an exception.
def get_full_error_info(e: BaseException) -> str:
    """
    Get the full error information from an exception.

    Args:
        e (BaseException): The exception to get the error information from.

    Returns:
        str: The formatted traceback.
    """
    return "".join(traceback.format_exception(type(e), e, e.__traceback__))


def to_payload(data: str | bytes | bytearray, encoding: str = "utf-8") -> bytes:
    """Turn an outbound command into the immutable byte buffer that gets written."""
    if isinstance(data, str):
        return data.encode(encoding)
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    raise TypeError(f"Outbound command must be str or bytes, got {type(data).__name__}")
