"""Utility functions for sqlwatch operations.

Functions:
    require_fields: Fail fast when a required string argument is empty
    quote_identifier: Quote a SQL identifier for a given quote character
    quote_dotted_identifier: Quote each part of a dotted identifier
    coalesce: Return the first non-None value
    with_timeout: Await a coroutine under an optional deadline

Example:
    >>> ValidationUtils.require_fields(name="local", dsn="./local.db")
    >>> StringUtils.quote_identifier('my"table', '"')
    '"my""table"'
"""

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

from .exceptions import ErrorCodes, SqlWatchException, ValidationError

T = TypeVar("T")


class ValidationUtils:
    """Utility class for validation operations."""

    @staticmethod
    def require_fields(**fields: Optional[str]) -> None:
        """Require every keyword argument to be a non-empty string.

        Args:
            **fields: Field name to value mapping, checked in order

        Raises:
            ValidationError: Naming the first empty field

        Example:
            >>> ValidationUtils.require_fields(name="", dsn="x")
            ValidationError: VALIDATION_FAILED: name is required
        """
        for field_name, value in fields.items():
            if not value:
                raise ValidationError(
                    f"{field_name} is required",
                    code=ErrorCodes.VALIDATION_FAILED,
                    context={"field": field_name},
                )


class StringUtils:
    """Utility class for string operations."""

    @staticmethod
    def quote_identifier(identifier: str, quote_char: str = '"') -> str:
        """Quote a SQL identifier, doubling embedded quote characters.

        Args:
            identifier: Identifier to quote
            quote_char: Quote character used by the dialect

        Returns:
            Quoted identifier

        Example:
            >>> StringUtils.quote_identifier("order", "`")
            '`order`'
        """
        escaped = identifier.replace(quote_char, quote_char * 2)
        return f"{quote_char}{escaped}{quote_char}"

    @classmethod
    def quote_dotted_identifier(cls, identifier: str, quote_char: str = '"') -> str:
        """Quote each dot-separated part of a qualified identifier.

        Example:
            >>> StringUtils.quote_dotted_identifier("public.users")
            '"public"."users"'
        """
        return ".".join(cls.quote_identifier(part, quote_char) for part in identifier.split("."))


def coalesce(*values: Optional[T]) -> Optional[T]:
    """Return first non-None value.

    Example:
        >>> coalesce(None, 5.0, 10.0)
        5.0
    """
    for value in values:
        if value is not None:
            return value
    return None


async def with_timeout(
    awaitable: Awaitable[T],
    timeout: Optional[float],
    on_timeout: Callable[[asyncio.TimeoutError], SqlWatchException],
) -> T:
    """Await ``awaitable``, converting a deadline expiry into a sqlwatch error.

    Args:
        awaitable: Operation to await
        timeout: Deadline in seconds, or None for no deadline
        on_timeout: Builds the exception raised when the deadline expires

    Returns:
        Result of the awaitable

    Raises:
        SqlWatchException: Built by ``on_timeout`` if the deadline expires
    """
    if timeout is None:
        return await awaitable
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except asyncio.TimeoutError as e:
        raise on_timeout(e) from e


def describe_exception(exc: BaseException) -> str:
    """Return a short, log-friendly description of an exception."""
    return f"{type(exc).__name__}: {exc}"
