"""Full error hierarchy for the docdelta engine.

Every public error class inherits from DocDeltaError. Each carries a
machine-readable ``code`` (from :class:`ErrorCode`), a human-readable
``message``, an optional structured ``context`` dict, and an optional
``cause`` (chained exception).

Only conditions that make a result impossible are raised.  Recoverable
conditions (clamped positions, widened ranges, vanished edit targets) are
reported as :class:`~docdelta.models.DeltaWarning` values using the
warning codes of :class:`WarningCode` instead.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

# ---------------------------------------------------------------------------
# Code enums
# ---------------------------------------------------------------------------

class ErrorCode(str, Enum):
    """Machine-readable error codes for every error the engine can raise."""

    MALFORMED_NODE = "MALFORMED_NODE"
    LIMIT_EXCEEDED = "LIMIT_EXCEEDED"
    INVALID_OPERATION = "INVALID_OPERATION"
    CONVERSION_ERROR = "CONVERSION_ERROR"


class WarningCode(str, Enum):
    """Codes attached to recoverable conditions surfaced as warnings."""

    OUT_OF_RANGE_POSITION = "OUT_OF_RANGE_POSITION"
    RANGE_WIDENED = "RANGE_WIDENED"
    UNRESOLVABLE_TARGET = "UNRESOLVABLE_TARGET"
    ROOT_TYPE_MISMATCH = "ROOT_TYPE_MISMATCH"


# ---------------------------------------------------------------------------
# Base error
# ---------------------------------------------------------------------------

class DocDeltaError(Exception):
    """Base exception for all docdelta errors.

    Parameters
    ----------
    code:
        A value from :class:`ErrorCode` (or any string) identifying the
        error category.
    message:
        A developer-friendly description of what went wrong.
    context:
        Arbitrary structured data providing extra diagnostic detail.
        Keys and expected types are documented per subclass.
    cause:
        The underlying exception, if this error wraps another.
    """

    def __init__(
        self,
        code: str,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.code: str = code
        self.message: str = message
        self.context: dict[str, Any] = context or {}
        self.cause: Exception | None = cause
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause

    def __repr__(self) -> str:
        ctx = f", context={self.context!r}" if self.context else ""
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r}{ctx})"


# ---------------------------------------------------------------------------
# Input errors
# ---------------------------------------------------------------------------

class DocDeltaMalformedNodeError(DocDeltaError):
    """A node violates the branch/leaf invariant.

    Raised at construction time, so a diff or patch operation that receives
    such a node aborts before producing any partial result.

    Context keys: ``node_type``, ``reason``, ``path`` (when parsed from JSON).
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.MALFORMED_NODE,
            message=message,
            context=context,
            cause=cause,
        )


class DocDeltaLimitError(DocDeltaError):
    """A document exceeds the configured node-count or depth ceiling.

    Context keys: ``limit``, ``max_value``, ``observed``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.LIMIT_EXCEEDED,
            message=message,
            context=context,
            cause=cause,
        )


class DocDeltaOperationError(DocDeltaError):
    """An edit description names an operation the engine does not know.

    Context keys: ``operation``, ``target_id``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.INVALID_OPERATION,
            message=message,
            context=context,
            cause=cause,
        )


class DocDeltaConversionError(DocDeltaError):
    """Proposed content could not be converted into document nodes.

    Context keys: ``content_type``, ``reason``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.CONVERSION_ERROR,
            message=message,
            context=context,
            cause=cause,
        )
