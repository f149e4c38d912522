# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Typed exceptions raised by the controllers and problem formatting for callers.

Every failure carries one ErrorKind. Controllers raise immediately; the
presentation layer turns an exception into a problem dict with format_error.
"""

from typing import Any, Dict, Optional
from opentelemetry import trace
import logging

from .models.enums import ErrorKind

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

ERROR_TITLES = {
    ErrorKind.VALIDATION_ERROR: "Validation Error",
    ErrorKind.NOT_FOUND_ERROR: "Resource Not Found",
    ErrorKind.AUTHORIZATION_ERROR: "Insufficient Permissions",
    ErrorKind.BUSINESS_RULE_ERROR: "Business Rule Violation",
    ErrorKind.SYSTEM_ERROR: "System Error",
}


class HousingException(Exception):
    """Base class for all workflow failures."""

    def __init__(self, message: str, error_kind: ErrorKind, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.error_kind = error_kind
        self.cause = cause

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.error_kind.value}: {self.message!r})"


class ValidationException(HousingException):
    """Exception for malformed input."""

    def __init__(self, message: str):
        super().__init__(message, ErrorKind.VALIDATION_ERROR)


class NotFoundException(HousingException):
    """Exception for unknown records."""

    def __init__(self, message: str):
        super().__init__(message, ErrorKind.NOT_FOUND_ERROR)


class AuthorizationException(HousingException):
    """Exception for role or ownership violations."""

    def __init__(self, message: str):
        super().__init__(message, ErrorKind.AUTHORIZATION_ERROR)


class BusinessRuleException(HousingException):
    """Exception for requests the current state does not allow."""

    def __init__(self, message: str):
        super().__init__(message, ErrorKind.BUSINESS_RULE_ERROR)


class SystemException(HousingException):
    """Exception wrapping an underlying storage failure."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message, ErrorKind.SYSTEM_ERROR, cause)
        if cause is not None:
            self.__cause__ = cause


def format_error(error: Exception, instance: str = "") -> Dict[str, Any]:
    """
    Build an RFC 7807 style problem dict for the presentation layer.

    Args:
        error: Exception raised by a controller or an unexpected exception
        instance: Identifier of the operation that failed

    Returns:
        Problem dict with type, title, kind, detail and instance
    """
    with tracer.start_as_current_span("error_handler.format_error") as span:
        if isinstance(error, HousingException):
            kind = error.error_kind
            detail = error.message
        else:
            # Anything else escaped a repository or a bug; never expose internals
            kind = ErrorKind.SYSTEM_ERROR
            detail = "An unexpected error occurred"

        span.set_attributes({
            "error.kind": kind.value,
            "error.class": error.__class__.__name__,
            "error.instance": instance
        })

        if kind == ErrorKind.SYSTEM_ERROR:
            span.record_exception(error)
            logger.error(
                f"System error: {error.__class__.__name__}",
                extra={
                    "error_kind": kind.value,
                    "error_message": str(error),
                    "instance": instance
                },
                exc_info=error
            )
        else:
            logger.warning(
                f"Client error: {ERROR_TITLES[kind]}",
                extra={
                    "error_kind": kind.value,
                    "detail": detail,
                    "instance": instance
                }
            )

        return {
            'type': f"bto-housing/problems/{kind.value.lower().replace('_', '-')}",
            'title': ERROR_TITLES[kind],
            'kind': kind.value,
            'detail': detail,
            'instance': instance
        }
