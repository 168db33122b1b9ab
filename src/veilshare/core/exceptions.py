# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Veilshare Contributors

"""Custom exception hierarchy for Veilshare.

Every registry failure surfaces as one of these named conditions. A failed
precondition aborts the whole transaction before any mutation happens.
"""

from __future__ import annotations

from typing import Any


class VeilshareException(Exception):  # noqa: N818
    """Base exception for all Veilshare errors.

    All Veilshare-specific exceptions should inherit from this class.
    """

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(VeilshareException):
    """Exception for malformed input.

    Raised when:
    - A quality score is outside 0-100
    - A metadata hash or research topic is empty
    - A request deadline is not in the future
    - A reward names the wrong contributor for a dataset
    """

    def __init__(self, message: str, field: str | None = None, value: Any = None):
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)
        super().__init__(message, details)
        self.field = field
        self.value = value


class AuthorizationError(VeilshareException):
    """Exception for callers lacking a required role or relationship."""

    def __init__(self, message: str, principal: str | None = None):
        details = {}
        if principal:
            details["principal"] = principal
        super().__init__(message, details)
        self.principal = principal


class NotFoundError(VeilshareException):
    """Exception for ids outside the allocated range.

    Raised when:
    - A dataset id was never allocated
    - A request id was never allocated
    """

    def __init__(self, resource_type: str, resource_id: int | str):
        message = f"Invalid {resource_type} ID"
        details = {
            "resource_type": resource_type,
            "resource_id": str(resource_id),
        }
        super().__init__(message, details)
        self.resource_type = resource_type
        self.resource_id = resource_id


class StateError(VeilshareException):
    """Exception for operations against a record in the wrong state.

    Raised when a dataset has already been deactivated.
    """

    def __init__(self, message: str, resource_id: int | str | None = None):
        details = {}
        if resource_id is not None:
            details["resource_id"] = str(resource_id)
        super().__init__(message, details)
        self.resource_id = resource_id


class OracleError(VeilshareException):
    """Exception raised when the encryption oracle rejects a call.

    Raised when:
    - A plaintext does not fit the requested bit width
    - A bit width is not supported
    - A handle was not issued by the oracle
    """

    pass


class ConfigException(VeilshareException):
    """Exception for configuration errors.

    Raised when:
    - Required environment variables are missing
    - Configured values are malformed (e.g. a bad oracle key)
    """

    def __init__(self, message: str, missing_vars: list[str] | None = None):
        details = {}
        if missing_vars:
            details["missing_vars"] = missing_vars
        super().__init__(message, details)
        self.missing_vars = missing_vars or []
