# -*- coding: utf-8 -*-
"""MDM Adapter Exception Hierarchy.

This module provides the exception hierarchy for the adapter's own logic
(configuration reading, patching, weight calculation and inbound
validation). Upstream transport failures live in
``mdm_adapter.connectors.errors``.

Exception Hierarchy:
    MdmAdapterException (base)
    ├── InputValidationError
    │   ├── UnknownAttributeKeyError
    │   └── ThresholdOrderError
    ├── DocumentStructureError
    ├── WeightDomainError
    └── ConfigurationError

Every exception carries an ``ErrorKind`` whose value is the stable error
code and whose ``message`` is the default human-readable text.

Example:
    >>> from mdm_adapter.exceptions import DocumentStructureError, ErrorKind
    >>> raise DocumentStructureError(ErrorKind.MISSING_SCORING_SECTION)
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Iterable, Optional


class ErrorKind(str, Enum):
    """Enumerated error codes with their default messages."""

    MISSING_IDENTIFIER = ("MDM_INPUT_001", "The id value cannot be null or empty")
    MISSING_BODY = ("MDM_INPUT_002", "The resource cannot be null")
    INVALID_BODY = ("MDM_INPUT_003", "The resource is not a valid match configuration")
    UNKNOWN_ATTRIBUTE_KEY = ("MDM_INPUT_004", "Unknown attribute key")
    THRESHOLD_ORDER = (
        "MDM_INPUT_005",
        "matchThreshold must be greater than or equal to nonMatchThreshold",
    )
    MISSING_PROBABILITY = ("MDM_INPUT_006", "Attribute is missing an m or u value")
    MISSING_ROOT_ELEMENT = ("MDM_DOC_001", "Match config does not have a root element")
    MISSING_SCORING_SECTION = ("MDM_DOC_002", "Match config does not have a scoring section")
    MULTIPLE_SCORING_SECTIONS = ("MDM_DOC_003", "Match config has more than one scoring section")
    MISSING_REQUIRED_ATTRIBUTE = ("MDM_DOC_004", "Element is missing a required attribute")
    MISSING_THRESHOLD = ("MDM_DOC_005", "Match configuration element is missing a threshold attribute")
    INVALID_NUMBER = ("MDM_DOC_006", "Attribute value is not a valid decimal number")
    INVALID_ATTRIBUTES = ("MDM_DOC_007", "Match config attributes are not valid")
    WEIGHT_DOMAIN = ("MDM_WEIGHT_001", "m and u must be real numbers strictly between 0 and 1")
    MISSING_SETTING = ("MDM_CONFIG_001", "Required adapter setting is not configured")

    def __new__(cls, code: str, message: str) -> "ErrorKind":
        obj = str.__new__(cls, code)
        obj._value_ = code
        obj.message = message
        return obj


# ==============================================================================
# Base Exception
# ==============================================================================

class MdmAdapterException(Exception):
    """Base exception for all adapter errors.

    Attributes:
        kind: ErrorKind describing the failure
        message: Human-readable error message
        context: Dictionary with error-specific details
    """

    default_kind: ErrorKind = ErrorKind.INVALID_BODY

    def __init__(
        self,
        kind: Optional[ErrorKind] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.kind = kind or self.default_kind
        self.message = message or self.kind.message
        self.context = context or {}
        super().__init__(self.message)

    @property
    def error_code(self) -> str:
        return self.kind.value

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "context": self.context,
        }

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"


# ==============================================================================
# Input validation
# ==============================================================================

class InputValidationError(MdmAdapterException):
    """Client supplied input was rejected before or during processing."""

    default_kind = ErrorKind.INVALID_BODY


class UnknownAttributeKeyError(InputValidationError):
    """A supplied attribute key has no counterpart in the remote document.

    Example:
        >>> raise UnknownAttributeKeyError(["identifier[SSN].value"])
    """

    default_kind = ErrorKind.UNKNOWN_ATTRIBUTE_KEY

    def __init__(self, keys: Iterable[str], context: Optional[Dict[str, Any]] = None):
        self.keys = list(keys)
        context = context or {}
        context["unknown_keys"] = self.keys
        super().__init__(
            message=f"{ErrorKind.UNKNOWN_ATTRIBUTE_KEY.message}: {', '.join(self.keys)}",
            context=context,
        )


class ThresholdOrderError(InputValidationError):
    """matchThreshold is below nonMatchThreshold."""

    default_kind = ErrorKind.THRESHOLD_ORDER


# ==============================================================================
# Document / calculation / settings
# ==============================================================================

class DocumentStructureError(MdmAdapterException):
    """The remote configuration document is missing an expected part.

    Raised by the configuration reader and patcher; never retried.
    """

    default_kind = ErrorKind.MISSING_ROOT_ELEMENT


class WeightDomainError(MdmAdapterException, ValueError):
    """m/u probabilities outside the open interval (0, 1)."""

    default_kind = ErrorKind.WEIGHT_DOMAIN


class ConfigurationError(MdmAdapterException):
    """Adapter settings are missing or invalid."""

    default_kind = ErrorKind.MISSING_SETTING


__all__ = [
    "ErrorKind",
    "MdmAdapterException",
    "InputValidationError",
    "UnknownAttributeKeyError",
    "ThresholdOrderError",
    "DocumentStructureError",
    "WeightDomainError",
    "ConfigurationError",
]
