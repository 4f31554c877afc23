# -*- coding: utf-8 -*-
"""
Configuration Reader

Maps a remote match configuration document onto the simplified
MatchConfiguration model:

- root ``matchThreshold`` / ``nonmatchThreshold`` -> thresholds
- each ``scoring/attribute`` -> MatchAttribute(property, m, u, bounds)

Bounds are not stored upstream; every attribute receives the configured
clamp pair. Structural problems raise DocumentStructureError and are never
retried.
"""

from __future__ import annotations

import logging
import math
import xml.etree.ElementTree as ET
from typing import List, Sequence

from pydantic import ValidationError

from mdm_adapter.exceptions import DocumentStructureError, ErrorKind
from mdm_adapter.match_config.document import ConfigurationDocument
from mdm_adapter.match_config.models import (
    AttributeSpecification,
    MatchAttribute,
    MatchConfiguration,
)

logger = logging.getLogger(__name__)

MATCH_THRESHOLD_ATTRIBUTE = "matchThreshold"
NON_MATCH_THRESHOLD_ATTRIBUTE = "nonmatchThreshold"
PROPERTY_ATTRIBUTE = "property"
M_ATTRIBUTE = "m"
U_ATTRIBUTE = "u"


def _required(element: ET.Element, name: str, kind: ErrorKind) -> str:
    value = element.get(name)
    if value is None:
        raise DocumentStructureError(
            kind,
            message=f"{kind.message}: '{name}'",
            context={"element": element.tag, "attribute": name},
        )
    return value


def _parse_number(raw: str, name: str) -> float:
    try:
        value = float(raw.strip())
    except ValueError:
        raise DocumentStructureError(
            ErrorKind.INVALID_NUMBER,
            message=f"{ErrorKind.INVALID_NUMBER.message}: {name}={raw!r}",
            context={"attribute": name, "value": raw},
        )
    if math.isnan(value):
        raise DocumentStructureError(
            ErrorKind.INVALID_NUMBER,
            context={"attribute": name, "value": raw},
        )
    return value


def _read_attribute(element: ET.Element, bounds: Sequence[float]) -> MatchAttribute:
    kind = ErrorKind.MISSING_REQUIRED_ATTRIBUTE
    key = _required(element, PROPERTY_ATTRIBUTE, kind)
    m = _parse_number(_required(element, M_ATTRIBUTE, kind), M_ATTRIBUTE)
    u = _parse_number(_required(element, U_ATTRIBUTE, kind), U_ATTRIBUTE)
    try:
        return MatchAttribute(key=key, m=m, u=u, bounds=list(bounds))
    except ValidationError as e:
        raise DocumentStructureError(
            ErrorKind.INVALID_ATTRIBUTES,
            context={"property": key, "errors": e.errors(include_url=False)},
        )


def read_match_configuration(
    document: ConfigurationDocument,
    bounds: Sequence[float],
) -> MatchConfiguration:
    """Build a MatchConfiguration from a remote configuration document.

    Args:
        document: Parsed remote document.
        bounds: ``(low, high)`` clamp pair assigned to every attribute.

    Returns:
        Fully populated MatchConfiguration.

    Raises:
        DocumentStructureError: On a missing scoring section, attribute
            or threshold, or a non-numeric value.
    """
    attributes = [
        _read_attribute(element, bounds)
        for element in document.attribute_elements()
    ]

    kind = ErrorKind.MISSING_THRESHOLD
    match_threshold = _parse_number(
        _required(document.root, MATCH_THRESHOLD_ATTRIBUTE, kind),
        MATCH_THRESHOLD_ATTRIBUTE,
    )
    non_match_threshold = _parse_number(
        _required(document.root, NON_MATCH_THRESHOLD_ATTRIBUTE, kind),
        NON_MATCH_THRESHOLD_ATTRIBUTE,
    )

    logger.debug(
        "Read match configuration: %d attributes, thresholds %s/%s",
        len(attributes), match_threshold, non_match_threshold,
    )

    try:
        return MatchConfiguration(
            match_threshold=match_threshold,
            non_match_threshold=non_match_threshold,
            attributes=attributes,
        )
    except ValidationError as e:
        raise DocumentStructureError(
            ErrorKind.INVALID_ATTRIBUTES,
            context={"errors": e.errors(include_url=False)},
        )


def read_attribute_specification(
    document: ConfigurationDocument,
    bounds: Sequence[float],
) -> List[AttributeSpecification]:
    """Return the bounds-only view of every attribute in the document."""
    return read_match_configuration(document, bounds).to_specification()


__all__ = [
    "read_match_configuration",
    "read_attribute_specification",
    "MATCH_THRESHOLD_ATTRIBUTE",
    "NON_MATCH_THRESHOLD_ATTRIBUTE",
]
