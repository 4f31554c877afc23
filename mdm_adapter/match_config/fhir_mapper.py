# -*- coding: utf-8 -*-
"""
FHIR Parameters mapping for ``$mdm-query-links`` responses.

A page of links arrives as a FHIR ``Parameters`` resource, in JSON or XML.
Both are normalised to the JSON shape::

    {"resourceType": "Parameters",
     "parameter": [
        {"name": "next", "valueUri": "..."},
        {"name": "link", "part": [
            {"name": "matchResult", "valueString": "MATCH"},
            {"name": "score", "valueDecimal": Decimal("0.93")}]}]}

Scores stay ``Decimal`` from the wire onward.
"""

from __future__ import annotations

import json
import xml.etree.ElementTree as ET
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Union

from mdm_adapter.match_config.document import local_name
from mdm_adapter.match_config.models import LinkMatchResult

LINK_PARAMETER = "link"
NEXT_PARAMETER = "next"
MATCH_RESULT_PART = "matchResult"
SCORE_PART = "score"

_PARAMETERS_RESOURCE = "Parameters"


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def parse_parameters_json(payload: Union[str, bytes]) -> Dict[str, Any]:
    """Parse a JSON Parameters resource keeping decimals exact.

    Raises:
        ValueError: If the payload is not JSON or not a Parameters resource.
    """
    resource = json.loads(payload, parse_float=Decimal)
    if not isinstance(resource, dict) or resource.get("resourceType") != _PARAMETERS_RESOURCE:
        raise ValueError("FHIR response is not a Parameters resource")
    resource.setdefault("parameter", [])
    return resource


def _xml_parameter(element: ET.Element) -> Dict[str, Any]:
    parameter: Dict[str, Any] = {}
    parts: List[Dict[str, Any]] = []
    for child in element:
        name = local_name(child.tag)
        if name == "part":
            parts.append(_xml_parameter(child))
        elif name == "name":
            parameter["name"] = child.get("value")
        elif name == "valueDecimal":
            parameter[name] = Decimal(child.get("value", ""))
        elif name == "valueCoding":
            code = next(
                (c.get("value") for c in child if local_name(c.tag) == "code"),
                None,
            )
            parameter[name] = {"code": code}
        elif name.startswith("value"):
            parameter[name] = child.get("value")
    if parts:
        parameter["part"] = parts
    return parameter


def parse_parameters_xml(payload: Union[str, bytes]) -> Dict[str, Any]:
    """Parse an XML Parameters resource into the JSON shape.

    Raises:
        ValueError: If the payload is not XML or not a Parameters resource.
    """
    try:
        root = ET.fromstring(payload)
        if local_name(root.tag) != _PARAMETERS_RESOURCE:
            raise ValueError("FHIR response is not a Parameters resource")
        return {
            "resourceType": _PARAMETERS_RESOURCE,
            "parameter": [
                _xml_parameter(child) for child in root
                if local_name(child.tag) == "parameter"
            ],
        }
    except (ET.ParseError, InvalidOperation) as e:
        raise ValueError(f"Unreadable FHIR Parameters XML: {e}")


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------


def _match_result(part: Dict[str, Any]) -> Optional[str]:
    for key in ("valueString", "valueCode"):
        if key in part:
            return part[key]
    coding = part.get("valueCoding")
    if isinstance(coding, dict):
        return coding.get("code")
    return None


def _to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def extract_scores(
    parameters: Dict[str, Any],
    category: LinkMatchResult,
) -> List[Decimal]:
    """Collect the scores of every link classified as ``category``.

    A link contributes all of its ``score`` parts when one of its
    ``matchResult`` parts equals the category. Links without a score are
    skipped. Order follows the resource.
    """
    scores: List[Decimal] = []
    for parameter in parameters.get("parameter", []):
        if parameter.get("name") != LINK_PARAMETER:
            continue
        parts = parameter.get("part", [])
        if not any(
            p.get("name") == MATCH_RESULT_PART and _match_result(p) == category.value
            for p in parts
        ):
            continue
        scores.extend(
            _to_decimal(p["valueDecimal"])
            for p in parts
            if p.get("name") == SCORE_PART and p.get("valueDecimal") is not None
        )
    return scores


def has_next_page(parameters: Dict[str, Any]) -> bool:
    """Return True when the page carries a ``next`` continuation parameter."""
    return any(
        p.get("name") == NEXT_PARAMETER for p in parameters.get("parameter", [])
    )


__all__ = [
    "parse_parameters_json",
    "parse_parameters_xml",
    "extract_scores",
    "has_next_page",
]
