# -*- coding: utf-8 -*-
"""
Configuration Patcher

Applies a client-supplied MatchConfiguration onto a previously fetched
remote configuration document:

1. Index ``scoring/attribute`` elements by ``property`` (document order,
   first occurrence wins).
2. Reject the whole patch if any supplied key is missing from the index.
3. Overwrite the root thresholds.
4. Overwrite ``m``/``u`` and set ``matchWeight``/``nonMatchWeight`` in
   place for each supplied attribute.

The document is mutated in memory only; the caller sends it upstream.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from typing import Dict, List, Tuple

from mdm_adapter.exceptions import (
    DocumentStructureError,
    ErrorKind,
    InputValidationError,
    UnknownAttributeKeyError,
)
from mdm_adapter.match_config.configuration_reader import (
    MATCH_THRESHOLD_ATTRIBUTE,
    M_ATTRIBUTE,
    NON_MATCH_THRESHOLD_ATTRIBUTE,
    PROPERTY_ATTRIBUTE,
    U_ATTRIBUTE,
)
from mdm_adapter.match_config.document import ConfigurationDocument, format_decimal
from mdm_adapter.match_config.models import MatchAttribute, MatchConfiguration
from mdm_adapter.match_config.weight_calculator import compute_weights

logger = logging.getLogger(__name__)

MATCH_WEIGHT_ATTRIBUTE = "matchWeight"
NON_MATCH_WEIGHT_ATTRIBUTE = "nonMatchWeight"


def index_attributes(document: ConfigurationDocument) -> Dict[str, ET.Element]:
    """Map each attribute ``property`` to its element.

    Raises:
        DocumentStructureError: If an attribute element has no ``property``.
    """
    index: Dict[str, ET.Element] = {}
    for element in document.attribute_elements():
        key = element.get(PROPERTY_ATTRIBUTE)
        if key is None:
            raise DocumentStructureError(
                ErrorKind.MISSING_REQUIRED_ATTRIBUTE,
                message=(
                    f"{ErrorKind.MISSING_REQUIRED_ATTRIBUTE.message}: "
                    f"'{PROPERTY_ATTRIBUTE}'"
                ),
                context={"attribute": PROPERTY_ATTRIBUTE},
            )
        index.setdefault(key, element)
    return index


def _planned_weights(
    attributes: List[MatchAttribute],
) -> List[Tuple[MatchAttribute, float, float]]:
    planned = []
    for attribute in attributes:
        if attribute.m is None or attribute.u is None:
            raise InputValidationError(
                ErrorKind.MISSING_PROBABILITY,
                message=f"{ErrorKind.MISSING_PROBABILITY.message}: {attribute.key}",
                context={"key": attribute.key},
            )
        match, non_match = compute_weights(attribute.m, attribute.u)
        planned.append((attribute, match, non_match))
    return planned


def patch_configuration(
    document: ConfigurationDocument,
    configuration: MatchConfiguration,
) -> ConfigurationDocument:
    """Apply ``configuration`` onto ``document`` and return the same document.

    Nothing is mutated unless every supplied attribute is known and every
    weight can be computed.

    Raises:
        DocumentStructureError: If the scoring section is missing.
        UnknownAttributeKeyError: If a supplied key is not in the document.
        InputValidationError: If a supplied attribute lacks m or u.
        WeightDomainError: If m or u is outside (0, 1).
    """
    index = index_attributes(document)

    unknown = [a.key for a in configuration.attributes if a.key not in index]
    if unknown:
        raise UnknownAttributeKeyError(unknown)

    planned = _planned_weights(configuration.attributes)

    root = document.root
    root.set(MATCH_THRESHOLD_ATTRIBUTE, format_decimal(configuration.match_threshold))
    root.set(NON_MATCH_THRESHOLD_ATTRIBUTE, format_decimal(configuration.non_match_threshold))

    for attribute, match, non_match in planned:
        element = index[attribute.key]
        element.set(M_ATTRIBUTE, format_decimal(attribute.m))
        element.set(U_ATTRIBUTE, format_decimal(attribute.u))
        element.set(MATCH_WEIGHT_ATTRIBUTE, format_decimal(match))
        element.set(NON_MATCH_WEIGHT_ATTRIBUTE, format_decimal(non_match))

    logger.debug(
        "Patched match configuration: %d of %d attributes updated",
        len(planned), len(index),
    )
    return document


__all__ = [
    "patch_configuration",
    "index_attributes",
    "MATCH_WEIGHT_ATTRIBUTE",
    "NON_MATCH_WEIGHT_ATTRIBUTE",
]
