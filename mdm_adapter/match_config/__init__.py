# -*- coding: utf-8 -*-
"""
Match Configuration Adapter
===========================

Key Components:
    - config: MatchConfigConfig with MDM_ADAPTER_ env prefix
    - models: Pydantic v2 models for the simplified JSON shape
    - weight_calculator: log2 match / non-match weights from m and u
    - document: namespace-preserving wrapper around the upstream XML
    - configuration_reader: XML document -> MatchConfiguration
    - configuration_patcher: MatchConfiguration -> XML document (in place)
    - fhir_mapper: FHIR Parameters parsing and score extraction
    - ground_truth_aggregator: paged ground-truth collection
    - metrics: Prometheus metrics
    - setup: MatchConfigService facade and FastAPI wiring
    - api: FastAPI router

Example:
    >>> from mdm_adapter.match_config import compute_weights
    >>> match, non_match = compute_weights(0.8, 0.1)
    >>> match
    3.0
"""

from mdm_adapter.match_config.config import (
    MatchConfigConfig,
    get_config,
    reset_config,
    set_config,
)
from mdm_adapter.match_config.configuration_patcher import patch_configuration
from mdm_adapter.match_config.configuration_reader import (
    read_attribute_specification,
    read_match_configuration,
)
from mdm_adapter.match_config.document import ConfigurationDocument
from mdm_adapter.match_config.ground_truth_aggregator import GroundTruthAggregator
from mdm_adapter.match_config.models import (
    AttributeSpecification,
    GroundTruthScores,
    LinkMatchResult,
    MatchAttribute,
    MatchConfiguration,
)
from mdm_adapter.match_config.weight_calculator import (
    compute_weights,
    match_weight,
    non_match_weight,
)

__all__ = [
    "MatchConfigConfig",
    "get_config",
    "set_config",
    "reset_config",
    "MatchAttribute",
    "MatchConfiguration",
    "AttributeSpecification",
    "GroundTruthScores",
    "LinkMatchResult",
    "ConfigurationDocument",
    "read_match_configuration",
    "read_attribute_specification",
    "patch_configuration",
    "GroundTruthAggregator",
    "compute_weights",
    "match_weight",
    "non_match_weight",
]
