# -*- coding: utf-8 -*-
"""
Match Configuration Data Models

Pydantic v2 data models for the match-configuration adapter. The JSON
shape follows the simplified model consumed by the ML client:

    - MatchAttribute: ``{key, m, u, bounds}``
    - MatchConfiguration: ``{matchThreshold, nonMatchThreshold, attributes}``
    - AttributeSpecification: ``{key, bounds}`` (bounds-only view)
    - GroundTruthScores: ``{"1": [...matches], "0": [...nonMatches]}``

Enumerations:
    - LinkMatchResult (MATCH, NO_MATCH)

All models are built per request and discarded once serialized.
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator

from mdm_adapter.match_config.config import DEFAULT_BOUNDS_HIGH, DEFAULT_BOUNDS_LOW


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class LinkMatchResult(str, Enum):
    """Linkage classification carried by an MDM link."""

    MATCH = "MATCH"
    NO_MATCH = "NO_MATCH"


def _default_bounds() -> List[float]:
    return [DEFAULT_BOUNDS_LOW, DEFAULT_BOUNDS_HIGH]


# ---------------------------------------------------------------------------
# Match configuration
# ---------------------------------------------------------------------------


class MatchAttribute(BaseModel):
    """A single scored attribute of a match configuration.

    Attributes:
        key: Attribute property path, unique within a configuration.
        m: Probability the attribute agrees given a true match.
        u: Probability the attribute agrees by coincidence.
        bounds: ``[low, high]`` clamp range for m and u.
    """

    model_config = ConfigDict(populate_by_name=True)

    key: str = Field(..., description="Attribute property path")
    m: Optional[float] = Field(None, description="m-probability", allow_inf_nan=False)
    u: Optional[float] = Field(None, description="u-probability", allow_inf_nan=False)
    bounds: List[float] = Field(
        default_factory=_default_bounds,
        description="Clamp range [low, high] for m/u",
    )

    @field_validator("key")
    @classmethod
    def validate_key(cls, v: str) -> str:
        """Validate key is non-empty."""
        if not v or not v.strip():
            raise ValueError("key must be non-empty")
        return v

    @field_validator("bounds")
    @classmethod
    def validate_bounds(cls, v: List[float]) -> List[float]:
        """Validate bounds is an ordered pair inside [0, 1]."""
        if len(v) != 2:
            raise ValueError("bounds must contain exactly two values")
        low, high = v
        if not 0.0 <= low <= high <= 1.0:
            raise ValueError("bounds must satisfy 0 <= low <= high <= 1")
        return v

    @model_validator(mode="after")
    def validate_probabilities(self) -> "MatchAttribute":
        """Reject m/u outside the open interval (0, 1) or outside bounds."""
        low, high = self.bounds
        for name in ("m", "u"):
            value = getattr(self, name)
            if value is None:
                continue
            if not 0.0 < value < 1.0:
                raise ValueError(f"{name} must lie strictly between 0 and 1, got {value}")
            if not low <= value <= high:
                raise ValueError(f"{name} must lie within bounds [{low}, {high}], got {value}")
        return self


class AttributeSpecification(BaseModel):
    """Bounds-only view of a match attribute."""

    key: str
    bounds: List[float] = Field(default_factory=_default_bounds)


class MatchConfiguration(BaseModel):
    """Thresholds plus the ordered list of scored attributes.

    ``matchThreshold >= nonMatchThreshold`` is a business rule checked by
    the service on inbound updates, not by the model itself.
    """

    model_config = ConfigDict(populate_by_name=True)

    match_threshold: float = Field(..., alias="matchThreshold", allow_inf_nan=False)
    non_match_threshold: float = Field(..., alias="nonMatchThreshold", allow_inf_nan=False)
    attributes: List[MatchAttribute] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_unique_keys(self) -> "MatchConfiguration":
        """Reject configurations that repeat an attribute key."""
        seen = set()
        duplicates = []
        for attribute in self.attributes:
            if attribute.key in seen:
                duplicates.append(attribute.key)
            seen.add(attribute.key)
        if duplicates:
            raise ValueError(
                f"attribute keys must be unique, duplicated: {', '.join(duplicates)}"
            )
        return self

    def to_specification(self) -> List[AttributeSpecification]:
        return [
            AttributeSpecification(key=a.key, bounds=list(a.bounds))
            for a in self.attributes
        ]


# ---------------------------------------------------------------------------
# Ground truth
# ---------------------------------------------------------------------------


class GroundTruthScores(BaseModel):
    """Human-verified linkage scores split by classification.

    Serialized with the keys ``"1"`` (matches) and ``"0"`` (non-matches).
    """

    model_config = ConfigDict(populate_by_name=True)

    matches: List[Decimal] = Field(default_factory=list, alias="1")
    non_matches: List[Decimal] = Field(default_factory=list, alias="0")

    def extend(self, category: LinkMatchResult, scores: Iterable[Decimal]) -> None:
        """Append scores to the bucket for ``category`` in arrival order."""
        if category is LinkMatchResult.MATCH:
            self.matches.extend(scores)
        else:
            self.non_matches.extend(scores)

    @field_serializer("matches", "non_matches")
    def serialize_scores(self, values: List[Decimal]) -> List[float]:
        return [float(v) for v in values]


__all__ = [
    "LinkMatchResult",
    "MatchAttribute",
    "AttributeSpecification",
    "MatchConfiguration",
    "GroundTruthScores",
]
