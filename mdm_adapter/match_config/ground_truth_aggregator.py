# -*- coding: utf-8 -*-
"""
Ground-Truth Aggregator

Collects the scores of manually annotated links for one configuration.
Categories are walked in order MATCH then NO_MATCH; each category is paged
with ``_offset = 0, page_size, 2 * page_size, ...`` until a page carries
no ``next`` parameter.

Pages are fetched strictly one after another. Any gateway error aborts the
whole aggregation; no partial result is returned.
"""

from __future__ import annotations

import logging
from typing import Any, List

from mdm_adapter.connectors.errors import GatewayProtocolError
from mdm_adapter.match_config.fhir_mapper import extract_scores, has_next_page
from mdm_adapter.match_config.metrics import (
    inc_ground_truth_pages,
    inc_ground_truth_scores,
)
from mdm_adapter.match_config.models import GroundTruthScores, LinkMatchResult

logger = logging.getLogger(__name__)

CATEGORIES = (LinkMatchResult.MATCH, LinkMatchResult.NO_MATCH)


class GroundTruthAggregator:
    """Paginates ``$mdm-query-links`` into a GroundTruthScores.

    Attributes:
        gateway: Open RemoteGateway (or any object with ``query_links``).
        page_size: ``_count`` sent with each page request.
        max_pages: Pages allowed per category before giving up.
    """

    def __init__(self, gateway: Any, page_size: int = 1000, max_pages: int = 10000):
        if page_size <= 0:
            raise ValueError(f"page_size must be positive, got {page_size}")
        if max_pages <= 0:
            raise ValueError(f"max_pages must be positive, got {max_pages}")
        self.gateway = gateway
        self.page_size = page_size
        self.max_pages = max_pages

    async def _collect(
        self,
        configuration_id: str,
        category: LinkMatchResult,
        access_token: str,
    ) -> List[Any]:
        scores: List[Any] = []
        offset = 0
        pages = 0
        while True:
            if pages >= self.max_pages:
                raise GatewayProtocolError(
                    f"Upstream kept returning 'next' after {pages} pages",
                    operation="query_links",
                    context={"category": category.value, "offset": offset},
                )

            page = await self.gateway.query_links(
                configuration_id, category, self.page_size, offset, access_token,
            )
            pages += 1
            inc_ground_truth_pages(category.value)

            extracted = extract_scores(page, category)
            inc_ground_truth_scores(category.value, len(extracted))
            scores.extend(extracted)

            if not has_next_page(page):
                break
            offset += self.page_size

        logger.debug(
            "Collected %d %s scores over %d pages for %s",
            len(scores), category.value, pages, configuration_id,
        )
        return scores

    async def aggregate(
        self,
        configuration_id: str,
        access_token: str,
    ) -> GroundTruthScores:
        """Gather MATCH and NO_MATCH scores for ``configuration_id``.

        Raises:
            GatewayError: On any failed page request.
            GatewayProtocolError: If ``max_pages`` is exceeded.
        """
        result = GroundTruthScores()
        for category in CATEGORIES:
            result.extend(
                category,
                await self._collect(configuration_id, category, access_token),
            )

        logger.info(
            "Ground truth for %s: %d matches, %d non-matches",
            configuration_id, len(result.matches), len(result.non_matches),
        )
        return result


__all__ = ["GroundTruthAggregator", "CATEGORIES"]
