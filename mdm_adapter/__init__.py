# -*- coding: utf-8 -*-
"""
MDM ML Adapter
==============

Bridges a machine-learning client and an MDM record-linkage service:

- Reads the upstream XML match configuration as a simplified JSON model
- Patches thresholds and m/u probabilities back, recomputing log2 weights
- Aggregates manually verified link scores from paged FHIR Parameters

Key Components:
    - match_config: models, reader, patcher, aggregator and service facade
    - connectors: RemoteGateway over httpx and its error taxonomy
    - exceptions: adapter error hierarchy with fixed error codes
    - app: FastAPI application factory
"""

__version__ = "1.0.0"
