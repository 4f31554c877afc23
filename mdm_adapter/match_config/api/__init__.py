# -*- coding: utf-8 -*-
"""Match Configuration REST API."""

from mdm_adapter.match_config.api.router import router

__all__ = ["router"]
