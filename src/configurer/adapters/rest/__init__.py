"""Public interface for the REST adapter."""

from __future__ import annotations

from .client import RestClient, RestError
from .terminus import RestTerminus, rest_catalog_terminus, rest_report_terminus

__all__ = [
    "RestClient",
    "RestError",
    "RestTerminus",
    "rest_catalog_terminus",
    "rest_report_terminus",
]
