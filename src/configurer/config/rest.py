"""Configuration types for the REST terminus client."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping


@dataclass(slots=True, frozen=True)
class RestConfig:
    name: str
    base_url: str
    timeout_seconds: float = 120.0
    verify: bool | str = True
    cert: tuple[str, str] | None = None
    default_headers: Mapping[str, str] | None = None
