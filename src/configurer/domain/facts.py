"""Node facts and their upload encodings."""

from __future__ import annotations

import base64
import zlib
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Literal

import yaml

FactsFormat = Literal["b64_zlib_yaml", "yaml"]


@dataclass(slots=True)
class Facts:
    """Fact name to value mapping collected for one node."""

    name: str
    values: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def render(self, facts_format: FactsFormat) -> str:
        document = yaml.safe_dump(
            {
                "name": self.name,
                "values": self.values,
                "timestamp": self.timestamp.isoformat(),
            },
            default_flow_style=False,
            sort_keys=True,
        )
        if facts_format == "yaml":
            return document
        if facts_format == "b64_zlib_yaml":
            return base64.b64encode(zlib.compress(document.encode("utf-8"))).decode("ascii")
        raise ValueError(f"Unsupported facts format: {facts_format}")

    def for_uploading(self, facts_format: FactsFormat) -> dict[str, str]:
        """Return the encoded payload and its format tag for a catalog request."""

        return {"facts": self.render(facts_format), "facts_format": facts_format}
