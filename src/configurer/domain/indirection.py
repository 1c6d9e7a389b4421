"""Uniform find/save access to resources over interchangeable termini."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Unpack

if TYPE_CHECKING:
    from collections.abc import Callable

    from .ports.locating import FindOptions, Terminus

log = logging.getLogger(__name__)


class Indirection[T]:
    """Routes lookups for one resource kind to a terminus and an optional cache.

    The terminus is the authoritative strategy chosen at configuration time (a
    remote service or a local store); the cache is a local store consulted
    first unless ``ignore_cache`` is given, and populated with every resource the
    terminus returns. ``ignore_terminus`` restricts a lookup to the cache.

    Terminus errors propagate unchanged: the indirection never retries.
    """

    def __init__(
        self,
        name: str,
        terminus: Terminus[T],
        *,
        cache: Terminus[T] | None = None,
        key_of: Callable[[T], str] | None = None,
    ) -> None:
        self.name = name
        self.terminus = terminus
        self.cache = cache
        self._key_of = key_of

    def __repr__(self) -> str:
        cache_name = self.cache.name if self.cache is not None else None
        return f"Indirection({self.name!r}, terminus={self.terminus.name!r}, cache={cache_name!r})"

    @property
    def requires_facts(self) -> bool:
        """Whether the active terminus needs the node's facts attached to lookups."""

        return bool(self.terminus.requires_facts)

    def find(self, key: str, **options: Unpack[FindOptions]) -> T | None:
        if options.get("ignore_cache") and options.get("ignore_terminus"):
            raise ValueError("ignore_cache and ignore_terminus are mutually exclusive")

        if not options.get("ignore_cache") and self.cache is not None:
            cached = self.cache.find(key, options)
            if cached is not None:
                log.debug("Using cached %s for %s", self.name, key)
                return cached

        if options.get("ignore_terminus"):
            return None

        result = self.terminus.find(key, options)
        if result is not None and self.cache is not None:
            try:
                self.cache.save(key, result)
            except Exception as exc:  # noqa: BLE001
                log.error("Could not cache %s for %s: %s", self.name, key, exc)  # noqa: TRY400
        return result

    def save(self, resource: T, *, key: str | None = None) -> None:
        resolved_key = key if key is not None else self._resolve_key(resource)
        self.terminus.save(resolved_key, resource)

    def _resolve_key(self, resource: T) -> str:
        if self._key_of is None:
            raise ValueError(f"Cannot derive a key for {self.name}; pass key= explicitly")
        return self._key_of(resource)
