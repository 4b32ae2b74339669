"""Central registry of upstream provider adapters."""

from __future__ import annotations

import logging
from dataclasses import dataclass

log = logging.getLogger(__name__)


@dataclass
class ProviderEntry:
    """Metadata about a registered adapter."""

    name: str  # "gemini", "huggingface", "openai"
    cls: type  # The adapter class


class ProviderRegistry:
    """Maps provider names to adapter classes."""

    def __init__(self) -> None:
        self._providers: dict[str, ProviderEntry] = {}

    def register(self, name: str, cls: type) -> None:
        """Register an adapter class under a provider name."""
        self._providers[name] = ProviderEntry(name=name, cls=cls)
        log.debug("Registered provider: %s", name)

    def get(self, name: str, config: dict | None = None) -> object:
        """Instantiate an adapter by name."""
        return self.get_entry(name).cls(config)

    def get_entry(self, name: str) -> ProviderEntry:
        """Get a ProviderEntry without instantiating."""
        entry = self._providers.get(name)
        if entry is None:
            available = ", ".join(self.names()) or "none"
            raise KeyError(f"Unknown provider {name!r}. Available: {available}")
        return entry

    def names(self) -> list[str]:
        """List registered provider names, sorted."""
        return sorted(self._providers)

    def list_all(self) -> list[ProviderEntry]:
        """List all registered adapters."""
        return [self._providers[name] for name in self.names()]


# Global singleton
registry = ProviderRegistry()
