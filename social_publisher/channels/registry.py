"""
Registry of publish adapters keyed by platform.

The router looks adapters up here; supporting a new platform means
registering another adapter.
"""

from collections.abc import Iterator, Mapping

from ..application.ports import PublishAdapter
from ..config import Settings
from ..domain.value_objects import Platform
from .facebook import FacebookAdapter
from .instagram import InstagramAdapter
from .linkedin import LinkedInAdapter


class AdapterRegistry(Mapping[Platform, PublishAdapter]):
    """Read-only mapping of platform to adapter, with explicit registration."""

    def __init__(self, adapters: list[PublishAdapter] | None = None) -> None:
        self._adapters: dict[Platform, PublishAdapter] = {}
        for adapter in adapters or []:
            self.register(adapter)

    def register(self, adapter: PublishAdapter) -> None:
        """Register an adapter, replacing any adapter for the same platform."""
        self._adapters[adapter.platform] = adapter

    def __getitem__(self, platform: Platform) -> PublishAdapter:
        return self._adapters[platform]

    def __iter__(self) -> Iterator[Platform]:
        return iter(self._adapters)

    def __len__(self) -> int:
        return len(self._adapters)


def build_adapter_registry(settings: Settings) -> AdapterRegistry:
    """Create the adapters for every supported platform from settings."""
    timeout = settings.http_timeout_seconds
    return AdapterRegistry(
        [
            FacebookAdapter(graph_url=settings.meta_graph_url, timeout=timeout),
            InstagramAdapter(graph_url=settings.meta_graph_url, timeout=timeout),
            LinkedInAdapter(timeout=timeout),
        ]
    )
