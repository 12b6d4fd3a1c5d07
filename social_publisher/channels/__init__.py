from .facebook import FacebookAdapter
from .instagram import InstagramAdapter
from .linkedin import LinkedInAdapter
from .registry import AdapterRegistry, build_adapter_registry

__all__ = [
    "AdapterRegistry",
    "FacebookAdapter",
    "InstagramAdapter",
    "LinkedInAdapter",
    "build_adapter_registry",
]
