from collections.abc import Mapping

from ...application.ports import OAuthExchange
from ...config import Settings
from ...domain.value_objects import Platform
from .linkedin import LinkedInOAuthConfig, LinkedInOAuthExchange
from .meta import MetaOAuthConfig, MetaOAuthExchange, first_page
from .state import InvalidStateError, decode_state, encode_state


def build_oauth_exchanges(settings: Settings) -> Mapping[Platform, OAuthExchange]:
    """Create one OAuth exchange per platform from settings."""
    meta = MetaOAuthConfig(
        client_id=settings.meta_app_id,
        client_secret=settings.meta_app_secret,
        graph_url=settings.meta_graph_url,
    )
    linkedin = LinkedInOAuthConfig(
        client_id=settings.linkedin_client_id,
        client_secret=settings.linkedin_client_secret,
    )
    timeout = settings.http_timeout_seconds
    return {
        Platform.FACEBOOK: MetaOAuthExchange(meta, Platform.FACEBOOK, timeout=timeout),
        Platform.INSTAGRAM: MetaOAuthExchange(meta, Platform.INSTAGRAM, timeout=timeout),
        Platform.LINKEDIN: LinkedInOAuthExchange(linkedin, timeout=timeout),
    }


__all__ = [
    "InvalidStateError",
    "LinkedInOAuthConfig",
    "LinkedInOAuthExchange",
    "MetaOAuthConfig",
    "MetaOAuthExchange",
    "build_oauth_exchanges",
    "decode_state",
    "encode_state",
    "first_page",
]
