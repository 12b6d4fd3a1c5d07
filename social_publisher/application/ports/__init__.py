from .credential_repository import CredentialRepository
from .oauth_exchange import OAuthExchange, OAuthGrant
from .post_repository import PostRepository
from .publish_adapter import AdapterResult, PublishAdapter

__all__ = [
    "AdapterResult",
    "CredentialRepository",
    "OAuthExchange",
    "OAuthGrant",
    "PostRepository",
    "PublishAdapter",
]
