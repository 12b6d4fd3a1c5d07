from .scheduled_post import (
    MANUALLY_PUBLISHABLE,
    RESCHEDULABLE,
    PostStatus,
    ScheduledPost,
)
from .social_credential import SocialCredential

__all__ = [
    "MANUALLY_PUBLISHABLE",
    "RESCHEDULABLE",
    "PostStatus",
    "ScheduledPost",
    "SocialCredential",
]
