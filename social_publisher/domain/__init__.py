from .entities import PostStatus, ScheduledPost, SocialCredential
from .value_objects import Platform, PostContent, build_message

__all__ = [
    "Platform",
    "PostContent",
    "PostStatus",
    "ScheduledPost",
    "SocialCredential",
    "build_message",
]
