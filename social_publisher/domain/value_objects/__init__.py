from .platform import Platform
from .post_content import PostContent, build_message

__all__ = ["Platform", "PostContent", "build_message"]
