from .credential_repository import SqlAlchemyCredentialRepository
from .database import Database
from .models import Base, ContentModel, SocialAccountModel
from .post_repository import SqlAlchemyPostRepository

__all__ = [
    "Base",
    "ContentModel",
    "Database",
    "SocialAccountModel",
    "SqlAlchemyCredentialRepository",
    "SqlAlchemyPostRepository",
]
