"""Request and response DTOs for the HTTP layer."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from ..domain.entities import SocialCredential


class PublishRequestDTO(BaseModel):
    """Manual publish request."""

    model_config = ConfigDict(populate_by_name=True)

    content_id: str = Field(..., alias="contentId", min_length=1)
    platform: str = Field(..., min_length=1)


class PublishResponseDTO(BaseModel):
    success: bool = True
    post_id: str = Field(..., serialization_alias="postId")
    id: str
    platform: str


class SweepResponseDTO(BaseModel):
    success: bool = True
    processed: int
    published: int
    failed: int
    errors: list[str]


class RescheduleRequestDTO(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    content_id: str = Field(..., alias="contentId", min_length=1)
    scheduled_at: datetime = Field(..., alias="scheduledAt")


class ConnectedAccountDTO(BaseModel):
    """A connected account as shown to its owner. Tokens are never exposed."""

    platform: str
    account_id: str = Field(..., serialization_alias="accountId")
    account_name: str | None = Field(None, serialization_alias="accountName")
    expires_at: datetime | None = Field(None, serialization_alias="expiresAt")
    updated_at: datetime = Field(..., serialization_alias="updatedAt")
    expired: bool

    @classmethod
    def from_entity(cls, credential: SocialCredential) -> "ConnectedAccountDTO":
        return cls(
            platform=credential.platform.value,
            account_id=credential.platform_account_id,
            account_name=credential.display_name,
            expires_at=credential.expires_at,
            updated_at=credential.updated_at,
            expired=credential.is_expired(),
        )
