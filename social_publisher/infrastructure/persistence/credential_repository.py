from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ...application.ports import CredentialRepository
from ...domain.entities import SocialCredential
from ...domain.value_objects import Platform
from .models import SocialAccountModel


class SqlAlchemyCredentialRepository(CredentialRepository):
    """SQL implementation of CredentialRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _get_model(self, user_id: str, platform: Platform) -> SocialAccountModel | None:
        stmt = select(SocialAccountModel).where(
            SocialAccountModel.user_id == user_id,
            SocialAccountModel.platform == platform.value,
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_credential(
        self, user_id: str, platform: Platform
    ) -> SocialCredential | None:
        model = await self._get_model(user_id, platform)
        return model.to_entity() if model else None

    async def upsert(self, credential: SocialCredential) -> None:
        existing = await self._get_model(credential.user_id, credential.platform)
        if existing:
            existing.apply(credential)
        else:
            self._session.add(SocialAccountModel.from_entity(credential))
        await self._session.commit()

    async def delete(self, user_id: str, platform: Platform) -> bool:
        stmt = delete(SocialAccountModel).where(
            SocialAccountModel.user_id == user_id,
            SocialAccountModel.platform == platform.value,
        )
        result = await self._session.execute(stmt)
        await self._session.commit()
        return result.rowcount > 0

    async def list_for_user(self, user_id: str) -> list[SocialCredential]:
        stmt = (
            select(SocialAccountModel)
            .where(SocialAccountModel.user_id == user_id)
            .order_by(SocialAccountModel.platform)
        )
        result = await self._session.execute(stmt)
        return [model.to_entity() for model in result.scalars()]
