from collections.abc import AsyncGenerator, Mapping
from datetime import timedelta
from functools import lru_cache

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ...application.ports import OAuthExchange
from ...application.services import (
    ConnectAccountService,
    PublishRouter,
    ReschedulePostService,
    ScheduledDispatcher,
)
from ...channels import AdapterRegistry, build_adapter_registry
from ...config import Settings, settings
from ...domain.value_objects import Platform
from ...infrastructure.oauth import build_oauth_exchanges
from ...infrastructure.persistence import (
    Database,
    SqlAlchemyCredentialRepository,
    SqlAlchemyPostRepository,
)

# Singleton database instance
_database: Database | None = None


def get_settings() -> Settings:
    return settings


def get_database() -> Database:
    global _database
    if _database is None:
        _database = Database(settings.database_url)
    return _database


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    db = get_database()
    session = db.session()
    try:
        yield session
    finally:
        await session.close()


@lru_cache
def get_adapter_registry() -> AdapterRegistry:
    return build_adapter_registry(settings)


@lru_cache
def get_oauth_exchanges() -> Mapping[Platform, OAuthExchange]:
    return build_oauth_exchanges(settings)


def get_publish_router(
    adapters: AdapterRegistry = Depends(get_adapter_registry),
) -> PublishRouter:
    return PublishRouter(adapters)


def get_dispatcher(
    session: AsyncSession = Depends(get_session),
    router: PublishRouter = Depends(get_publish_router),
) -> ScheduledDispatcher:
    return ScheduledDispatcher(
        posts=SqlAlchemyPostRepository(session),
        credentials=SqlAlchemyCredentialRepository(session),
        router=router,
        batch_size=settings.sweep_batch_size,
        claim_timeout=timedelta(minutes=settings.claim_timeout_minutes),
    )


def get_connect_service(
    session: AsyncSession = Depends(get_session),
    exchanges: Mapping[Platform, OAuthExchange] = Depends(get_oauth_exchanges),
) -> ConnectAccountService:
    return ConnectAccountService(SqlAlchemyCredentialRepository(session), exchanges)


def get_reschedule_service(
    session: AsyncSession = Depends(get_session),
) -> ReschedulePostService:
    return ReschedulePostService(SqlAlchemyPostRepository(session))
