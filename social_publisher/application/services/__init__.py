from .connect_account import ConnectAccountService
from .dispatcher import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_CLAIM_TIMEOUT,
    ScheduledDispatcher,
    SweepResult,
)
from .publish_router import PublishResult, PublishRouter
from .reschedule import ReschedulePostService

__all__ = [
    "ConnectAccountService",
    "DEFAULT_BATCH_SIZE",
    "DEFAULT_CLAIM_TIMEOUT",
    "PublishResult",
    "PublishRouter",
    "ReschedulePostService",
    "ScheduledDispatcher",
    "SweepResult",
]
