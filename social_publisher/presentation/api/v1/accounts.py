from fastapi import APIRouter, Depends, HTTPException, status

from ....application.dtos import ConnectedAccountDTO
from ....application.services import ConnectAccountService
from ...middleware import AuthenticatedUser, require_auth
from ..dependencies import get_connect_service

router = APIRouter(prefix="/social/accounts", tags=["accounts"])


@router.get("", summary="List connected accounts")
async def list_accounts(
    user: AuthenticatedUser = Depends(require_auth),
    service: ConnectAccountService = Depends(get_connect_service),
) -> dict:
    credentials = await service.list_accounts(user.user_id)
    return {
        "accounts": [
            ConnectedAccountDTO.from_entity(c).model_dump(mode="json", by_alias=True)
            for c in credentials
        ]
    }


@router.delete("/{platform}", summary="Disconnect an account")
async def disconnect_account(
    platform: str,
    user: AuthenticatedUser = Depends(require_auth),
    service: ConnectAccountService = Depends(get_connect_service),
) -> dict:
    deleted = await service.disconnect(user.user_id, platform)
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No {platform} account connected",
        )
    return {"success": True}
