from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from vehicle_store.accounts import AccountService
from vehicle_store.context import Principal
from vehicle_store.database import get_db
from vehicle_store.dependencies import get_account_service, require_principal
from vehicle_store.schemas import UserProfileResponse

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/profile", response_model=UserProfileResponse, summary="Profile of the authenticated user")
def profile(
    principal: Principal = Depends(require_principal),
    db: Session = Depends(get_db),
    accounts: AccountService = Depends(get_account_service),
):
    return accounts.profile(db, principal)
