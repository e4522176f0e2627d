from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from vehicle_store.accounts import AccountService
from vehicle_store.database import get_db
from vehicle_store.dependencies import get_account_service
from vehicle_store.schemas import AuthResponse, LoginRequest, SignupRequest

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/signup", response_model=AuthResponse, summary="Register a new user")
def signup(request: SignupRequest, db: Session = Depends(get_db), accounts: AccountService = Depends(get_account_service)):
    return accounts.signup(db, request)


@router.post("/login", response_model=AuthResponse, summary="Log in and receive a bearer token")
def login(request: LoginRequest, db: Session = Depends(get_db), accounts: AccountService = Depends(get_account_service)):
    return accounts.login(db, request)
