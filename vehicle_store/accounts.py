import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from vehicle_store import repository
from vehicle_store.context import Principal
from vehicle_store.errors import ConflictError, InvalidCredentialsError, NotFoundError
from vehicle_store.mapping import to_auth_response, to_user_profile
from vehicle_store.models import Role, User
from vehicle_store.schemas import AuthResponse, LoginRequest, SignupRequest, UserProfileResponse
from vehicle_store.security import CredentialService

logger = logging.getLogger(__name__)


class AccountService:
    def __init__(self, credentials: CredentialService):
        self.credentials = credentials

    def signup(self, db: Session, request: SignupRequest) -> AuthResponse:
        email = str(request.email)
        if repository.email_exists(db, email):
            logger.warning("Signup refused, email already registered: %s", email)
            raise ConflictError("Email already exists")
        user = User(
            email=email,
            password_hash=self.credentials.hash_password(request.password),
            first_name=request.first_name,
            last_name=request.last_name,
            role=Role.USER,
        )
        try:
            repository.add_user(db, user)
            db.commit()
        except IntegrityError:
            # lost a race with a concurrent signup for the same email
            db.rollback()
            raise ConflictError("Email already exists")
        logger.info("Registered user %s", user.email)
        return to_auth_response(user, self.credentials.issue_token(user.email))

    def login(self, db: Session, request: LoginRequest) -> AuthResponse:
        user = repository.find_user_by_email(db, str(request.email))
        if not user or not self.credentials.verify_password(request.password, user.password_hash):
            logger.warning("Failed login for %s", request.email)
            raise InvalidCredentialsError("Invalid email or password")
        return to_auth_response(user, self.credentials.issue_token(user.email))

    def profile(self, db: Session, principal: Principal) -> UserProfileResponse:
        user = repository.get_user(db, principal.id)
        if user is None:
            raise NotFoundError("User not found")
        return to_user_profile(user)
