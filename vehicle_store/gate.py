import logging

from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from vehicle_store import repository
from vehicle_store.context import ANONYMOUS, Principal, RequestContext
from vehicle_store.security import CredentialService

logger = logging.getLogger(__name__)

PUBLIC_PATHS = frozenset({"/auth/login", "/auth/signup"})
BEARER_PREFIX = "Bearer "


class TokenRejected(Exception):
    pass


class AuthenticationGate(BaseHTTPMiddleware):
    """Resolves the bearer token of every request into a RequestContext.

    Requests without a bearer header continue anonymously; a token that is
    present but does not check out ends the request with a 401.
    """

    def __init__(self, app, credentials: CredentialService, session_factory):
        super().__init__(app)
        self.credentials = credentials
        self.session_factory = session_factory

    async def dispatch(self, request: Request, call_next):
        if request.url.path in PUBLIC_PATHS:
            return await call_next(request)

        header = request.headers.get("Authorization")
        if not header or not header.startswith(BEARER_PREFIX):
            request.state.context = ANONYMOUS
            return await call_next(request)

        token = header[len(BEARER_PREFIX):].strip()
        try:
            principal = await run_in_threadpool(self.resolve, token)
        except TokenRejected as e:
            logger.warning("Rejected token on %s %s: %s", request.method, request.url.path, e)
            return self.unauthorized("Invalid or expired token")
        except Exception as e:
            logger.exception("Authentication failed on %s %s", request.method, request.url.path)
            return self.unauthorized(f"Authentication failed: {e}")

        request.state.context = RequestContext(principal=principal)
        return await call_next(request)

    def resolve(self, token: str) -> Principal:
        email = self.credentials.extract_identity(token)
        if email is None:
            raise TokenRejected("token has no subject")
        db = self.session_factory()
        try:
            user = repository.find_user_by_email(db, email)
            if user is None:
                raise TokenRejected(f"no user {email}")
            if not self.credentials.validate(token, user.email):
                raise TokenRejected("signature or expiry check failed")
            return Principal.from_user(user)
        finally:
            db.close()

    @staticmethod
    def unauthorized(message: str) -> JSONResponse:
        return JSONResponse(status_code=401, content={"error": message})
