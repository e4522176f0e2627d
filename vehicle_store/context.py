from dataclasses import dataclass
from typing import Optional

from vehicle_store.models import Role, User


@dataclass(frozen=True)
class Principal:
    """Snapshot of the authenticated user, detached from any session."""

    id: int
    email: str
    first_name: str
    last_name: str
    role: Role

    @classmethod
    def from_user(cls, user: User) -> "Principal":
        return cls(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            role=user.role,
        )


@dataclass(frozen=True)
class RequestContext:
    principal: Optional[Principal] = None

    @property
    def is_authenticated(self) -> bool:
        return self.principal is not None


ANONYMOUS = RequestContext()
