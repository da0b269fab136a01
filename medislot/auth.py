import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .database import get_db
from .models import Role, User
from .security_utils import verify_access_token

logger = logging.getLogger(__name__)

security = HTTPBearer()


@dataclass(frozen=True)
class Actor:
    """The authenticated caller, passed explicitly into every core operation."""

    user_id: int
    role: Role
    doctor_id: Optional[int] = None
    patient_id: Optional[int] = None

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


def actor_for_user(user: User) -> Actor:
    """Build the Actor for a user row, resolving the role-specific profile id"""
    role = Role(user.role)
    if role is Role.ADMIN:
        return Actor(user_id=user.id, role=role)
    if role is Role.DOCTOR:
        if user.doctor is None:
            raise HTTPException(status_code=403, detail="Doctor profile not found")
        return Actor(user_id=user.id, role=role, doctor_id=user.doctor.id)
    if role is Role.PATIENT:
        if user.patient is None:
            raise HTTPException(status_code=403, detail="Patient profile not found")
        return Actor(user_id=user.id, role=role, patient_id=user.patient.id)
    raise ValueError(f"Unhandled role: {role}")


async def get_current_actor(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> Actor:
    """Resolve the bearer token into an Actor"""
    payload = verify_access_token(credentials.credentials)
    if not payload or not payload.get("sub"):
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError) as e:
        raise HTTPException(status_code=401, detail="Invalid token subject") from e

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        logger.warning(f"⚠️ Token for unknown user_id={user_id}")
        raise HTTPException(status_code=401, detail="User not found")

    return actor_for_user(user)


def require_roles(*roles: Role):
    """Dependency factory restricting an endpoint to the given roles"""

    async def _check(actor: Actor = Depends(get_current_actor)) -> Actor:
        if actor.role not in roles:
            logger.warning(f"🚫 {actor.role.value} user {actor.user_id} denied (needs {roles})")
            raise HTTPException(
                status_code=403,
                detail={"error": "authorization", "message": "Unauthorized access"},
            )
        return actor

    return _check
