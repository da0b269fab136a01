"""Result values returned by the booking core.

Expected outcomes such as a slot being taken are returned as a ``Failure``
instead of raised, so callers can tell "pick another slot" apart from
"not allowed" and from real system faults (which still raise).
"""

import enum
from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from fastapi import HTTPException

T = TypeVar("T")


class FailureKind(str, enum.Enum):
    VALIDATION = "validation"
    BOOKING_CONFLICT = "booking_conflict"
    POLICY_VIOLATION = "policy_violation"
    AUTHORIZATION = "authorization"
    NOT_FOUND = "not_found"


HTTP_STATUS_BY_KIND = {
    FailureKind.VALIDATION: 422,
    FailureKind.BOOKING_CONFLICT: 409,
    FailureKind.POLICY_VIOLATION: 403,
    FailureKind.AUTHORIZATION: 403,
    FailureKind.NOT_FOUND: 404,
}


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    kind: FailureKind
    message: str

    @property
    def ok(self) -> bool:
        return False


Result = Union[Success[T], Failure]


def validation_error(message: str) -> Failure:
    return Failure(FailureKind.VALIDATION, message)


def booking_conflict(message: str) -> Failure:
    return Failure(FailureKind.BOOKING_CONFLICT, message)


def policy_violation(message: str) -> Failure:
    return Failure(FailureKind.POLICY_VIOLATION, message)


def unauthorized(message: str = "Unauthorized access") -> Failure:
    return Failure(FailureKind.AUTHORIZATION, message)


def not_found(message: str) -> Failure:
    return Failure(FailureKind.NOT_FOUND, message)


def unwrap(result: "Result[T]") -> T:
    """Return the success value or raise the matching HTTPException"""
    if isinstance(result, Failure):
        raise HTTPException(
            status_code=HTTP_STATUS_BY_KIND[result.kind],
            detail={"error": result.kind.value, "message": result.message},
        )
    return result.value
