"""
Request schema - the remote lab-usage reservation records being watched.
"""

from __future__ import annotations

from enum import Enum
from typing import Union

from pydantic import AliasChoices, BaseModel, Field

RequestId = Union[int, str]


class RequestStatus(str, Enum):
    """Statuses with notification semantics."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    @classmethod
    def parse(cls, value: str | None) -> RequestStatus | None:
        """Resolve a raw status string, or None if it has no known meaning."""
        if value is None:
            return None
        return _STATUS_ALIASES.get(normalize_status(value))


# Spanish spellings are what the reservation API actually returns
_STATUS_ALIASES: dict[str, RequestStatus] = {
    "pending": RequestStatus.PENDING,
    "pendiente": RequestStatus.PENDING,
    "approved": RequestStatus.APPROVED,
    "aprobada": RequestStatus.APPROVED,
    "rejected": RequestStatus.REJECTED,
    "rechazada": RequestStatus.REJECTED,
}


def normalize_status(value: str) -> str:
    """Canonical form used for every status comparison."""
    return value.strip().casefold()


def statuses_equal(a: str, b: str) -> bool:
    """Case-insensitive status comparison."""
    return normalize_status(a) == normalize_status(b)


class Request(BaseModel):
    """
    A lab-usage reservation as returned by the remote API.

    Only id, title and status matter here; any other fields the API
    sends are kept untouched.
    """

    id: RequestId = Field(validation_alias=AliasChoices("id", "id_solicitud"))
    title: str = Field(
        default="",
        validation_alias=AliasChoices("title", "practica_titulo"),
    )
    status: str = Field(validation_alias=AliasChoices("status", "estado"))

    model_config = {"extra": "allow", "populate_by_name": True}

    @property
    def known_status(self) -> RequestStatus | None:
        return RequestStatus.parse(self.status)
