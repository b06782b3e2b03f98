from dataclasses import dataclass, field
from uuid import UUID


@dataclass(frozen=True)
class AccountDTO:
    """An authenticated account as listed by the identity provider."""

    id: UUID
    email: str
    is_superuser: bool = False
    metadata: dict = field(default_factory=dict)


@dataclass(frozen=True)
class Identity:
    """The caller of an operation."""

    account_id: UUID | None
    email: str | None = None
    is_admin: bool = False
