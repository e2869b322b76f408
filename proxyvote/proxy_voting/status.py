from dataclasses import dataclass
from typing import Optional

from django.db import models


class StatusKind(models.TextChoices):
    NOT_REGISTERED = "not_registered", "Not registered"
    REGISTERED = "registered", "Registered"
    VOTED = "voted", "Voted"
    DELEGATED = "delegated", "Delegated"


@dataclass(frozen=True)
class VoterStatus:
    """
    The state of one voter. Only `delegated` carries a target.

    Transitions only go forward:
    not_registered -> registered -> (voted | delegated(target))
    """
    kind: str
    target: Optional[str] = None

    @classmethod
    def not_registered(cls):
        return cls(StatusKind.NOT_REGISTERED)

    @classmethod
    def registered(cls):
        return cls(StatusKind.REGISTERED)

    @classmethod
    def voted(cls):
        return cls(StatusKind.VOTED)

    @classmethod
    def delegated(cls, target):
        return cls(StatusKind.DELEGATED, target)

    def to_value(self):
        """Encodes the status as a JSON-compatible dict for the store."""
        if self.kind == StatusKind.DELEGATED:
            return {"status": str(self.kind), "target": self.target}
        return {"status": str(self.kind)}

    @classmethod
    def from_value(cls, value):
        # A missing entry means the identity was never registered.
        if value is None:
            return cls.not_registered()
        kind = StatusKind(value["status"])
        if kind == StatusKind.DELEGATED:
            return cls.delegated(value["target"])
        return cls(kind)

    def __str__(self):
        if self.kind == StatusKind.DELEGATED:
            return f"delegated({self.target})"
        return str(self.kind)
