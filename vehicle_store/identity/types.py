"""
Claims-based identity types.

An authenticated user is represented by a ``ClaimsPrincipal`` holding one
or more ``ClaimsIdentity`` objects, each a bag of typed claims issued by
some authority. These are the objects persisted for offline sign-in.
"""

from dataclasses import dataclass, field
from typing import Any

NAME_CLAIM_TYPE = "name"
ROLE_CLAIM_TYPE = "role"
STRING_VALUE_TYPE = "string"
LOCAL_AUTHORITY = "LOCAL AUTHORITY"


@dataclass
class Claim:
    """A single statement about a subject, e.g. its name or a role."""

    type: str
    value: str
    value_type: str = STRING_VALUE_TYPE
    issuer: str = LOCAL_AUTHORITY

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "type": self.type,
            "value": self.value,
            "value_type": self.value_type,
            "issuer": self.issuer,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Claim":
        """Deserialize from dictionary."""
        return cls(
            type=data["type"],
            value=data["value"],
            value_type=data.get("value_type", STRING_VALUE_TYPE),
            issuer=data.get("issuer", LOCAL_AUTHORITY),
        )


@dataclass
class ClaimsIdentity:
    """An identity and the claims that describe it.

    The identity counts as authenticated when it has an authentication type.
    """

    authentication_type: str | None = None
    claims: list[Claim] = field(default_factory=list)
    name_claim_type: str = NAME_CLAIM_TYPE
    role_claim_type: str = ROLE_CLAIM_TYPE

    @property
    def is_authenticated(self) -> bool:
        return bool(self.authentication_type)

    @property
    def name(self) -> str | None:
        claim = self.find_first(self.name_claim_type)
        return claim.value if claim else None

    def find_first(self, claim_type: str) -> Claim | None:
        """Return the first claim of ``claim_type``, if any."""
        for claim in self.claims:
            if claim.type == claim_type:
                return claim
        return None

    def has_claim(self, claim_type: str, value: str) -> bool:
        return any(c.type == claim_type and c.value == value for c in self.claims)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "authentication_type": self.authentication_type,
            "is_authenticated": self.is_authenticated,
            "name_claim_type": self.name_claim_type,
            "role_claim_type": self.role_claim_type,
            "claims": [c.to_dict() for c in self.claims],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ClaimsIdentity":
        """Deserialize from dictionary.

        ``is_authenticated`` is derived from the authentication type, the
        stored flag is informational only.
        """
        return cls(
            authentication_type=data.get("authentication_type"),
            claims=[Claim.from_dict(c) for c in data.get("claims", [])],
            name_claim_type=data.get("name_claim_type", NAME_CLAIM_TYPE),
            role_claim_type=data.get("role_claim_type", ROLE_CLAIM_TYPE),
        )


@dataclass
class ClaimsPrincipal:
    """The user as seen by the application: one or more claims identities."""

    identities: list[ClaimsIdentity] = field(default_factory=list)

    @classmethod
    def anonymous(cls) -> "ClaimsPrincipal":
        """Principal with a single unauthenticated, claim-less identity."""
        return cls(identities=[ClaimsIdentity()])

    @property
    def identity(self) -> ClaimsIdentity | None:
        """The primary (first) identity."""
        return self.identities[0] if self.identities else None

    @property
    def is_authenticated(self) -> bool:
        return self.identity is not None and self.identity.is_authenticated

    @property
    def claims(self) -> list[Claim]:
        """All claims across every identity."""
        return [c for identity in self.identities for c in identity.claims]

    def find_first(self, claim_type: str) -> Claim | None:
        for identity in self.identities:
            claim = identity.find_first(claim_type)
            if claim is not None:
                return claim
        return None

    def is_in_role(self, role: str) -> bool:
        return any(i.has_claim(i.role_claim_type, role) for i in self.identities)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {"identities": [i.to_dict() for i in self.identities]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ClaimsPrincipal":
        """Deserialize from dictionary."""
        return cls(identities=[ClaimsIdentity.from_dict(i) for i in data["identities"]])
