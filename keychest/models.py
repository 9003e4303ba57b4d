"""
keychest.models
Credential records stored in the vault: API keys and passwords share one shape.
"""

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import pendulum

API_KEY = "api_key"
PASSWORD = "password"
KINDS = (API_KEY, PASSWORD)

API_KEY_CATEGORIES = ("AI", "Payment", "Cloud", "Analytics", "Social", "Other")
PASSWORD_CATEGORIES = (
    "social", "email", "banking", "work", "gaming",
    "shopping", "entertainment", "utilities", "other",
)

DEFAULT_CATEGORY = {API_KEY: "Other", PASSWORD: "other"}

# secret field name used by older exports for each kind
_LEGACY_SECRET_FIELD = {API_KEY: "key", PASSWORD: "password"}


def now_iso() -> str:
    return pendulum.now("UTC").to_iso8601_string()


def parse_expiration(value: Optional[str]) -> Optional[str]:
    """Normalize an expiration to YYYY-MM-DD; empty means no expiration."""
    if value is None:
        return None
    value = str(value).strip()
    if not value:
        return None
    try:
        return pendulum.parse(value).to_date_string()
    except ValueError as e:
        raise ValueError(f"Invalid expiration date: {value!r}") from e


@dataclass
class CredentialRecord:
    """
    A named secret (API key or password) for a service.

    name, service and secret are required and stripped on construction.
    """
    name: str
    service: str
    secret: str
    kind: str = PASSWORD
    category: str = ""
    description: str = ""
    expiration: Optional[str] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: str = field(default_factory=now_iso)
    updated_at: str = field(default_factory=now_iso)

    def __post_init__(self):
        if self.kind not in KINDS:
            raise ValueError(f"Unknown record kind: {self.kind!r}")
        for attr, label in (("name", "Name"), ("service", "Service name"), ("secret", "Secret")):
            value = getattr(self, attr)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"{label} is required")
            setattr(self, attr, value.strip())
        self.category = (self.category or "").strip() or DEFAULT_CATEGORY[self.kind]
        self.description = self.description or ""
        self.expiration = parse_expiration(self.expiration)

    def __repr__(self):
        return (
            f"CredentialRecord(id={self.id}, kind={self.kind}, "
            f"name={self.name}, service={self.service}, secret=<hidden>, "
            f"category={self.category})"
        )

    def masked_secret(self) -> str:
        """First and last four characters with the middle hidden."""
        s = self.secret
        if len(s) <= 8:
            return "•" * len(s)
        return s[:4] + "•" * (len(s) - 8) + s[-4:]

    def is_expired(self, now: Optional[pendulum.DateTime] = None) -> bool:
        if not self.expiration:
            return False
        today = (now or pendulum.now()).date()
        return pendulum.parse(self.expiration).date() < today

    def matches(self, query: str) -> bool:
        """Case-insensitive substring match over the searchable fields."""
        q = query.strip().lower()
        if not q:
            return True
        return any(
            q in (value or "").lower()
            for value in (self.name, self.service, self.category, self.description)
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind,
            "name": self.name,
            "service": self.service,
            "secret": self.secret,
            "category": self.category,
            "description": self.description,
            "expiration": self.expiration,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], kind: Optional[str] = None) -> "CredentialRecord":
        kind = kind or data.get("kind") or PASSWORD
        secret = data.get("secret")
        if secret is None:
            secret = data.get(_LEGACY_SECRET_FIELD.get(kind, "secret"), "")
        kwargs = {
            "name": data.get("name", ""),
            "service": data.get("service", ""),
            "secret": secret,
            "kind": kind,
            "category": data.get("category", ""),
            "description": data.get("description") or "",
            "expiration": data.get("expiration") or None,
        }
        for key in ("id", "created_at", "updated_at"):
            if data.get(key):
                kwargs[key] = data[key]
        return cls(**kwargs)
