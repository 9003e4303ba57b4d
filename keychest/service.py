"""
keychest.service
Record services for API keys and passwords over a pluggable backend.

A backend only loads and saves the whole payload dict
({"api_keys": [...], "passwords": [...]}); the service owns record logic.
"""

import copy
import logging
from collections import Counter
from typing import Any, Dict, List, Optional

import pendulum

from .errors import RecordNotFoundError
from .models import API_KEY, PASSWORD, CredentialRecord, now_iso
from .vault import empty_payload, open_vault, save_vault

logger = logging.getLogger(__name__)

COLLECTION_FOR_KIND = {API_KEY: "api_keys", PASSWORD: "passwords"}
EDITABLE_FIELDS = ("name", "service", "secret", "category", "description", "expiration")


class MemoryBackend:
    """In-process backend, nothing survives the interpreter."""

    def __init__(self, data: Optional[Dict[str, Any]] = None):
        self._data = copy.deepcopy(data) if data else empty_payload()

    def load(self) -> Dict[str, Any]:
        return copy.deepcopy(self._data)

    def save(self, data: Dict[str, Any]) -> None:
        self._data = copy.deepcopy(data)


class VaultBackend:
    """Encrypted vault file; every save re-encrypts the whole payload."""

    def __init__(self, master_password: str, path: Optional[str] = None, kdf_params: Optional[Dict[str, int]] = None):
        self.master_password = master_password
        self.path = path
        self.kdf_params = kdf_params

    def load(self) -> Dict[str, Any]:
        return open_vault(self.master_password, self.path)

    def save(self, data: Dict[str, Any]) -> None:
        save_vault(self.master_password, data, self.path, self.kdf_params)


class CredentialService:
    """CRUD, search and statistics for one kind of record."""

    def __init__(self, backend, kind: str = PASSWORD):
        if kind not in COLLECTION_FOR_KIND:
            raise ValueError(f"Unknown record kind: {kind!r}")
        self.backend = backend
        self.kind = kind
        self.collection = COLLECTION_FOR_KIND[kind]

    # ---------------- helpers ----------------
    def _load(self):
        data = self.backend.load()
        items = data.setdefault(self.collection, [])
        return data, items

    def _records(self) -> List[CredentialRecord]:
        _, items = self._load()
        records = [CredentialRecord.from_dict(item, kind=self.kind) for item in items]
        # newest first
        records.sort(key=lambda r: pendulum.parse(r.created_at), reverse=True)
        return records

    # ---------------- queries ----------------
    def list_all(self) -> List[CredentialRecord]:
        return self._records()

    def get(self, record_id: str) -> Optional[CredentialRecord]:
        for record in self._records():
            if record.id == record_id:
                return record
        return None

    def search(self, query: str) -> List[CredentialRecord]:
        return [r for r in self._records() if r.matches(query or "")]

    def by_category(self, category: str) -> List[CredentialRecord]:
        return [r for r in self._records() if r.category == category]

    def statistics(self) -> Dict[str, Any]:
        counts = Counter(r.category for r in self._records())
        by_category = [
            {"category": category, "count": count}
            for category, count in sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
        ]
        return {"total": sum(counts.values()), "by_category": by_category}

    def expiring(self, within_days: int = 30, now: Optional[pendulum.DateTime] = None) -> List[CredentialRecord]:
        """Records expiring within the window, already expired ones included."""
        limit = (now or pendulum.now()).add(days=within_days).date()
        return [
            r for r in self._records()
            if r.expiration and pendulum.parse(r.expiration).date() <= limit
        ]

    # ---------------- mutations ----------------
    def create(
        self,
        name: str,
        service: str,
        secret: str,
        category: str = "",
        description: str = "",
        expiration: Optional[str] = None,
    ) -> CredentialRecord:
        record = CredentialRecord(
            name=name,
            service=service,
            secret=secret,
            kind=self.kind,
            category=category,
            description=description,
            expiration=expiration,
        )
        data, items = self._load()
        items.append(record.to_dict())
        self.backend.save(data)
        logger.info("created %s record %s", self.kind, record.id)
        return record

    def update(self, record_id: str, **changes) -> CredentialRecord:
        """
        Apply changes to an existing record and refresh updated_at.
        id and created_at cannot be changed. Raises RecordNotFoundError.
        """
        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update field(s): {', '.join(sorted(unknown))}")
        data, items = self._load()
        for index, item in enumerate(items):
            if item.get("id") != record_id:
                continue
            merged = dict(item)
            merged.update(changes)
            merged["updated_at"] = now_iso()
            record = CredentialRecord.from_dict(merged, kind=self.kind)
            items[index] = record.to_dict()
            self.backend.save(data)
            logger.info("updated %s record %s (%s)", self.kind, record_id, ", ".join(sorted(changes)))
            return record
        raise RecordNotFoundError(record_id)

    def delete(self, record_id: str) -> bool:
        data, items = self._load()
        remaining = [item for item in items if item.get("id") != record_id]
        if len(remaining) == len(items):
            return False
        data[self.collection] = remaining
        self.backend.save(data)
        logger.info("deleted %s record %s", self.kind, record_id)
        return True
