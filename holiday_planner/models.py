"""
Design (models.py)
- Purpose: Define the Holiday record and its mapping to/from store documents.
- Inputs: Field values (str, datetime).
- Outputs: Dataclass instances; plain dicts for the document store.
- Side effects: None.
- Thread-safety: Dataclasses are plain containers; the store copies documents on read/write.
"""

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Dict, Optional


# Document keys (the store is schemaless; these are the names written on disk)
TEXT_FIELDS = {
    "title": "title",
    "location": "location",
    "notes": "notes",
    "start_date": "startDate",
    "end_date": "endDate",
}
CREATED_AT_KEY = "createdAt"


def as_utc(stamp: Optional[datetime]) -> Optional[datetime]:
    """Normalize a stamp to aware UTC; naive values are taken to be UTC already."""
    if stamp is None:
        return None
    if stamp.tzinfo is None:
        return stamp.replace(tzinfo=timezone.utc)
    return stamp.astimezone(timezone.utc)


@dataclass
class Holiday:
    """
    Design (Holiday)
    - Purpose: A single planned trip.
    - Fields:
        id: document id assigned by the store on creation ("" = not yet persisted).
        title: required, non-blank (checked by the UI, not here).
        location, notes: optional free text.
        start_date, end_date: optional free-form text (no date validation).
        created_at: stamped once by the repository at creation time.
    """
    id: str = ""
    title: str = ""
    location: str = ""
    notes: str = ""
    start_date: str = ""
    end_date: str = ""
    created_at: Optional[datetime] = None

    def with_id(self, doc_id: str, created_at: Optional[datetime] = None) -> "Holiday":
        """Return a copy carrying the given identity (and creation stamp when provided)."""
        if created_at is None:
            return replace(self, id=doc_id)
        return replace(self, id=doc_id, created_at=created_at)

    def matches(self, query: str) -> bool:
        """
        Purpose: Case-insensitive substring match against title or location.
        Inputs: query (str); blank query matches everything.
        Outputs: bool
        """
        if not query or not query.strip():
            return True
        needle = query.casefold()
        return needle in self.title.casefold() or needle in self.location.casefold()

    def to_document(self) -> Dict[str, Any]:
        """Serialize to the stored body. The id is the document key, not part of the body."""
        data: Dict[str, Any] = {key: getattr(self, attr) for attr, key in TEXT_FIELDS.items()}
        data[CREATED_AT_KEY] = as_utc(self.created_at)
        return data

    @classmethod
    def from_document(cls, doc_id: str, data: Dict[str, Any]) -> "Holiday":
        """
        Purpose: Rebuild a Holiday from a stored body.
        Inputs: doc_id (document key), data (dict as stored).
        Outputs: Holiday; missing text fields default to "", missing createdAt to None.
        Raises: ValueError when a field has the wrong type.
        """
        values: Dict[str, Any] = {}
        for attr, key in TEXT_FIELDS.items():
            raw = data.get(key, "")
            if raw is None:
                raw = ""
            if not isinstance(raw, str):
                raise ValueError(f"Holiday {doc_id}: field '{key}' must be text, got {type(raw).__name__}")
            values[attr] = raw
        created_at = data.get(CREATED_AT_KEY)
        if created_at is not None and not isinstance(created_at, datetime):
            raise ValueError(f"Holiday {doc_id}: field '{CREATED_AT_KEY}' must be a timestamp")
        return cls(id=doc_id, created_at=as_utc(created_at), **values)
