"""
RSVP submission for a validated tenant
"""

import logging
from datetime import datetime, timezone
from typing import Optional, Tuple, Union

from app.schemas.guest import GuestRecord, RSVPSubmission
from app.services.record_store import RecordStore

logger = logging.getLogger(__name__)

def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")

class RSVPService:
    """Creates or updates a guest's response"""

    def __init__(self, record_store: RecordStore):
        self.record_store = record_store

    def submit(
        self,
        tenant_key: Union[str, int],
        submission: RSVPSubmission,
        guest_id: Optional[str] = None,
    ) -> Tuple[GuestRecord, bool]:
        """Store a submission and return (record, was_update).

        A known ``guest_id`` updates that record in place. An unknown or
        missing one creates a new record with the next id for the tenant.
        """
        submitted_at = utc_timestamp()

        if guest_id:
            existing = self.record_store.find_by_id(tenant_key, guest_id)
            if existing is not None:
                updated = existing.model_copy(update={
                    "name": submission.name,
                    "relationship": submission.relationship,
                    "attendance": submission.attendance,
                    "message": submission.message or "",
                    "submitted_at": submitted_at,
                })
                return self.record_store.update(tenant_key, updated), True
            logger.info(f"Guest {guest_id} not found for tenant {tenant_key}; creating a new RSVP")

        record = GuestRecord(
            id=self.record_store.next_id(tenant_key),
            name=submission.name,
            relationship=submission.relationship,
            attendance=submission.attendance,
            message=submission.message or "",
            submitted_at=submitted_at,
        )
        new_id = self.record_store.append(tenant_key, record)
        return record.model_copy(update={"id": new_id}), False
