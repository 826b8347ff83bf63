"""
Tenant-scoped guest record stores.

Two implementations share the RecordStore contract: FileRecordStore keeps one
``rsvp.csv`` per tenant directory, SqlRecordStore keeps rows in the ``guests``
table keyed by the integer tenant id. Neither holds state between calls; every
operation opens and closes its own file handle or session.

Known limits of the file store, kept for compatibility with existing
deployments: two appends racing on the same tenant file may interleave, two
updates racing on the same tenant are last-writer-wins, and two appends may
compute the same next id. ``lock_writes`` serializes writes per tenant inside
one process; ``atomic_rewrite`` makes update swap in a fully written file so
readers never see a truncated one. Both are off by default.
"""

import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from collections import Counter
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Dict, Iterator, List, Optional, Sequence, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from app.models import Guest
from app.schemas.guest import Attendance, GuestRecord
from app.services import csv_codec
from app.services.ids import next_record_id, timestamp_record_id
from app.services.repositories import GuestRepo
from app.utils.errors import (
    MissingRequiredFieldsError,
    RecordNotFoundError,
    StorageError,
    TenantFormatError,
)
from app.utils.slug import validate_slug

logger = logging.getLogger(__name__)

RSVP_FILENAME = "rsvp.csv"

TenantKey = Union[str, int]
RecordId = Union[str, int]


class RecordStore(ABC):
    """Contract shared by both guest record backends"""

    required_fields: Sequence[str] = csv_codec.REQUIRED_FIELDS

    @abstractmethod
    def read_all(self, tenant_id: TenantKey) -> List[GuestRecord]:
        """All records of a tenant; empty when nothing was ever written"""

    @abstractmethod
    def next_id(self, tenant_id: TenantKey) -> Optional[RecordId]:
        """Id the next appended record should carry"""

    @abstractmethod
    def append(self, tenant_id: TenantKey, record: GuestRecord) -> RecordId:
        """Store a new record and return its id"""

    @abstractmethod
    def find_by_id(self, tenant_id: TenantKey, record_id: RecordId) -> Optional[GuestRecord]:
        """Record with this id inside the tenant, or None"""

    @abstractmethod
    def update(self, tenant_id: TenantKey, record: GuestRecord) -> GuestRecord:
        """Replace the record carrying ``record.id``; RecordNotFoundError when absent"""

    def check_required(self, record: GuestRecord) -> None:
        missing = record.missing_fields(self.required_fields)
        if missing:
            raise MissingRequiredFieldsError(missing)

    def attendance_counts(self, tenant_id: TenantKey) -> Dict[str, int]:
        counts = Counter(r.attendance.value for r in self.read_all(tenant_id) if r.attendance)
        return {a.value: counts.get(a.value, 0) for a in Attendance}


class FileRecordStore(RecordStore):
    """One CSV file per tenant under ``<data_dir>/<tenant>/rsvp.csv``"""

    def __init__(self, data_dir: str, atomic_rewrite: bool = False, lock_writes: bool = False):
        self.data_dir = data_dir
        self.atomic_rewrite = atomic_rewrite
        self.lock_writes = lock_writes
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    # -------- paths --------

    def tenant_dir(self, tenant_id: TenantKey) -> str:
        check = validate_slug(tenant_id if isinstance(tenant_id, str) else None)
        if not check.valid:
            raise TenantFormatError(f"invalid format: {check.reason}", details={"tenant": tenant_id})
        return os.path.join(self.data_dir, tenant_id)

    def csv_path(self, tenant_id: TenantKey) -> str:
        return os.path.join(self.tenant_dir(tenant_id), RSVP_FILENAME)

    @contextmanager
    def _write_lock(self, tenant_id: str) -> Iterator[None]:
        if not self.lock_writes:
            yield
            return
        with self._locks_guard:
            lock = self._locks.setdefault(tenant_id, threading.Lock())
        with lock:
            yield

    # -------- setup --------

    def create_tenant_directory(self, tenant_id: str) -> str:
        path = self.tenant_dir(tenant_id)
        try:
            os.makedirs(path, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to create tenant directory: {e}", details={"tenant": tenant_id}) from e
        return path

    def initialize(self, tenant_id: str) -> str:
        """Create the tenant directory and a header-only RSVP file if missing"""
        self.create_tenant_directory(tenant_id)
        path = self.csv_path(tenant_id)
        try:
            if not os.path.exists(path) or os.path.getsize(path) == 0:
                with open(path, "w", encoding="utf-8", newline="") as f:
                    f.write(csv_codec.HEADER_LINE + "\n")
        except OSError as e:
            raise StorageError(f"Failed to initialize RSVP file: {e}", details={"tenant": tenant_id}) from e
        return path

    # -------- contract --------

    def read_all(self, tenant_id: TenantKey) -> List[GuestRecord]:
        path = self.csv_path(tenant_id)
        try:
            with open(path, "r", encoding="utf-8", errors="surrogateescape", newline="") as f:
                return csv_codec.read_records(f, source=path)
        except FileNotFoundError:
            return []
        except OSError as e:
            raise StorageError(f"Failed to read RSVP data: {e}", details={"tenant": tenant_id}) from e

    def count(self, tenant_id: TenantKey) -> int:
        return len(self.read_all(tenant_id))

    def next_id(self, tenant_id: TenantKey) -> str:
        try:
            records = self.read_all(tenant_id)
        except StorageError as e:
            fallback = timestamp_record_id()
            logger.warning(
                f"Could not scan RSVP records for tenant '{tenant_id}' ({e.message}); "
                f"using timestamp id {fallback}"
            )
            return fallback
        return next_record_id(records)

    def append(self, tenant_id: TenantKey, record: GuestRecord) -> str:
        self.check_required(record)
        record = record.model_copy(update={"id": str(record.id)})
        path = self.csv_path(tenant_id)

        with self._write_lock(tenant_id):
            try:
                os.makedirs(os.path.dirname(path), exist_ok=True)
                needs_header = not os.path.exists(path) or os.path.getsize(path) == 0
                with open(path, "a", encoding="utf-8", newline="") as f:
                    if needs_header:
                        f.write(csv_codec.HEADER_LINE + "\n")
                    f.write(csv_codec.format_record(record))
            except OSError as e:
                raise StorageError(f"Failed to save RSVP data: {e}", details={"tenant": tenant_id}) from e

        logger.info(f"RSVP {record.id} appended for tenant '{tenant_id}'")
        return record.id

    def find_by_id(self, tenant_id: TenantKey, record_id: RecordId) -> Optional[GuestRecord]:
        wanted = str(record_id)
        for record in self.read_all(tenant_id):
            if str(record.id) == wanted:
                return record
        return None

    def update(self, tenant_id: TenantKey, record: GuestRecord) -> GuestRecord:
        self.check_required(record)
        record = record.model_copy(update={"id": str(record.id)})

        with self._write_lock(tenant_id):
            records = self.read_all(tenant_id)
            for index, existing in enumerate(records):
                if str(existing.id) == record.id:
                    records[index] = record
                    break
            else:
                raise RecordNotFoundError(record.id, tenant_id)

            self._rewrite(tenant_id, records)

        logger.info(f"RSVP {record.id} updated for tenant '{tenant_id}'")
        return record

    def _rewrite(self, tenant_id: TenantKey, records: List[GuestRecord]) -> None:
        path = self.csv_path(tenant_id)
        content = csv_codec.format_file(records)
        try:
            if not self.atomic_rewrite:
                with open(path, "w", encoding="utf-8", newline="") as f:
                    f.write(content)
                return

            fd, tmp_path = tempfile.mkstemp(prefix=".rsvp-", suffix=".tmp", dir=os.path.dirname(path))
            try:
                with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                    f.write(content)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_path, path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            raise StorageError(f"Failed to rewrite RSVP data: {e}", details={"tenant": tenant_id}) from e


def _parse_timestamp(value: str) -> datetime:
    """ISO-8601 string to a naive UTC datetime"""
    parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def guest_to_record(guest: Guest) -> GuestRecord:
    return GuestRecord(
        id=guest.id,
        name=guest.name,
        relationship=guest.relationship_label,
        attendance=guest.attendance,
        message=guest.message or "",
        submitted_at=f"{guest.created_at.isoformat()}Z" if guest.created_at else "",
    )


class SqlRecordStore(RecordStore):
    """Guest rows keyed by the integer tenant id; ids come from the database"""

    required_fields = ("name", "relationship", "attendance", "submitted_at")

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    @staticmethod
    def _tenant_key(tenant_id: TenantKey) -> int:
        try:
            return int(tenant_id)
        except (TypeError, ValueError):
            raise TenantFormatError(
                f"invalid format: relational tenant id must be an integer, got {tenant_id!r}"
            ) from None

    @staticmethod
    def _record_key(record_id: RecordId) -> Optional[int]:
        try:
            return int(record_id)
        except (TypeError, ValueError):
            return None

    def read_all(self, tenant_id: TenantKey) -> List[GuestRecord]:
        key = self._tenant_key(tenant_id)
        try:
            with self.session_factory() as db:
                return [guest_to_record(g) for g in GuestRepo.list_for_tenant(db, key)]
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to get guests: {e}", details={"tenant": key}) from e

    def next_id(self, tenant_id: TenantKey) -> None:
        # assigned by the database on insert
        self._tenant_key(tenant_id)
        return None

    def append(self, tenant_id: TenantKey, record: GuestRecord) -> int:
        key = self._tenant_key(tenant_id)
        self.check_required(record)
        try:
            created_at = _parse_timestamp(record.submitted_at)
        except ValueError:
            raise MissingRequiredFieldsError(["submitted_at"]) from None

        try:
            with self.session_factory() as db:
                guest = GuestRepo.create(
                    db,
                    tenant_id=key,
                    name=record.name,
                    relationship=record.relationship,
                    attendance=record.attendance.value,
                    message=record.message,
                    created_at=created_at,
                )
                guest_id = guest.id
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to create guest: {e}", details={"tenant": key}) from e

        logger.info(f"Guest {guest_id} created for tenant {key}")
        return guest_id

    def find_by_id(self, tenant_id: TenantKey, record_id: RecordId) -> Optional[GuestRecord]:
        key = self._tenant_key(tenant_id)
        guest_key = self._record_key(record_id)
        if guest_key is None:
            return None
        try:
            with self.session_factory() as db:
                guest = GuestRepo.get(db, key, guest_key)
                return guest_to_record(guest) if guest else None
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to get guest by ID: {e}", details={"tenant": key}) from e

    def update(self, tenant_id: TenantKey, record: GuestRecord) -> GuestRecord:
        key = self._tenant_key(tenant_id)
        missing = record.missing_fields(("id", "name", "relationship", "attendance"))
        if missing:
            raise MissingRequiredFieldsError(missing)
        guest_key = self._record_key(record.id)
        if guest_key is None:
            raise RecordNotFoundError(record.id, key)

        try:
            with self.session_factory() as db:
                updated = GuestRepo.update(
                    db,
                    tenant_id=key,
                    guest_id=guest_key,
                    name=record.name,
                    relationship=record.relationship,
                    attendance=record.attendance.value,
                    message=record.message,
                )
                if not updated:
                    raise RecordNotFoundError(record.id, key)
                guest = GuestRepo.get(db, key, guest_key)
                stored = guest_to_record(guest)
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to update guest: {e}", details={"tenant": key}) from e

        logger.info(f"Guest {guest_key} updated for tenant {key}")
        return stored

    def attendance_counts(self, tenant_id: TenantKey) -> Dict[str, int]:
        key = self._tenant_key(tenant_id)
        try:
            with self.session_factory() as db:
                counts = GuestRepo.count_by_attendance(db, key)
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to get guest stats: {e}", details={"tenant": key}) from e
        return {a.value: counts.get(a.value, 0) for a in Attendance}
