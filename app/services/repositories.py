"""
Repository layer abstracting storage (per-tenant files vs SQLAlchemy).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from functools import lru_cache
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, sessionmaker

from app.core.config import settings
from app.models import Tenant, Guest


def use_database() -> bool:
    return bool(settings.DATABASE_URL)


# -------- Tenant repository --------

class TenantRepo:
    @staticmethod
    def get_by_slug(db: Session, slug: str) -> Optional[Tenant]:
        return db.query(Tenant).filter(Tenant.slug == slug).first()

    @staticmethod
    def get_active_by_slug(db: Session, slug: str) -> Optional[Tenant]:
        return db.query(Tenant).filter(Tenant.slug == slug, Tenant.is_active.is_(True)).first()

    @staticmethod
    def list_active_slugs(db: Session) -> List[str]:
        rows = db.query(Tenant.slug).filter(Tenant.is_active.is_(True)).order_by(Tenant.slug).all()
        return [row.slug for row in rows]


# -------- Guest repository --------
# Every query here filters on tenant_id; callers never query Guest directly.

class GuestRepo:
    @staticmethod
    def list_for_tenant(db: Session, tenant_id: int) -> List[Guest]:
        return db.query(Guest).filter(Guest.tenant_id == tenant_id).order_by(Guest.id).all()

    @staticmethod
    def get(db: Session, tenant_id: int, guest_id: int) -> Optional[Guest]:
        return db.query(Guest).filter(Guest.tenant_id == tenant_id, Guest.id == guest_id).first()

    @staticmethod
    def create(db: Session, tenant_id: int, name: str, relationship: str, attendance: str,
               message: Optional[str], created_at: datetime) -> Guest:
        guest = Guest(
            tenant_id=tenant_id,
            name=name,
            relationship_label=relationship,
            attendance=attendance,
            message=message or None,
            created_at=created_at,
            updated_at=created_at,
        )
        db.add(guest)
        db.commit()
        db.refresh(guest)
        return guest

    @staticmethod
    def update(db: Session, tenant_id: int, guest_id: int, name: str, relationship: str,
               attendance: str, message: Optional[str]) -> int:
        count = db.query(Guest).filter(
            Guest.tenant_id == tenant_id,
            Guest.id == guest_id,
        ).update({
            Guest.name: name,
            Guest.relationship_label: relationship,
            Guest.attendance: attendance,
            Guest.message: message or None,
            Guest.updated_at: datetime.utcnow(),
        }, synchronize_session=False)
        db.commit()
        return count

    @staticmethod
    def count_by_attendance(db: Session, tenant_id: int) -> Dict[str, int]:
        rows = db.query(
            Guest.attendance,
            func.count(Guest.id).label("count"),
        ).filter(Guest.tenant_id == tenant_id).group_by(Guest.attendance).all()
        return {row.attendance: row.count for row in rows}


# -------- Backend selection --------

@dataclass
class TenantBackend:
    """Registry, config store and record store for one storage backend"""
    registry: Any
    config_store: Any
    record_store: Any
    name: str


def build_file_backend(data_dir: str, atomic_rewrite: bool = False, lock_writes: bool = False) -> TenantBackend:
    from app.services.config_store import FileConfigStore
    from app.services.record_store import FileRecordStore
    from app.services.registry import FileTenantRegistry

    config_store = FileConfigStore(data_dir)
    return TenantBackend(
        registry=FileTenantRegistry(config_store),
        config_store=config_store,
        record_store=FileRecordStore(data_dir, atomic_rewrite=atomic_rewrite, lock_writes=lock_writes),
        name="file",
    )


def build_sql_backend(session_factory: sessionmaker) -> TenantBackend:
    from app.services.config_store import SqlConfigStore
    from app.services.record_store import SqlRecordStore
    from app.services.registry import SqlTenantRegistry

    return TenantBackend(
        registry=SqlTenantRegistry(session_factory),
        config_store=SqlConfigStore(session_factory),
        record_store=SqlRecordStore(session_factory),
        name="sql",
    )


@lru_cache(maxsize=1)
def get_backend() -> TenantBackend:
    """Backend chosen from settings once per process (FastAPI dependency)"""
    if use_database():
        from app.core.db import get_session_factory
        return build_sql_backend(get_session_factory())
    return build_file_backend(
        settings.DATA_DIR,
        atomic_rewrite=settings.ATOMIC_REWRITE,
        lock_writes=settings.LOCK_WRITES,
    )
