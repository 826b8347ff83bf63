"""
Tests for the relational registry, config store and record store
"""

from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from app.core.db import Base, init_db
from app.models import Guest, Tenant
from app.schemas.guest import Attendance, GuestRecord
from app.services.config_store import SqlConfigStore
from app.services.record_store import SqlRecordStore
from app.services.registry import SqlTenantRegistry
from app.services.repositories import build_sql_backend
from app.services.tenant_service import TenantService
from app.services.validator import TenantValidator
from app.utils.errors import (
    MissingRequiredFieldsError,
    RecordNotFoundError,
    StorageError,
    TenantFormatError,
)

@pytest.fixture
def engine(tmp_path):
    """Create a throwaway SQLite database with the schema installed"""
    engine = create_engine(f"sqlite:///{tmp_path / 'tenants.db'}", connect_args={"check_same_thread": False})
    init_db(engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()

@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)

@pytest.fixture
def tenants(session_factory):
    """Two active tenants and one inactive tenant"""
    with session_factory() as db:
        rows = {
            "john-jane": Tenant(
                slug="john-jane",
                bride_name="Jane Wilson",
                groom_name="John Anderson",
                wedding_date=date(2025, 11, 15),
                venue_name="Rose Garden",
                venue_address="1 Garden Way",
            ),
            "other-couple": Tenant(
                slug="other-couple",
                bride_name="Ann",
                groom_name="Ben",
                wedding_date=date(2026, 5, 1),
                venue_name="Hall",
                venue_address="2 Main St",
            ),
            "retired": Tenant(
                slug="retired",
                bride_name="Old",
                groom_name="Couple",
                wedding_date=date(2020, 1, 1),
                venue_name="Gone",
                venue_address="Nowhere",
                is_active=False,
            ),
        }
        db.add_all(rows.values())
        db.commit()
        return {slug: row.id for slug, row in rows.items()}

@pytest.fixture
def store(session_factory):
    return SqlRecordStore(session_factory)

def make_record(**overrides):
    values = {
        "name": "Alice",
        "relationship": "Friend",
        "attendance": "yes",
        "message": "",
        "submitted_at": "2025-10-28T00:00:00Z",
    }
    values.update(overrides)
    return GuestRecord(**values)

def test_init_db_is_idempotent(engine, session_factory):
    """Test running initialization again keeps a single default tenant"""
    init_db(engine)
    init_db(engine)

    with session_factory() as db:
        assert db.query(Tenant).filter(Tenant.slug == "default").count() == 1

def test_registry_resolves_slug_to_integer_key(session_factory, tenants):
    """Test lookups return the surrogate id and activity flag"""
    registry = SqlTenantRegistry(session_factory)

    found = registry.lookup("john-jane")
    assert found.found and found.is_active
    assert found.key == tenants["john-jane"]
    assert found.config.groom_name == "John Anderson"

    inactive = registry.lookup("retired")
    assert inactive.found and not inactive.is_active

    assert not registry.lookup("nobody").found

def test_registry_lists_active_slugs(session_factory, tenants):
    """Test inactive tenants are not listed"""
    slugs = SqlTenantRegistry(session_factory).list_active()
    assert slugs == ["default", "john-jane", "other-couple"]

def test_validator_with_relational_registry(session_factory, tenants):
    """Test validation resolves to the integer key and rejects inactive tenants"""
    validator = TenantValidator(SqlTenantRegistry(session_factory))

    result = validator.validate("john-jane")
    assert result.valid
    assert result.resolved_id == tenants["john-jane"]
    assert result.tenant_id == "john-jane"

    inactive = validator.validate("retired")
    assert not inactive.valid
    assert "not found or inactive" in inactive.error

def test_config_store_builds_config(session_factory, tenants):
    """Test config rows map onto the tenant configuration model"""
    config = SqlConfigStore(session_factory).get("john-jane")

    assert config.id == "john-jane"
    assert config.wedding_date == date(2025, 11, 15)
    assert config.venue.name == "Rose Garden"
    assert config.theme.primary_color == "#E53E3E"
    assert SqlConfigStore(session_factory).get("retired") is None

def test_append_returns_generated_id(store, tenants):
    """Test append is a single insert with a database-assigned id"""
    tenant_id = tenants["john-jane"]
    assert store.next_id(tenant_id) is None

    first = store.append(tenant_id, make_record())
    second = store.append(tenant_id, make_record(name="Bob"))

    assert isinstance(first, int)
    assert second > first
    records = store.read_all(tenant_id)
    assert [r.name for r in records] == ["Alice", "Bob"]
    assert records[0].id == first
    assert records[0].attendance == Attendance.YES
    assert records[0].submitted_at == "2025-10-28T00:00:00Z"

def test_read_all_empty_tenant(store, tenants):
    """Test a tenant without guests reads as an empty list"""
    assert store.read_all(tenants["other-couple"]) == []

def test_queries_are_scoped_by_tenant(store, tenants):
    """Test one tenant never sees or mutates another tenant's guests"""
    a, b = tenants["john-jane"], tenants["other-couple"]
    guest_a = store.append(a, make_record(name="Tenant A Guest"))
    store.append(b, make_record(name="Tenant B Guest"))

    assert [r.name for r in store.read_all(a)] == ["Tenant A Guest"]
    assert [r.name for r in store.read_all(b)] == ["Tenant B Guest"]
    assert store.find_by_id(b, guest_a) is None

    with pytest.raises(RecordNotFoundError):
        store.update(b, make_record(id=guest_a, name="Hijacked"))
    assert store.find_by_id(a, guest_a).name == "Tenant A Guest"

def test_update_existing_guest(store, tenants):
    """Test update replaces fields of the matching row only"""
    tenant_id = tenants["john-jane"]
    first = store.append(tenant_id, make_record())
    second = store.append(tenant_id, make_record(name="Bob"))

    stored = store.update(tenant_id, make_record(id=first, name="Alicia", attendance="maybe", message="Maybe!"))

    assert stored.name == "Alicia"
    assert stored.attendance == Attendance.MAYBE
    records = store.read_all(tenant_id)
    assert [r.id for r in records] == [first, second]
    assert records[1].name == "Bob"

def test_update_missing_guest_fails(store, tenants):
    """Test updating an unknown id never inserts"""
    tenant_id = tenants["john-jane"]
    store.append(tenant_id, make_record())

    with pytest.raises(RecordNotFoundError):
        store.update(tenant_id, make_record(id=9999))
    with pytest.raises(RecordNotFoundError):
        store.update(tenant_id, make_record(id="not-a-number"))
    assert len(store.read_all(tenant_id)) == 1

def test_append_validates_before_insert(store, tenants):
    """Test incomplete records are rejected without touching the table"""
    tenant_id = tenants["john-jane"]
    with pytest.raises(MissingRequiredFieldsError):
        store.append(tenant_id, make_record(name=""))
    with pytest.raises(MissingRequiredFieldsError):
        store.append(tenant_id, make_record(submitted_at="yesterday"))
    assert store.read_all(tenant_id) == []

def test_non_integer_tenant_key_is_rejected(store):
    """Test slugs cannot be passed where the surrogate id is expected"""
    with pytest.raises(TenantFormatError):
        store.read_all("john-jane")

def test_attendance_check_constraint(session_factory, tenants):
    """Test the database rejects attendance values outside the enumeration"""
    with session_factory() as db:
        db.add(Guest(tenant_id=tenants["john-jane"], name="X", relationship_label="Y", attendance="perhaps"))
        with pytest.raises(IntegrityError):
            db.commit()

def test_attendance_counts(store, tenants):
    """Test grouped attendance counts per tenant"""
    tenant_id = tenants["john-jane"]
    store.append(tenant_id, make_record())
    store.append(tenant_id, make_record(attendance="no"))
    store.append(tenant_id, make_record(attendance="yes"))
    store.append(tenants["other-couple"], make_record(attendance="maybe"))

    assert store.attendance_counts(tenant_id) == {"yes": 2, "no": 1, "maybe": 0}

def test_tenant_stats_through_backend(session_factory, tenants):
    """Test stats resolve the slug before counting"""
    backend = build_sql_backend(session_factory)
    backend.record_store.append(tenants["john-jane"], make_record())

    stats = TenantService.get_tenant_stats(backend, "john-jane")
    assert stats.total == 1
    assert stats.yes == 1
    assert TenantService.get_tenant_stats(backend, "retired") is None

def test_database_failures_surface_as_storage_errors(engine, session_factory, tenants):
    """Test a missing table is reported as a storage error"""
    store = SqlRecordStore(session_factory)
    Guest.__table__.drop(bind=engine)

    with pytest.raises(StorageError):
        store.read_all(tenants["john-jane"])
