"""
Tests for file-backed tenant configuration and registry
"""

import json
import os

import pytest

from app.services.config_store import FileConfigStore
from app.services.registry import FileTenantRegistry
from app.utils.errors import (
    ConfigurationError,
    ConfigurationFormatError,
    MissingConfigFieldsError,
    StorageError,
    TenantFormatError,
)

SAMPLE_CONFIG = {
    "id": "test-tenant",
    "brideName": "Jane Smith",
    "groomName": "John Doe",
    "weddingDate": "2024-12-25",
    "venue": {
        "name": "Test Venue",
        "address": "123 Test St, Test City",
        "mapLink": "test-map-link",
    },
    "theme": {
        "primaryColor": "#D69E2E",
        "secondaryColor": "#2D3748",
    },
    "isActive": True,
    "createdAt": "2023-01-01T00:00:00Z",
    "updatedAt": "2023-01-01T00:00:00Z",
}

def write_config(data_dir, tenant_id, payload):
    tenant_dir = os.path.join(data_dir, tenant_id)
    os.makedirs(tenant_dir, exist_ok=True)
    with open(os.path.join(tenant_dir, "config.json"), "w", encoding="utf-8") as f:
        if isinstance(payload, str):
            f.write(payload)
        else:
            json.dump(payload, f, indent=2)

@pytest.fixture
def data_dir(tmp_path):
    return str(tmp_path / "data")

@pytest.fixture
def store(data_dir):
    return FileConfigStore(data_dir)

def test_get_reads_full_config(store, data_dir):
    """Test reading a complete configuration"""
    write_config(data_dir, "test-tenant", SAMPLE_CONFIG)

    config = store.get("test-tenant")

    assert config is not None
    assert config.bride_name == "Jane Smith"
    assert config.venue.map_link == "test-map-link"
    assert config.theme.primary_color == "#D69E2E"
    assert config.to_public() == SAMPLE_CONFIG

def test_get_missing_tenant_returns_none(store):
    """Test an absent config is not-found, not an error"""
    assert store.get("non-existent-tenant") is None

def test_minimal_config_is_accepted(store, data_dir):
    """Test only the four mandatory fields are required"""
    write_config(data_dir, "john-jane", {
        "id": "john-jane",
        "brideName": "Jane Wilson",
        "groomName": "John Anderson",
        "weddingDate": "2025-11-15",
        "isActive": True,
    })

    config = store.get("john-jane")
    assert config.venue is None
    assert config.theme is None
    assert config.is_active

def test_malformed_json_is_format_error(store, data_dir):
    """Test undecodable JSON raises the format error"""
    write_config(data_dir, "test-tenant", "invalid json")

    with pytest.raises(ConfigurationFormatError) as exc:
        store.get("test-tenant")
    assert "invalid configuration format" in exc.value.message
    assert "Invalid JSON" in exc.value.message

def test_non_object_json_is_format_error(store, data_dir):
    """Test a JSON array is not a configuration"""
    write_config(data_dir, "test-tenant", "[1, 2, 3]")

    with pytest.raises(ConfigurationFormatError):
        store.get("test-tenant")

def test_missing_required_fields(store, data_dir):
    """Test configs lacking mandatory fields raise a distinct error"""
    write_config(data_dir, "test-tenant", {"id": "test-tenant"})

    with pytest.raises(MissingConfigFieldsError) as exc:
        store.get("test-tenant")
    assert "missing required fields" in exc.value.message
    assert exc.value.missing == ["brideName", "groomName", "weddingDate"]

def test_blank_required_field_counts_as_missing(store, data_dir):
    """Test whitespace-only names are rejected"""
    write_config(data_dir, "test-tenant", {**SAMPLE_CONFIG, "groomName": "   "})

    with pytest.raises(MissingConfigFieldsError):
        store.get("test-tenant")

def test_identifier_must_match_location(store, data_dir):
    """Test a config copied into another tenant's directory is rejected"""
    write_config(data_dir, "other-tenant", SAMPLE_CONFIG)

    with pytest.raises(MissingConfigFieldsError):
        store.get("other-tenant")

def test_invalid_field_types_are_configuration_errors(store, data_dir):
    """Test schema violations beyond required fields"""
    write_config(data_dir, "test-tenant", {**SAMPLE_CONFIG, "weddingDate": "next summer"})

    with pytest.raises(ConfigurationError) as exc:
        store.get("test-tenant")
    assert not isinstance(exc.value, MissingConfigFieldsError)

def test_traversal_identifiers_never_touch_the_filesystem(store):
    """Test identifiers are checked before any path is built"""
    with pytest.raises(TenantFormatError):
        store.get("invalid/../tenant")
    with pytest.raises(TenantFormatError):
        store.get("..")

def test_unreadable_config_is_storage_error(store, data_dir):
    """Test I/O failures are not reported as not-found"""
    # a directory where the file should be makes open() fail with an OSError
    os.makedirs(os.path.join(data_dir, "test-tenant", "config.json"))

    with pytest.raises(StorageError):
        store.get("test-tenant")

def test_registry_lookup_and_activity(store, data_dir):
    """Test the file registry reports existence and activity"""
    write_config(data_dir, "active-tenant", {**SAMPLE_CONFIG, "id": "active-tenant"})
    write_config(data_dir, "inactive-tenant", {**SAMPLE_CONFIG, "id": "inactive-tenant", "isActive": False})
    registry = FileTenantRegistry(store)

    active = registry.lookup("active-tenant")
    assert active.found and active.is_active
    assert active.key == "active-tenant"

    inactive = registry.lookup("inactive-tenant")
    assert inactive.found and not inactive.is_active

    missing = registry.lookup("missing-tenant")
    assert not missing.found

def test_registry_lists_only_active_tenants(store, data_dir):
    """Test listing skips inactive tenants and stray directories"""
    write_config(data_dir, "active-tenant", {**SAMPLE_CONFIG, "id": "active-tenant"})
    write_config(data_dir, "inactive-tenant", {**SAMPLE_CONFIG, "id": "inactive-tenant", "isActive": False})
    os.makedirs(os.path.join(data_dir, "no-config"))

    tenants = FileTenantRegistry(store).list_active()

    assert tenants == ["active-tenant"]

def test_registry_list_without_data_dir(store):
    """Test listing before any tenant exists"""
    assert FileTenantRegistry(store).list_active() == []

def test_undecodable_config_is_format_error(store, data_dir):
    """Test invalid UTF-8 is reported as a configuration defect"""
    os.makedirs(os.path.join(data_dir, "test-tenant"))
    with open(os.path.join(data_dir, "test-tenant", "config.json"), "wb") as f:
        f.write(b'{"id": "test-tenant", "brideName": "\xff\xfe"}')

    with pytest.raises(ConfigurationFormatError) as exc:
        store.get("test-tenant")
    assert "Invalid encoding" in exc.value.message

def test_inactive_tenant_is_not_served(store, data_dir):
    """Test get hides inactive tenants while load still reads them"""
    write_config(data_dir, "test-tenant", {**SAMPLE_CONFIG, "isActive": False})

    assert store.get("test-tenant") is None
    assert store.load("test-tenant").is_active is False

def test_registry_list_skips_broken_configuration(store, data_dir, caplog):
    """Test one malformed tenant does not hide the others"""
    write_config(data_dir, "good-one", {**SAMPLE_CONFIG, "id": "good-one"})
    write_config(data_dir, "bad-one", "{not json")

    with caplog.at_level("ERROR"):
        tenants = FileTenantRegistry(store).list_active()

    assert tenants == ["good-one"]
    assert "bad-one" in caplog.text
