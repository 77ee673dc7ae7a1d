from datetime import datetime, timezone
from pathlib import Path

import pytest

from collection_geo.config import settings
from collection_geo.data import customers_repository
from collection_geo.data.customers_repository import (
    GPS_NEIGHBORHOOD_LABEL,
    customer_from_row,
    get_customers_by_ids,
    load_customers,
    merge_customer_locations,
    set_active_customer_file,
)
from collection_geo.models.domain import Customer, CustomerLocation


@pytest.fixture(autouse=True)
def isolate_customer_sources(monkeypatch: pytest.MonkeyPatch):
    original_file = settings.customer_file
    monkeypatch.setattr(customers_repository, "get_supabase_client", lambda: None)
    customers_repository.load_customers_from_file.cache_clear()
    yield
    settings.customer_file = original_file
    customers_repository.load_customers_from_file.cache_clear()


def _write_csv(path: Path) -> Path:
    path.write_text(
        "id,name,email,status,total_debt,neighborhood,city,latitude,longitude\n"
        "1,Ana,ana@example.com,active,\"1,250.00\",Boa Viagem,Recife,,\n"
        "2,Bruno,bruno@example.com,BLOCKED,0,,Olinda,-8.01,-34.85\n"
        ",Missing Id,,ACTIVE,0,,,,\n",
        encoding="utf-8",
    )
    return path


def test_customer_from_row_accepts_camel_case_debt():
    customer = customer_from_row({"id": 7, "name": " Carla ", "status": "blocked", "totalDebt": 80})
    assert customer.id == "7"
    assert customer.name == "Carla"
    assert customer.status == "BLOCKED"
    assert customer.total_debt == 80.0
    assert customer.latitude is None


def test_load_customers_reads_csv_when_database_missing(tmp_path: Path):
    set_active_customer_file(_write_csv(tmp_path / "customers.csv"))

    customers = load_customers()

    assert [customer.id for customer in customers] == ["1", "2"]
    assert customers[0].total_debt == 1250.0
    assert customers[0].status == "ACTIVE"
    assert customers[0].latitude is None
    assert customers[1].latitude == -8.01


def test_load_customers_degrades_to_empty_when_file_missing(tmp_path: Path):
    set_active_customer_file(tmp_path / "absent.csv")
    assert load_customers() == tuple()


def test_load_customers_degrades_to_empty_when_database_fails(monkeypatch: pytest.MonkeyPatch):
    def boom():
        raise ConnectionError("supabase unreachable")

    monkeypatch.setattr(customers_repository, "_load_customers_from_database", boom)
    assert load_customers() == tuple()


def test_merge_overrides_coordinates_with_latest_location():
    customers = [
        Customer(id="1", name="Ana", status="ACTIVE", total_debt=0, email="Ana@Example.com", neighborhood="Pina"),
        Customer(id="2", name="Bruno", status="ACTIVE", total_debt=0, email="bruno@example.com"),
        Customer(id="3", name="Caio", status="ACTIVE", total_debt=0, email=None),
    ]
    newer = datetime(2026, 2, 1, tzinfo=timezone.utc)
    locations = [
        CustomerLocation(customer_email="ana@example.com", latitude=-8.1, longitude=-34.9, city="Recife", updated_at=newer),
        CustomerLocation(customer_email="ana@example.com", latitude=-9.0, longitude=-35.0),
        CustomerLocation(customer_email="bruno@example.com", latitude=-8.2, longitude=-34.8, address="Rua A, 10"),
    ]

    merged = merge_customer_locations(customers, locations)

    assert (merged[0].latitude, merged[0].longitude) == (-8.1, -34.9)
    assert merged[0].neighborhood == "Pina"
    assert merged[0].has_realtime_location is True
    assert merged[0].last_location_update == newer
    assert merged[1].neighborhood == "Rua A, 10"
    assert merged[2] is customers[2]
    assert customers[0].latitude is None


def test_merge_prefers_captured_address_over_stored_neighborhood():
    customers = [
        Customer(id="1", name="Ana", status="ACTIVE", total_debt=0, email="ana@example.com", neighborhood="Pina"),
    ]
    location = CustomerLocation(
        customer_email="ana@example.com",
        latitude=-8.08,
        longitude=-34.88,
        address="Av. Herculano Bandeira, 200",
    )

    merged = merge_customer_locations(customers, [location])

    assert merged[0].neighborhood == "Av. Herculano Bandeira, 200"
    assert merged[0].address == "Av. Herculano Bandeira, 200"


def test_merge_labels_gps_only_customers():
    customers = [Customer(id="1", name="Ana", status="ACTIVE", total_debt=0, email="ana@example.com")]
    merged = merge_customer_locations(
        customers, [CustomerLocation(customer_email="ana@example.com", latitude=-8.1, longitude=-34.9)]
    )
    assert merged[0].neighborhood == GPS_NEIGHBORHOOD_LABEL


def test_get_customers_by_ids_keeps_request_order(monkeypatch: pytest.MonkeyPatch):
    directory = [
        Customer(id="1", name="Ana", status="ACTIVE", total_debt=0),
        Customer(id="2", name="Bruno", status="ACTIVE", total_debt=0),
    ]
    monkeypatch.setattr(customers_repository, "load_customers_with_locations", lambda: directory)

    found, missing = get_customers_by_ids(["2", " 1", "2", "9"])

    assert [customer.id for customer in found] == ["2", "1"]
    assert missing == ["9"]
