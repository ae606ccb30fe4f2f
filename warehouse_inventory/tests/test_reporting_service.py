"""
Tests for the stock and zone reports.
"""
from decimal import Decimal

import pytest

from warehouse_inventory.exceptions import NotFoundError
from warehouse_inventory.services.reporting_service import ReportingService


@pytest.fixture
def reporting(store):
    return ReportingService(store)


@pytest.fixture
def stocked(store, product_10):
    """Product 10: 5 loose units, product 9: 30 in the cold room, product 1: 250 on rack A1."""
    store.upsert_inventory(9, 1, 1, 30)
    store.upsert_inventory(1, 1, 2, 250)
    store.upsert_inventory(2, 1, None, 0)
    store.upsert_inventory(3, 2, None, 4)
    return store


def test_stock_report_data(reporting, stocked):
    report = reporting.stock_report_data(1)

    assert report['report_name'] == "Stock Report"
    assert report['warehouse_location'] == "Warehouse A"
    assert [(row['product_name'], row['zone_name'], row['quantity']) for row in report['data']] == [
        ("Product 1", "Rack A1", 250),
        ("Product 10", "-", 5),
        ("Product 2", "-", 0),
        ("Product 9", "Cold Room 1", 30),
    ]

    summary = report['summary']
    assert summary['record_count'] == 4
    assert summary['total_quantity'] == 285
    assert summary['empty_records'] == 1
    # 250 * 11 + 5 * 20 + 30 * 19
    assert summary['total_value'] == Decimal("3420")


def test_stock_report_line_value(reporting, stocked):
    rows = {row['product_id']: row for row in reporting.stock_report_data(1)['data']}

    assert str(rows[10]['unit_price']) == "20.00"
    assert str(rows[10]['line_value']) == "100.00"


def test_stock_report_unknown_warehouse(reporting):
    with pytest.raises(NotFoundError):
        reporting.stock_report_data(9)


def test_generate_stock_report(reporting, stocked):
    text = reporting.generate_stock_report(1)

    assert text.startswith("Stock Report: warehouse 1 (Warehouse A)")
    assert "Unit Price" in text
    assert "Cold Room 1" in text
    assert "Total value: 3420.00" in text


def test_generate_stock_report_empty(reporting):
    text = reporting.generate_stock_report(2)
    assert text.splitlines() == ["Stock Report: warehouse 2 (Warehouse B)", "No stock recorded."]


def test_zone_report_data(reporting, stocked):
    report = reporting.zone_report_data(1)

    cold_room, rack = report['data']
    assert (cold_room['zone_name'], cold_room['occupied'], cold_room['free']) == ("Cold Room 1", 30, 70)
    assert cold_room['utilization_pct'] == 30.0
    assert cold_room['over_capacity'] is False
    assert cold_room['products'] == [{'product_name': "Product 9", 'sku': "SKU-009", 'quantity': 30}]

    # Capacity is not enforced, only reported
    assert rack['occupied'] == 250
    assert rack['free'] == -50
    assert rack['over_capacity'] is True
    assert rack['utilization_pct'] == 125.0

    assert report['summary'] == {
        'zone_count': 2,
        'total_capacity': 300,
        'total_occupied': 280,
        'zones_over_capacity': 1,
        'zoneless_quantity': 5
    }


def test_generate_zone_report(reporting, stocked):
    text = reporting.generate_zone_report(1)

    assert "Rack A1" in text
    assert "125.0%" in text
    assert "OVER" in text
    assert text.splitlines()[-1] == "Warehouse-level stock (no zone): 5"


def test_generate_zone_report_without_zones(reporting, stocked):
    text = reporting.generate_zone_report(2)
    assert text.splitlines()[1:] == ["No storage zones.", "Warehouse-level stock (no zone): 4"]
