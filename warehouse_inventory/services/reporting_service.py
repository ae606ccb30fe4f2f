# warehouse_inventory/services/reporting_service.py
from datetime import datetime
from decimal import Decimal
from typing import Dict
import logging

from tabulate import tabulate

from warehouse_inventory.db.interface import InventoryStore
from warehouse_inventory.exceptions import InventoryError, PersistenceError

logger = logging.getLogger(__name__)

NO_ZONE = '-'

class ReportingService:
    """Service for generating stock and zone reports."""

    def __init__(self, store: InventoryStore):
        """Initialize the reporting service.

        Args:
            store: Persistence collaborator
        """
        self.store = store

    def _read(self, action, func, *args):
        try:
            return func(*args)
        except InventoryError:
            raise
        except Exception as e:
            logger.error(f"Store failure while {action}: {e}")
            raise PersistenceError(f"Store failure while {action}: {e}") from e

    def stock_report_data(self, warehouse_id: int) -> Dict:
        """Generate stock report data for one warehouse.

        Args:
            warehouse_id: Warehouse ID

        Returns:
            Dictionary with report data
        """
        warehouse = self._read('reading warehouse', self.store.get_warehouse, warehouse_id)
        records = self._read('listing inventory', self.store.list_inventory, warehouse_id)

        report_data = []
        summary = {
            'record_count': 0,
            'total_quantity': 0,
            'total_value': Decimal('0.00'),
            'empty_records': 0
        }

        for record in records:
            price = record.product.price
            line_value = price * record.quantity

            report_data.append({
                'inventory_id': record.id,
                'product_id': record.product_id,
                'product_name': record.product.name,
                'sku': record.product.sku,
                'zone_id': record.zone_id,
                'zone_name': record.zone.name if record.zone is not None else NO_ZONE,
                'quantity': record.quantity,
                'unit_price': price,
                'line_value': line_value
            })

            summary['record_count'] += 1
            summary['total_quantity'] += record.quantity
            summary['total_value'] += line_value
            if record.quantity == 0:
                summary['empty_records'] += 1

        # Zone-less rows sort before zoned rows of the same product
        report_data.sort(key=lambda row: (row['product_name'].lower(), row['zone_id'] is not None, row['zone_name']))

        return {
            'report_name': "Stock Report",
            'report_date': datetime.now().isoformat(timespec='seconds'),
            'warehouse_id': warehouse.id,
            'warehouse_location': warehouse.location,
            'summary': summary,
            'data': report_data
        }

    def zone_report_data(self, warehouse_id: int) -> Dict:
        """Generate zone occupancy data for one warehouse.

        Capacity is compared with the stored quantity for information only.

        Args:
            warehouse_id: Warehouse ID

        Returns:
            Dictionary with report data
        """
        warehouse = self._read('reading warehouse', self.store.get_warehouse, warehouse_id)
        zones = self._read('listing storage zones', self.store.list_zones, warehouse_id)
        records = self._read('listing inventory', self.store.list_inventory, warehouse_id)

        report_data = []
        for zone in zones:
            occupied = sum(record.quantity for record in zone.inventory_records)
            utilization = round(occupied * 100.0 / zone.capacity, 1) if zone.capacity else 0.0
            report_data.append({
                'zone_id': zone.id,
                'zone_name': zone.name,
                'capacity': zone.capacity,
                'occupied': occupied,
                'free': zone.capacity - occupied,
                'utilization_pct': utilization,
                'over_capacity': occupied > zone.capacity,
                'products': [
                    {'product_name': record.product.name, 'sku': record.product.sku, 'quantity': record.quantity}
                    for record in zone.inventory_records
                ]
            })

        zoneless_quantity = sum(record.quantity for record in records if record.zone_id is None)

        return {
            'report_name': "Zone Report",
            'report_date': datetime.now().isoformat(timespec='seconds'),
            'warehouse_id': warehouse.id,
            'warehouse_location': warehouse.location,
            'summary': {
                'zone_count': len(report_data),
                'total_capacity': sum(row['capacity'] for row in report_data),
                'total_occupied': sum(row['occupied'] for row in report_data),
                'zones_over_capacity': sum(1 for row in report_data if row['over_capacity']),
                'zoneless_quantity': zoneless_quantity
            },
            'data': report_data
        }

    def generate_stock_report(self, warehouse_id: int) -> str:
        """Render the stock report as text."""
        report = self.stock_report_data(warehouse_id)
        summary = report['summary']

        lines = [f"{report['report_name']}: warehouse {report['warehouse_id']} ({report['warehouse_location']})"]
        if not report['data']:
            lines.append("No stock recorded.")
            return "\n".join(lines)

        table_data = [
            [row['product_name'], row['sku'], row['zone_name'], row['quantity'], row['unit_price'], row['line_value']]
            for row in report['data']
        ]
        lines.append(tabulate(
            table_data,
            headers=['Product', 'SKU', 'Zone', 'Quantity', 'Unit Price', 'Value'],
            floatfmt='.2f'
        ))
        lines.append(
            f"Records: {summary['record_count']}  "
            f"Total quantity: {summary['total_quantity']}  "
            f"Total value: {summary['total_value']:.2f}"
        )
        return "\n".join(lines)

    def generate_zone_report(self, warehouse_id: int) -> str:
        """Render the zone report as text."""
        report = self.zone_report_data(warehouse_id)
        summary = report['summary']

        lines = [f"{report['report_name']}: warehouse {report['warehouse_id']} ({report['warehouse_location']})"]
        if not report['data']:
            lines.append("No storage zones.")
        else:
            table_data = [
                [
                    row['zone_id'], row['zone_name'], row['capacity'], row['occupied'], row['free'],
                    f"{row['utilization_pct']:.1f}%", 'OVER' if row['over_capacity'] else ''
                ]
                for row in report['data']
            ]
            lines.append(tabulate(
                table_data,
                headers=['Zone', 'Name', 'Capacity', 'Occupied', 'Free', 'Used', '']
            ))

        lines.append(f"Warehouse-level stock (no zone): {summary['zoneless_quantity']}")
        return "\n".join(lines)
