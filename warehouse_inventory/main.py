import argparse
import logging
import sys

from tabulate import tabulate

from warehouse_inventory.config import config
from warehouse_inventory.db import initialize
from warehouse_inventory.exceptions import InventoryError
from warehouse_inventory.logging_setup import logger
from warehouse_inventory.services.inventory_service import InventoryService
from warehouse_inventory.services.reporting_service import ReportingService

log = logger.app_logger

def zone_arg(value):
    """Parse a zone ID; 0 means no zone."""
    try:
        zone_id = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid zone id: {value!r}")
    if zone_id < 0:
        raise argparse.ArgumentTypeError(f"zone id must not be negative: {value!r}")
    return zone_id or None

def count_arg(value):
    """Parse a PRODUCT=QTY pair of a stock count."""
    product, sep, quantity = value.partition('=')
    try:
        if not sep:
            raise ValueError
        return int(product), int(quantity)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected PRODUCT_ID=QUANTITY, got {value!r}")

def open_store(args):
    """Initialize the database and return a store bound to it."""
    return initialize(args.database_url, drop_existing=getattr(args, 'drop', False))

def init_db(args, store):
    warehouses = InventoryService(store).list_warehouses()
    print(f"Database ready: {config.get_db_url() if args.database_url is None else args.database_url}")
    print(tabulate([[w.id, w.location] for w in warehouses], headers=['Warehouse', 'Location']))
    return 0

def add_product(args, store):
    product_id = InventoryService(store).add_product(args.name, args.sku, args.price)
    print(f"Product added, ID: {product_id}")
    return 0

def update_product(args, store):
    product = InventoryService(store).update_product(args.product_id, name=args.name, sku=args.sku, price=args.price)
    print(f"Product {product.id} updated: {product.name} ({product.sku}), price {product.price}")
    return 0

def delete_product(args, store):
    InventoryService(store).delete_product(args.product_id)
    print(f"Product {args.product_id} deleted")
    return 0

def add_zone(args, store):
    zone_id = InventoryService(store).add_zone(args.name, args.capacity, args.warehouse_id)
    print(f"Zone added, ID: {zone_id}")
    return 0

def add_stock(args, store):
    record = InventoryService(store).add_stock(args.product_id, args.warehouse_id, args.zone, args.quantity)
    print(f"Stock added. Inventory {record.id} now holds {record.quantity}")
    return 0

def transfer(args, store):
    result = InventoryService(store).transfer(
        args.product_id,
        args.from_warehouse_id,
        args.from_zone,
        args.to_warehouse_id,
        args.to_zone,
        args.quantity
    )
    rows = [
        [side, result[key]['warehouse_id'], result[key]['zone_id'] or '-', result[key]['quantity']]
        for side, key in (('From', 'from'), ('To', 'to'))
    ]
    print(f"Moved {result['quantity']} of product {result['product_id']}")
    print(tabulate(rows, headers=['', 'Warehouse', 'Zone', 'Quantity']))
    return 0

def reconcile(args, store):
    result = InventoryService(store).reconcile(args.warehouse_id, dict(args.counts))
    rows = [
        [entry['product_id'], entry['status'], entry['previous_quantity'], entry['quantity'], entry['error'] or '']
        for entry in result['entries']
    ]
    print(tabulate(rows, headers=['Product', 'Status', 'Previous', 'Counted', 'Error']))
    print(
        f"Processed {result['processed']}: {result['created']} created, {result['updated']} updated, "
        f"{result['unchanged']} unchanged, {result['failed']} failed"
    )
    return 0

def stock_report(args, store):
    print(ReportingService(store).generate_stock_report(args.warehouse_id))
    return 0

def zone_report(args, store):
    print(ReportingService(store).generate_zone_report(args.warehouse_id))
    return 0

def build_parser():
    parser = argparse.ArgumentParser(description='Warehouse Inventory System')
    parser.add_argument('--database-url', help='SQLAlchemy database URL (default from config/settings.ini)')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging')

    subparsers = parser.add_subparsers(dest='command', help='Commands')
    subparsers.required = True

    sub = subparsers.add_parser('init-db', help='Create tables and seed warehouses')
    sub.add_argument('--drop', '-d', action='store_true', help='Drop existing tables first')
    sub.set_defaults(handler=init_db)

    sub = subparsers.add_parser('add-product', help='Add a product')
    sub.add_argument('name')
    sub.add_argument('sku')
    sub.add_argument('price')
    sub.set_defaults(handler=add_product)

    sub = subparsers.add_parser('update-product', help='Change product fields')
    sub.add_argument('product_id', type=int)
    sub.add_argument('--name')
    sub.add_argument('--sku')
    sub.add_argument('--price')
    sub.set_defaults(handler=update_product)

    sub = subparsers.add_parser('delete-product', help='Delete a product without stock')
    sub.add_argument('product_id', type=int)
    sub.set_defaults(handler=delete_product)

    sub = subparsers.add_parser('add-zone', help='Add a storage zone')
    sub.add_argument('name')
    sub.add_argument('capacity', type=int)
    sub.add_argument('warehouse_id', type=int)
    sub.set_defaults(handler=add_zone)

    sub = subparsers.add_parser('add-stock', help='Receive stock')
    sub.add_argument('product_id', type=int)
    sub.add_argument('warehouse_id', type=int)
    sub.add_argument('quantity', type=int)
    sub.add_argument('--zone', type=zone_arg, default=None, help='Zone ID (0 or omitted: no zone)')
    sub.set_defaults(handler=add_stock)

    sub = subparsers.add_parser('transfer', help='Move stock between locations')
    sub.add_argument('product_id', type=int)
    sub.add_argument('from_warehouse_id', type=int)
    sub.add_argument('to_warehouse_id', type=int)
    sub.add_argument('quantity', type=int)
    sub.add_argument('--from-zone', type=zone_arg, default=None, help='Source zone ID')
    sub.add_argument('--to-zone', type=zone_arg, default=None, help='Destination zone ID')
    sub.set_defaults(handler=transfer)

    sub = subparsers.add_parser('reconcile', help='Apply a physical count to warehouse-level stock')
    sub.add_argument('warehouse_id', type=int)
    sub.add_argument('counts', type=count_arg, nargs='+', metavar='PRODUCT_ID=QUANTITY')
    sub.set_defaults(handler=reconcile)

    sub = subparsers.add_parser('stock-report', help='Print stock per product and zone')
    sub.add_argument('warehouse_id', type=int)
    sub.set_defaults(handler=stock_report)

    sub = subparsers.add_parser('zone-report', help='Print zone occupancy')
    sub.add_argument('warehouse_id', type=int)
    sub.set_defaults(handler=zone_report)

    return parser

def main(argv=None):
    """Main application entry point."""
    args = build_parser().parse_args(argv)
    logger.configure(logging.DEBUG if args.verbose else None)
    log.debug(f"Command line: {args}")

    try:
        store = open_store(args)
        return args.handler(args, store)
    except InventoryError as e:
        log.error(f"{args.command} failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1

if __name__ == "__main__":
    sys.exit(main())
