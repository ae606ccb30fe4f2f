# warehouse_inventory/services/inventory_service.py
import logging
from contextlib import contextmanager, nullcontext
from typing import Dict, List, Optional

from warehouse_inventory.config import config
from warehouse_inventory.db.interface import InventoryStore
from warehouse_inventory.exceptions import (
    InventoryError, ValidationError, ConflictError, NotFoundError,
    InsufficientStockError, PersistenceError
)
from warehouse_inventory.logging_setup import logger as app_logging
from warehouse_inventory.models import Product, Warehouse, StorageZone, InventoryRecord
from warehouse_inventory.utils.validation import (
    PRICE_QUANTUM, to_price, validate_product_fields, validate_zone_fields,
    validate_quantity, raise_for_errors
)

logger = logging.getLogger(__name__)

# Reconciliation entry statuses
CREATED = 'created'
UPDATED = 'updated'
UNCHANGED = 'unchanged'
FAILED = 'failed'


class InventoryService:
    """Stock operations over an InventoryStore.

    The service keeps no state between calls; everything it reads or writes
    goes through the store.
    """

    def __init__(
        self,
        store: InventoryStore,
        enforce_zone_warehouse: Optional[bool] = None,
        atomic_transfers: Optional[bool] = None
    ):
        """Initialize the inventory service.

        Args:
            store: Persistence collaborator
            enforce_zone_warehouse: Reject zones that do not belong to the
                stated warehouse. Defaults to configuration.
            atomic_transfers: Run both sides of a transfer in one store
                transaction. Defaults to configuration.
        """
        rules = config.inventory_config
        self.store = store
        self.enforce_zone_warehouse = (
            rules['enforce_zone_warehouse'] if enforce_zone_warehouse is None else enforce_zone_warehouse
        )
        self.atomic_transfers = rules['atomic_transfers'] if atomic_transfers is None else atomic_transfers

    @contextmanager
    def _store_call(self, action: str):
        """Convert anything but our own errors raised by the store into PersistenceError."""
        try:
            yield
        except InventoryError:
            raise
        except Exception as e:
            logger.error(f"Store failure while {action}: {e}")
            raise PersistenceError(f"Store failure while {action}: {e}") from e

    def _find_or_none(self, product_id: int, warehouse_id: int, zone_id: Optional[int]) -> Optional[InventoryRecord]:
        try:
            return self.store.find_inventory(product_id, warehouse_id, zone_id)
        except NotFoundError:
            return None

    def _check_zone(self, warehouse_id: int, zone_id: Optional[int]) -> None:
        if zone_id is None or not self.enforce_zone_warehouse:
            return

        try:
            zone = self.store.get_zone(zone_id)
        except NotFoundError:
            raise ValidationError(f"Storage zone {zone_id} does not exist", details={'zone_id': zone_id})

        if zone.warehouse_id != warehouse_id:
            logger.warning(f"Zone {zone_id} belongs to warehouse {zone.warehouse_id}, not {warehouse_id}")
            raise ValidationError(
                f"Storage zone {zone_id} does not belong to warehouse {warehouse_id}",
                details={'zone_id': zone_id, 'warehouse_id': warehouse_id}
            )

    # Products

    def add_product(self, name: str, sku: str, price) -> int:
        """Create a product.

        Args:
            name: Product name
            sku: Stock keeping unit, unique across products
            price: Unit price, must be positive

        Returns:
            New product ID
        """
        raise_for_errors(validate_product_fields(name, sku, price), 'product')
        name, sku, price = name.strip(), sku.strip(), to_price(price).quantize(PRICE_QUANTUM)

        logger.info(f"Adding product: name={name}, sku={sku}, price={price}")
        with self._store_call('adding product'):
            try:
                product_id = self.store.create_product(name, sku, price)
            except ConflictError:
                logger.warning(f"Duplicate SKU rejected: {sku}")
                raise

        logger.info(f"Product added: product_id={product_id}")
        return product_id

    def get_product(self, product_id: int) -> Product:
        with self._store_call('reading product'):
            return self.store.get_product(product_id)

    def update_product(
        self,
        product_id: int,
        name: Optional[str] = None,
        sku: Optional[str] = None,
        price=None
    ) -> Product:
        """Change the supplied fields of a product.

        Args:
            product_id: Product ID
            name: New name
            sku: New SKU
            price: New unit price

        Returns:
            Updated product
        """
        if name is None and sku is None and price is None:
            raise ValidationError("Nothing to update: supply name, sku or price")
        raise_for_errors(validate_product_fields(name, sku, price, partial=True), 'product update')

        fields = {}
        if name is not None:
            fields['name'] = name.strip()
        if sku is not None:
            fields['sku'] = sku.strip()
        if price is not None:
            fields['price'] = to_price(price).quantize(PRICE_QUANTUM)

        logger.info(f"Updating product {product_id}: {fields}")
        with self._store_call('updating product'):
            product = self.store.update_product(product_id, fields)

        logger.info(f"Product updated: product_id={product_id}")
        return product

    def delete_product(self, product_id: int) -> None:
        """Delete a product that holds no stock.

        Zero-quantity inventory records of the product go with it, so no
        record is ever left pointing at a missing product.
        """
        logger.info(f"Deleting product {product_id}")
        with self._store_call('deleting product'):
            with self.store.transaction():
                self.store.get_product(product_id)
                stocked = [record for record in self.store.list_product_inventory(product_id) if record.quantity > 0]
                if stocked:
                    total = sum(record.quantity for record in stocked)
                    logger.warning(f"Product {product_id} still has {total} units in stock; deletion refused")
                    raise ConflictError(
                        f"Product {product_id} still has {total} units in stock",
                        details={'inventory_ids': [record.id for record in stocked]}
                    )
                self.store.delete_product(product_id)

        logger.info(f"Product deleted: product_id={product_id}")

    # Warehouses and zones

    def list_warehouses(self) -> List[Warehouse]:
        with self._store_call('listing warehouses'):
            return self.store.list_warehouses()

    def add_zone(self, name: str, capacity: int, warehouse_id: int) -> int:
        """Create a storage zone in a warehouse.

        Args:
            name: Zone name
            capacity: Informational capacity, must be positive
            warehouse_id: Owning warehouse

        Returns:
            New zone ID
        """
        raise_for_errors(validate_zone_fields(name, capacity), 'storage zone')
        name = name.strip()

        logger.info(f"Adding zone: name={name}, capacity={capacity}, warehouse_id={warehouse_id}")
        with self._store_call('adding storage zone'):
            self.store.get_warehouse(warehouse_id)
            zone_id = self.store.create_zone(name, capacity, warehouse_id)

        logger.info(f"Zone added: zone_id={zone_id}")
        return zone_id

    def list_zones(self, warehouse_id: int) -> List[StorageZone]:
        with self._store_call('listing storage zones'):
            self.store.get_warehouse(warehouse_id)
            return self.store.list_zones(warehouse_id)

    # Stock

    def list_inventory(self, warehouse_id: int) -> List[InventoryRecord]:
        with self._store_call('listing inventory'):
            self.store.get_warehouse(warehouse_id)
            return self.store.list_inventory(warehouse_id)

    def get_inventory(self, product_id: int, warehouse_id: int, zone_id: Optional[int] = None) -> InventoryRecord:
        with self._store_call('reading inventory'):
            return self.store.find_inventory(product_id, warehouse_id, zone_id)

    def add_stock(self, product_id: int, warehouse_id: int, zone_id: Optional[int], quantity: int) -> InventoryRecord:
        """Receive stock of a product at a location.

        Args:
            product_id: Product ID
            warehouse_id: Receiving warehouse
            zone_id: Receiving zone, or None for warehouse-level stock
            quantity: Units received, must be positive

        Returns:
            The inventory record after the receipt
        """
        raise_for_errors(validate_quantity(quantity), 'stock receipt')

        logger.info(
            f"Adding stock: product_id={product_id}, warehouse_id={warehouse_id}, "
            f"zone_id={zone_id}, quantity={quantity}"
        )
        with self._store_call('adding stock'):
            self.store.get_product(product_id)
            self.store.get_warehouse(warehouse_id)
            self._check_zone(warehouse_id, zone_id)

            with self.store.transaction():
                record = self._find_or_none(product_id, warehouse_id, zone_id)
                if record is None:
                    self.store.upsert_inventory(product_id, warehouse_id, zone_id, quantity)
                else:
                    self.store.set_inventory_quantity(record.id, record.quantity + quantity)
                record = self.store.find_inventory(product_id, warehouse_id, zone_id)

        logger.info(f"Stock added: inventory_id={record.id}, quantity={record.quantity}")
        return record

    def transfer(
        self,
        product_id: int,
        from_warehouse_id: int,
        from_zone_id: Optional[int],
        to_warehouse_id: int,
        to_zone_id: Optional[int],
        quantity: int
    ) -> Dict:
        """Move quantity of a product from one location to another.

        The source is decremented first and the destination incremented (or
        created) second. With atomic transfers both writes share one store
        transaction; otherwise a failure on the destination side leaves the
        source already decremented.

        Args:
            product_id: Product ID
            from_warehouse_id: Source warehouse
            from_zone_id: Source zone, or None for warehouse-level stock
            to_warehouse_id: Destination warehouse
            to_zone_id: Destination zone, or None for warehouse-level stock
            quantity: Units to move, must be positive

        Returns:
            Dictionary with the moved quantity and both resulting records
        """
        raise_for_errors(validate_quantity(quantity), 'transfer')

        logger.info(
            f"Transferring {quantity} of product {product_id} from "
            f"({from_warehouse_id}, {from_zone_id}) to ({to_warehouse_id}, {to_zone_id})"
        )
        scope = self.store.transaction() if self.atomic_transfers else nullcontext()

        with self._store_call('transferring stock'):
            self._check_zone(from_warehouse_id, from_zone_id)
            self._check_zone(to_warehouse_id, to_zone_id)

            with scope:
                source = self._find_or_none(product_id, from_warehouse_id, from_zone_id)
                available = source.quantity if source is not None else 0
                if available < quantity:
                    logger.warning(
                        f"Insufficient stock for product {product_id} at "
                        f"({from_warehouse_id}, {from_zone_id}): available={available}, requested={quantity}"
                    )
                    raise InsufficientStockError(
                        f"Not enough stock of product {product_id}. Available={available} requested={quantity}",
                        details={'available': available, 'requested': quantity}
                    )

                try:
                    self.store.set_inventory_quantity(source.id, source.quantity - quantity)
                except NotFoundError as e:
                    raise PersistenceError(f"Source record vanished during transfer: {e}") from e

                destination = self._find_or_none(product_id, to_warehouse_id, to_zone_id)
                if destination is None:
                    self.store.upsert_inventory(product_id, to_warehouse_id, to_zone_id, quantity)
                else:
                    self.store.set_inventory_quantity(destination.id, destination.quantity + quantity)

                source = self.store.find_inventory(product_id, from_warehouse_id, from_zone_id)
                destination = self.store.find_inventory(product_id, to_warehouse_id, to_zone_id)

        logger.info(
            f"Transfer complete: source quantity={source.quantity}, destination quantity={destination.quantity}"
        )
        return {
            'product_id': product_id,
            'quantity': quantity,
            'from': source.to_dict(),
            'to': destination.to_dict()
        }

    def reconcile(self, warehouse_id: int, counted_quantities: Dict[int, int]) -> Dict:
        """Overwrite warehouse-level quantities with a physical count.

        Each entry is processed on its own; a failing entry is recorded and
        the remaining entries are still applied.

        Args:
            warehouse_id: Counted warehouse
            counted_quantities: Mapping of product ID to counted quantity

        Returns:
            Dictionary with per-status counts and the per-entry outcomes
        """
        if not counted_quantities:
            raise ValidationError("Counted quantities must not be empty")

        with self._store_call('reading warehouse'):
            self.store.get_warehouse(warehouse_id)

        log_info = app_logging.batch_start_log(
            'reconcile', f"warehouse_id={warehouse_id}, entries={len(counted_quantities)}"
        )

        entries = [
            self._reconcile_entry(warehouse_id, product_id, counted)
            for product_id, counted in counted_quantities.items()
        ]

        result = {
            'warehouse_id': warehouse_id,
            'processed': len(entries),
            CREATED: 0,
            UPDATED: 0,
            UNCHANGED: 0,
            FAILED: 0,
            'entries': entries
        }
        for entry in entries:
            result[entry['status']] += 1

        app_logging.batch_end_log(
            log_info,
            success=result[FAILED] == 0,
            result_info={key: result[key] for key in ('processed', CREATED, UPDATED, UNCHANGED, FAILED)}
        )
        return result

    def _reconcile_entry(self, warehouse_id: int, product_id: int, counted: int) -> Dict:
        outcome = {
            'product_id': product_id,
            'status': FAILED,
            'previous_quantity': None,
            'quantity': None,
            'error': None
        }

        try:
            raise_for_errors(validate_quantity(counted, allow_zero=True), f"count for product {product_id}")

            with self._store_call('reconciling inventory'):
                record = self._find_or_none(product_id, warehouse_id, None)
                if record is None:
                    self.store.upsert_inventory(product_id, warehouse_id, None, counted)
                    outcome['status'] = CREATED
                elif record.quantity != counted:
                    outcome['previous_quantity'] = record.quantity
                    self.store.set_inventory_quantity(record.id, counted)
                    outcome['status'] = UPDATED
                else:
                    outcome['previous_quantity'] = record.quantity
                    outcome['status'] = UNCHANGED
            outcome['quantity'] = counted

        except InventoryError as e:
            logger.warning(f"Reconciliation of product {product_id} in warehouse {warehouse_id} failed: {e}")
            outcome['status'] = FAILED
            outcome['error'] = str(e)

        return outcome
