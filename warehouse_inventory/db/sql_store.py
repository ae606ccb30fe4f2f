# warehouse_inventory/db/sql_store.py
import logging
import threading
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import joinedload, selectinload

from warehouse_inventory.db.connection import db
from warehouse_inventory.db.interface import InventoryStore
from warehouse_inventory.db.seed import SEED_WAREHOUSES, SEED_ZONES
from warehouse_inventory.exceptions import ConflictError, NotFoundError, PersistenceError
from warehouse_inventory.models import Product, Warehouse, StorageZone, InventoryRecord

logger = logging.getLogger(__name__)

PRODUCT_FIELDS = ('name', 'sku', 'price')

class SqlInventoryStore(InventoryStore):
    """InventoryStore backed by a SQLAlchemy session factory.

    Outside a transaction every call runs in its own session and commits
    on return. Inside transaction() all calls share one session that is
    committed or rolled back when the block exits. The open transaction
    belongs to the thread that started it; other threads sharing the store
    keep their own sessions.
    """

    def __init__(self, session_factory=None):
        """Initialize the store.

        Args:
            session_factory: Callable returning new sessions. Defaults to
                the global database connection.
        """
        if session_factory is None:
            session_factory = db.session_factory
        self._session_factory = session_factory
        self._local = threading.local()

    @property
    def _session(self):
        """Session of the transaction open in the calling thread, if any."""
        return getattr(self._local, 'session', None)

    @_session.setter
    def _session(self, session):
        self._local.session = session

    @staticmethod
    def _translate(error: SQLAlchemyError, action: str, conflict_message: Optional[str] = None):
        unique_violation = isinstance(error, IntegrityError) and 'unique' in str(error.orig).lower()
        if unique_violation and conflict_message:
            return ConflictError(conflict_message, details={'error': str(error.orig)})
        return PersistenceError(f"Database error while {action}: {error}")

    @contextmanager
    def _scope(self, action: str, conflict_message: Optional[str] = None):
        """Yield the session for one store call, translating database errors."""
        if self._session is not None:
            try:
                yield self._session
            except SQLAlchemyError as e:
                logger.error(f"Database error while {action}: {e}")
                raise self._translate(e, action, conflict_message) from e
            return

        session = self._session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Database error while {action}: {e}")
            raise self._translate(e, action, conflict_message) from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    @contextmanager
    def transaction(self):
        if self._session is not None:
            yield self
            return

        session = self._session_factory()
        self._session = session
        try:
            yield self
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Transaction failed and was rolled back: {e}")
            raise PersistenceError(f"Transaction failed: {e}") from e
        except Exception:
            session.rollback()
            logger.info("Transaction rolled back")
            raise
        finally:
            self._session = None
            session.close()

    # Products

    def create_product(self, name: str, sku: str, price) -> int:
        with self._scope('creating product', f"SKU '{sku}' already exists") as session:
            product = Product(name=name, sku=sku, price=price)
            session.add(product)
            session.flush()
            return product.id

    def get_product(self, product_id: int) -> Product:
        with self._scope('reading product') as session:
            product = session.get(Product, product_id)
            if product is None:
                raise NotFoundError(f"Product {product_id} not found")
            return product

    def update_product(self, product_id: int, fields: Dict[str, Any]) -> Product:
        conflict = f"SKU '{fields.get('sku')}' already exists"
        with self._scope('updating product', conflict) as session:
            product = session.get(Product, product_id)
            if product is None:
                raise NotFoundError(f"Product {product_id} not found")

            for key in PRODUCT_FIELDS:
                if fields.get(key) is not None:
                    setattr(product, key, fields[key])

            session.flush()
            return product

    def delete_product(self, product_id: int) -> None:
        with self._scope('deleting product') as session:
            product = session.get(Product, product_id)
            if product is None:
                raise NotFoundError(f"Product {product_id} not found")

            records = session.query(InventoryRecord).filter(InventoryRecord.product_id == product_id).all()
            for record in records:
                session.delete(record)
            session.flush()

            session.delete(product)
            session.flush()

    # Warehouses and zones

    def get_warehouse(self, warehouse_id: int) -> Warehouse:
        with self._scope('reading warehouse') as session:
            warehouse = session.get(Warehouse, warehouse_id)
            if warehouse is None:
                raise NotFoundError(f"Warehouse {warehouse_id} not found")
            return warehouse

    def list_warehouses(self) -> List[Warehouse]:
        with self._scope('listing warehouses') as session:
            return session.query(Warehouse).order_by(Warehouse.id).all()

    def create_zone(self, name: str, capacity: int, warehouse_id: int) -> int:
        # A foreign key failure here is a write failure, not a uniqueness conflict
        with self._scope('creating storage zone') as session:
            zone = StorageZone(name=name, capacity=capacity, warehouse_id=warehouse_id)
            session.add(zone)
            session.flush()
            return zone.id

    def get_zone(self, zone_id: int) -> StorageZone:
        with self._scope('reading storage zone') as session:
            zone = session.get(StorageZone, zone_id)
            if zone is None:
                raise NotFoundError(f"Storage zone {zone_id} not found")
            return zone

    def list_zones(self, warehouse_id: int) -> List[StorageZone]:
        with self._scope('listing storage zones') as session:
            return session.query(StorageZone).options(
                selectinload(StorageZone.inventory_records).joinedload(InventoryRecord.product)
            ).filter(
                StorageZone.warehouse_id == warehouse_id
            ).order_by(StorageZone.id).all()

    # Inventory

    def _inventory_query(self, session):
        return session.query(InventoryRecord).options(
            joinedload(InventoryRecord.product),
            joinedload(InventoryRecord.warehouse),
            joinedload(InventoryRecord.zone)
        )

    def list_inventory(self, warehouse_id: int) -> List[InventoryRecord]:
        with self._scope('listing inventory') as session:
            return self._inventory_query(session).filter(
                InventoryRecord.warehouse_id == warehouse_id
            ).order_by(InventoryRecord.id).all()

    def list_product_inventory(self, product_id: int) -> List[InventoryRecord]:
        with self._scope('listing product inventory') as session:
            return self._inventory_query(session).filter(
                InventoryRecord.product_id == product_id
            ).order_by(InventoryRecord.id).all()

    def _find(self, session, product_id, warehouse_id, zone_id):
        query = self._inventory_query(session).filter(
            InventoryRecord.product_id == product_id,
            InventoryRecord.warehouse_id == warehouse_id
        )
        if zone_id is None:
            query = query.filter(InventoryRecord.zone_id.is_(None))
        else:
            query = query.filter(InventoryRecord.zone_id == zone_id)
        return query.first()

    def find_inventory(self, product_id: int, warehouse_id: int, zone_id: Optional[int] = None) -> InventoryRecord:
        with self._scope('reading inventory') as session:
            record = self._find(session, product_id, warehouse_id, zone_id)
            if record is None:
                raise NotFoundError(
                    f"No inventory for product {product_id} in warehouse {warehouse_id}, zone {zone_id}"
                )
            return record

    def upsert_inventory(self, product_id: int, warehouse_id: int, zone_id: Optional[int], quantity: int) -> int:
        # Referential failures and races on the unique key are opaque here
        with self._scope('writing inventory') as session:
            record = self._find(session, product_id, warehouse_id, zone_id)
            if record is None:
                record = InventoryRecord(
                    product_id=product_id,
                    warehouse_id=warehouse_id,
                    zone_id=zone_id,
                    quantity=quantity
                )
                session.add(record)
            else:
                record.quantity = quantity

            session.flush()
            return record.id

    def set_inventory_quantity(self, inventory_id: int, quantity: int) -> None:
        with self._scope('updating inventory quantity') as session:
            record = session.get(InventoryRecord, inventory_id)
            if record is None:
                raise NotFoundError(f"Inventory record {inventory_id} not found")
            record.quantity = quantity
            session.flush()

    def seed(self) -> None:
        with self._scope('seeding reference data') as session:
            for row in SEED_WAREHOUSES:
                if session.get(Warehouse, row['id']) is None:
                    session.add(Warehouse(**row))
            session.flush()

            for row in SEED_ZONES:
                if session.get(StorageZone, row['id']) is None:
                    session.add(StorageZone(**row))
            session.flush()
        logger.info("Seed warehouses and storage zones are present")
