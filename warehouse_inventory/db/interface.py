# warehouse_inventory/db/interface.py
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from warehouse_inventory.models import Product, Warehouse, StorageZone, InventoryRecord

class InventoryStore(ABC):
    """Persistence boundary used by the inventory engine.

    Implementations raise NotFoundError, ConflictError or PersistenceError
    from warehouse_inventory.exceptions; backend-specific errors must not
    leak. Returned entities are snapshots that stay readable after the call.
    """

    @abstractmethod
    def create_product(self, name: str, sku: str, price) -> int:
        """Insert a product and return its id. Duplicate SKU raises ConflictError."""
        pass

    @abstractmethod
    def get_product(self, product_id: int) -> Product:
        """Get a product by id."""
        pass

    @abstractmethod
    def update_product(self, product_id: int, fields: Dict[str, Any]) -> Product:
        """Apply the given name/sku/price values to a product."""
        pass

    @abstractmethod
    def delete_product(self, product_id: int) -> None:
        """Delete a product together with its inventory records."""
        pass

    @abstractmethod
    def get_warehouse(self, warehouse_id: int) -> Warehouse:
        """Get a warehouse by id."""
        pass

    @abstractmethod
    def list_warehouses(self) -> List[Warehouse]:
        """List all warehouses ordered by id."""
        pass

    @abstractmethod
    def create_zone(self, name: str, capacity: int, warehouse_id: int) -> int:
        """Insert a storage zone and return its id."""
        pass

    @abstractmethod
    def get_zone(self, zone_id: int) -> StorageZone:
        """Get a storage zone by id."""
        pass

    @abstractmethod
    def list_zones(self, warehouse_id: int) -> List[StorageZone]:
        """List the zones of a warehouse, each with its inventory records and their products."""
        pass

    @abstractmethod
    def list_inventory(self, warehouse_id: int) -> List[InventoryRecord]:
        """List the inventory records of a warehouse with product, warehouse and zone loaded."""
        pass

    @abstractmethod
    def list_product_inventory(self, product_id: int) -> List[InventoryRecord]:
        """List every inventory record of a product."""
        pass

    @abstractmethod
    def find_inventory(self, product_id: int, warehouse_id: int, zone_id: Optional[int] = None) -> InventoryRecord:
        """Get the record for an exact business key. zone_id None matches zone-less records only."""
        pass

    @abstractmethod
    def upsert_inventory(self, product_id: int, warehouse_id: int, zone_id: Optional[int], quantity: int) -> int:
        """Create the record for a key, or overwrite its quantity. Returns the inventory id."""
        pass

    @abstractmethod
    def set_inventory_quantity(self, inventory_id: int, quantity: int) -> None:
        """Overwrite the quantity of an existing record."""
        pass

    @abstractmethod
    def transaction(self):
        """Context manager grouping calls into one unit of work.

        Commits when the block exits normally and rolls back every write made
        inside it when the block raises. Nested calls join the outer unit.
        """
        pass

    @abstractmethod
    def seed(self) -> None:
        """Insert the fixed seed warehouses and zones that are missing."""
        pass
