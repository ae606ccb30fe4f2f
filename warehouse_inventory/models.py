# warehouse_inventory/models.py
from sqlalchemy import (
    Column, Integer, String, Numeric, ForeignKey, CheckConstraint, Index, text
)
from sqlalchemy.orm import declarative_base, relationship, validates

from warehouse_inventory.exceptions import ValidationError

Base = declarative_base()

class Product(Base):
    """A stocked good. The SKU is unique across all products."""
    __tablename__ = 'product'

    id = Column(Integer, primary_key=True)
    name = Column(String(200), nullable=False)
    sku = Column(String(64), nullable=False, unique=True)
    price = Column(Numeric(12, 2), nullable=False)

    inventory_records = relationship("InventoryRecord", back_populates="product")

    __table_args__ = (
        CheckConstraint('price > 0', name='ck_product_price_positive'),
    )

    def __repr__(self):
        return f"<Product id={self.id} sku={self.sku!r}>"

class Warehouse(Base):
    __tablename__ = 'warehouse'

    id = Column(Integer, primary_key=True)
    location = Column(String(200), nullable=False)

    zones = relationship("StorageZone", back_populates="warehouse", order_by="StorageZone.id")
    inventory_records = relationship("InventoryRecord", back_populates="warehouse")

    def __repr__(self):
        return f"<Warehouse id={self.id} location={self.location!r}>"

class StorageZone(Base):
    """A sub-location of a warehouse.

    Capacity is informational; nothing compares it with the stored quantity
    except the zone report.
    """
    __tablename__ = 'storage_zone'

    id = Column(Integer, primary_key=True)
    name = Column(String(200), nullable=False)
    capacity = Column(Integer, nullable=False)
    warehouse_id = Column(Integer, ForeignKey('warehouse.id'), nullable=False, index=True)

    warehouse = relationship("Warehouse", back_populates="zones")
    inventory_records = relationship("InventoryRecord", back_populates="zone", order_by="InventoryRecord.id")

    __table_args__ = (
        CheckConstraint('capacity > 0', name='ck_storage_zone_capacity_positive'),
    )

    def __repr__(self):
        return f"<StorageZone id={self.id} name={self.name!r} warehouse_id={self.warehouse_id}>"

class InventoryRecord(Base):
    """Quantity of one product at one location.

    The business key is (product_id, warehouse_id, zone_id). A NULL zone_id
    is warehouse-level stock and counts as its own key value, which an
    ordinary unique index does not guarantee, hence the partial index.
    """
    __tablename__ = 'inventory'

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey('product.id'), nullable=False, index=True)
    warehouse_id = Column(Integer, ForeignKey('warehouse.id'), nullable=False, index=True)
    zone_id = Column(Integer, ForeignKey('storage_zone.id'), nullable=True)
    quantity = Column(Integer, nullable=False, default=0)

    product = relationship("Product", back_populates="inventory_records")
    warehouse = relationship("Warehouse", back_populates="inventory_records")
    zone = relationship("StorageZone", back_populates="inventory_records")

    __table_args__ = (
        CheckConstraint('quantity >= 0', name='ck_inventory_quantity_non_negative'),
        Index('ux_inventory_location', 'product_id', 'warehouse_id', 'zone_id', unique=True),
        Index(
            'ux_inventory_zoneless', 'product_id', 'warehouse_id',
            unique=True,
            sqlite_where=text('zone_id IS NULL'),
            postgresql_where=text('zone_id IS NULL')
        ),
    )

    @validates('quantity')
    def _validate_quantity(self, key, value):
        if value is None or isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ValidationError(f"Inventory quantity must be a non-negative integer, got {value!r}")
        return value

    @property
    def key(self):
        """The (product_id, warehouse_id, zone_id) business key."""
        return (self.product_id, self.warehouse_id, self.zone_id)

    def to_dict(self):
        return {
            'inventory_id': self.id,
            'product_id': self.product_id,
            'warehouse_id': self.warehouse_id,
            'zone_id': self.zone_id,
            'quantity': self.quantity
        }

    def __repr__(self):
        return f"<InventoryRecord id={self.id} key={self.key} quantity={self.quantity}>"
