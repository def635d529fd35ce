from sqlalchemy import Column, String, Integer, DateTime, ForeignKey
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import relationship
import uuid
from datetime import datetime

from medidispense.infrastructure.database import Base


def gen_uuid():
    return str(uuid.uuid4())


class Inventory(Base):
    """The dispenser's inventory; one row per store"""
    __tablename__ = "inventories"

    id = Column(String(36), primary_key=True, default=gen_uuid)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    slots = relationship(
        "InventorySlot",
        back_populates="inventory",
        order_by="InventorySlot.position",
        collection_class=ordering_list("position", count_from=1),
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def touch(self):
        # slot edits don't dirty the parent row
        self.updated_at = datetime.utcnow()


class InventorySlot(Base):
    """One dispenser position (servo) bound to a medicine"""
    __tablename__ = "inventory_slots"

    id = Column(String(36), primary_key=True, default=gen_uuid)
    inventory_id = Column(String(36), ForeignKey("inventories.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False)
    medicine = Column(String(100), nullable=False)
    stock = Column(Integer, nullable=False, default=0)
    capacity = Column(Integer, nullable=False, default=100)

    inventory = relationship("Inventory", back_populates="slots")

    def clamp(self):
        """Pull capacity up to 1 and stock into [0, capacity]"""
        self.capacity = max(1, int(self.capacity or 0))
        self.stock = min(max(0, int(self.stock or 0)), self.capacity)

    def debit(self, quantity: int) -> int:
        self.stock = max(0, self.stock - quantity)
        return self.stock

    def credit(self, quantity: int) -> int:
        self.stock = min(self.capacity, self.stock + quantity)
        return self.stock
