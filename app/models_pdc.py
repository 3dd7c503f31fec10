"""
Procurement models: post-dated checks issued to suppliers and the inventory
items they pay for.
"""

import uuid

from sqlalchemy import JSON, Column, Date, DateTime, Float, Integer, String, Text
from sqlalchemy.sql import func

from .database import Base


def generate_public_id():
    """UUID4 string used as the PDC primary key"""
    return str(uuid.uuid4())


class PostDatedCheck(Base):
    """
    Post-dated check (PDC) payable to a supplier on check_date.

    Status workflow: pending → issued (automatically once check_date arrives)
                     pending | issued → cancelled (soft delete)
    """

    __tablename__ = "post_dated_checks"

    STATUS_PENDING = "pending"
    STATUS_ISSUED = "issued"
    STATUS_CANCELLED = "cancelled"

    id = Column(String(36), primary_key=True, default=generate_public_id)
    check_number = Column(String(100), unique=True, nullable=False, index=True)
    check_date = Column(Date, nullable=False, index=True)
    supplier = Column(String(255), nullable=False, index=True)
    total_amount = Column(Float, nullable=False)
    item_count = Column(Integer, nullable=False, default=0)
    payee = Column(String(255), nullable=False)
    amount_in_words = Column(String(500), nullable=False)
    items = Column(JSON, nullable=False, default=list)  # [{product_id, quantity, unit_cost, total_capital}]
    status = Column(String(20), default=STATUS_PENDING, nullable=False, index=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
    issued_at = Column(DateTime, nullable=True)
    cancelled_at = Column(DateTime, nullable=True)


class InventoryItem(Base):
    """Inventory record referenced by PDC line items (read-only from the PDC side)"""

    __tablename__ = "inventory_items"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(String(64), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    category = Column(String(100), nullable=False)
    quantity = Column(Float, nullable=False, default=0)
    unit = Column(String(50), nullable=False)
    description = Column(Text, nullable=True)
    supplier = Column(String(255), nullable=True)
    reorder_point = Column(Float, nullable=False, default=0)
    location = Column(String(255), nullable=True)
    unit_cost = Column(Float, nullable=False, default=0)
    sale_price = Column(Float, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    @property
    def total_capital(self) -> float:
        return (self.quantity or 0) * (self.unit_cost or 0)

    @property
    def total_value(self) -> float:
        return (self.quantity or 0) * (self.sale_price or 0)
