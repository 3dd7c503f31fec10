"""PDC domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, field_validator


class PDCItem(BaseModel):
    """Inventory line paid by a check"""

    product_id: str
    quantity: float
    unit_cost: float
    total_capital: Optional[float] = None

    @field_validator("quantity")
    @classmethod
    def validate_quantity(cls, v):
        if v <= 0:
            raise ValueError("Quantity must be greater than 0")
        return v


class PDCCreate(BaseModel):
    """Schema for creating a post-dated check"""

    checkNumber: Optional[str] = None
    checkDate: date
    supplier: str
    totalAmount: float
    itemCount: Optional[int] = None
    payee: str
    amountInWords: str
    items: list[PDCItem] = []
    notes: Optional[str] = None

    @field_validator("totalAmount")
    @classmethod
    def validate_amount(cls, v):
        if v < 0:
            raise ValueError("Total amount cannot be negative")
        return v

    @field_validator("supplier", "payee", "amountInWords")
    @classmethod
    def validate_required(cls, v):
        if not v.strip():
            raise ValueError("Field is required")
        return v.strip()


class PDCStatusUpdate(BaseModel):
    status: str
    issuedAt: Optional[datetime] = None
    cancelledAt: Optional[datetime] = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        if v not in ("issued", "cancelled"):
            raise ValueError("Status must be 'issued' or 'cancelled'")
        return v


class PDCItemDetail(BaseModel):
    product_id: str
    quantity: float
    unit_cost: float
    total_capital: Optional[float] = None
    name: str
    category: str
    unit: str
    description: str = ""
    currentQuantity: float = 0
    currentUnitCost: float = 0
    salePrice: float = 0
    location: str = ""
    reorderPoint: float = 0
    totalCapital: float = 0
    totalValue: float = 0


class PDCResponse(BaseModel):
    """Schema for PDC response"""

    pdc_id: str
    checkNumber: str
    checkDate: date
    supplier: str
    totalAmount: float
    itemCount: int
    payee: str
    amountInWords: str
    items: list[dict]
    status: str
    notes: Optional[str] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None
    issuedAt: Optional[datetime] = None
    cancelledAt: Optional[datetime] = None
    itemDetails: Optional[list[PDCItemDetail]] = None


class PDCSearchResponse(BaseModel):
    pdcs: list[PDCResponse]
    total: int
    page: int
    limit: int


class PDCStats(BaseModel):
    total: int = 0
    pending: int = 0
    issued: int = 0
    cancelled: int = 0
    totalAmount: float = 0
    pendingAmount: float = 0
    issuedAmount: float = 0
    cancelledAmount: float = 0


class AutoIssueResponse(BaseModel):
    success: bool
    issuedCount: int
