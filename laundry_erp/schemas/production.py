"""
Production intake and audit schemas
"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_serializer

from laundry_erp.utils.timezone import iso_8601_utc


class ProductionCreate(BaseModel):
    """Schema for one production step of a nota. Business rules are checked by the service."""
    customer_name: Optional[str] = Field(None, description="Customer name")
    nota_number: Optional[str] = Field(None, description="Receipt (nota) number")
    process: Optional[str] = Field(None, description="cuci, kering, setrika, packing, cuci_sepatu or cuci_satuan")
    weight: Optional[float] = Field(None, description="Kilograms; optional for cuci_satuan and cuci_sepatu")
    qty: Optional[int] = Field(None, description="Item count")
    service_price: Optional[int] = Field(None, description="Required for cuci_satuan")


class ProductionUpdate(BaseModel):
    """Admin correction of a production step; omitted fields keep their value"""
    customer_name: Optional[str] = None
    nota_number: Optional[str] = None
    process: Optional[str] = None
    weight: Optional[float] = None
    qty: Optional[int] = None
    service_price: Optional[int] = None


class ProductionOut(BaseModel):
    id: int
    employee_id: int
    customer_name: str
    nota_number: str
    process: str
    weight: float
    qty: int
    service_price: int
    timestamp: datetime
    verified_status: str = "unverified"
    verified_by: Optional[int] = None
    verified_at: Optional[datetime] = None
    edited_by_admin: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("timestamp", "verified_at", when_used="always")
    @classmethod
    def _ser_datetime(cls, dt: Optional[datetime]) -> Optional[str]:
        return iso_8601_utc(dt)


class ProductionSearchResponse(BaseModel):
    nota_number: str
    items: List[ProductionOut]


class ProductionEditResponse(BaseModel):
    message: str
    changes_count: int
    item: ProductionOut


class ProductionHistoryOut(BaseModel):
    id: int
    production_id: int
    admin_id: int
    admin_name: Optional[str] = None
    field_changed: str
    old_value: Optional[str] = None
    new_value: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("created_at", when_used="always")
    @classmethod
    def _ser_datetime(cls, dt: Optional[datetime]) -> Optional[str]:
        return iso_8601_utc(dt)


class VerifyRequest(BaseModel):
    nota_number: Optional[str] = None


class VerifyResponse(BaseModel):
    message: str
    nota_number: str
    verified_status: str
    count: int
