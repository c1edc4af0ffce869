# =====================================
# securetrack/schemas.py
# =====================================
from datetime import date, datetime
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .models import (
    ServiceStatus, ServiceType, EquipmentStatus, PaymentStatus, BudgetStatus,
    EventType, EventSeverity,
)

# Saisie libre : une valeur illisible est ramenée à 0 par le calcul
Number = Union[int, float, str]


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# ----- Entrées -----

class CustomerIn(BaseModel):
    name: str
    phone: str = ""
    email: str = ""
    address: str = ""
    city: Optional[str] = None
    state: Optional[str] = None
    account_number: Optional[str] = None
    note: Optional[str] = None


class CustomerUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    account_number: Optional[str] = None
    note: Optional[str] = None


class PaymentStatusIn(BaseModel):
    status: PaymentStatus


class NoteIn(BaseModel):
    text: str


class ServiceIn(BaseModel):
    type: ServiceType
    price: float = 0.0
    payment_method: str = "Boleto"
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    renewal_date: Optional[date] = None
    description: Optional[str] = None
    contract_notes: Optional[str] = None


class ServiceStatusIn(BaseModel):
    status: ServiceStatus


class EquipmentIn(BaseModel):
    name: str = ""
    brand: str = ""
    model: str = ""
    installation_date: Optional[date] = None
    warranty_until: Optional[date] = None
    status: EquipmentStatus = EquipmentStatus.OPERATIONAL
    is_leased: bool = False
    catalog_index: Optional[int] = None


class EquipmentUpdate(BaseModel):
    name: Optional[str] = None
    brand: Optional[str] = None
    model: Optional[str] = None
    installation_date: Optional[date] = None
    warranty_until: Optional[date] = None
    status: Optional[EquipmentStatus] = None
    is_leased: Optional[bool] = None


class BudgetItemIn(BaseModel):
    description: str = ""
    quantity: Number = 1
    unit_price: Number = 0


class BudgetIn(BaseModel):
    customer_name: str = ""
    customer_email: str = ""
    customer_id: Optional[int] = None
    items: List[BudgetItemIn] = Field(default_factory=list)
    discount: Number = 0
    payment_terms: Optional[str] = None
    valid_until: Optional[date] = None
    status: BudgetStatus = BudgetStatus.OPEN
    notes: Optional[str] = None
    account_number: Optional[str] = None


class BudgetUpdate(BaseModel):
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    customer_id: Optional[int] = None
    items: Optional[List[BudgetItemIn]] = None
    discount: Optional[Number] = None
    payment_terms: Optional[str] = None
    valid_until: Optional[date] = None
    status: Optional[BudgetStatus] = None
    notes: Optional[str] = None


class BudgetStatusIn(BaseModel):
    status: BudgetStatus


class EventIn(BaseModel):
    type: EventType
    description: str
    user: str
    status: EventSeverity = EventSeverity.INFO
    details: Optional[str] = None
    target_id: Optional[str] = None


# ----- Sorties -----

class NoteOut(ORMModel):
    id: int
    text: str
    created_at: date
    is_system: bool


class ServiceOut(ORMModel):
    id: int
    type: ServiceType
    status: ServiceStatus
    price: float
    payment_method: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    renewal_date: Optional[date] = None
    description: Optional[str] = None
    contract_notes: Optional[str] = None
    pending_deletion: bool = False


class EquipmentOut(ORMModel):
    id: int
    name: str
    brand: Optional[str] = None
    model: Optional[str] = None
    installation_date: Optional[date] = None
    warranty_until: Optional[date] = None
    status: EquipmentStatus
    is_leased: bool


class CustomerOut(ORMModel):
    id: int
    account_number: Optional[str] = None
    name: str
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    payment_status: PaymentStatus
    created_at: Optional[date] = None
    services: List[ServiceOut] = []
    equipments: List[EquipmentOut] = []
    notes: List[NoteOut] = []


class BudgetItemOut(ORMModel):
    id: int
    description: Optional[str] = None
    quantity: int
    unit_price: float
    total: float


class BudgetOut(ORMModel):
    id: int
    account_number: Optional[str] = None
    customer_id: Optional[int] = None
    customer_name: str
    customer_email: str
    items: List[BudgetItemOut] = []
    subtotal: float
    discount: float
    total: float
    payment_terms: Optional[str] = None
    valid_until: Optional[date] = None
    status: BudgetStatus
    created_at: Optional[date] = None
    notes: Optional[str] = None
    display_status: Optional[BudgetStatus] = None
    expiring_soon: bool = False


class EventOut(ORMModel):
    id: int
    timestamp: datetime
    type: EventType
    description: str
    user: str
    status: EventSeverity
    details: Optional[str] = None
    target_id: Optional[str] = None
