# =====================================
# securetrack/models.py
# =====================================
import enum

from sqlalchemy import Column, Integer, String, Date, DateTime, Text, Float, Boolean, ForeignKey, event
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import declarative_base, relationship

from .exceptions import ValidationError
from .scheduler import now, today

Base = declarative_base()

SYSTEM_NOTE_MARKER = "[SISTEMA]"


class ServiceStatus(str, enum.Enum):
    ACTIVE = "Ativo"
    PENDING = "Pendente"
    FINISHED = "Finalizado"
    OVERDUE = "Em Atraso"
    AWAITING_APPROVAL = "Aguardando Autorização"


class ServiceType(str, enum.Enum):
    MONITORING = "Monitoramento"
    MAINTENANCE = "Manutenção"
    SALES = "Venda"
    LEASE = "Comodato"
    INSTALLATION = "Instalação"
    REPAIR = "Reparo Técnico"


class EquipmentStatus(str, enum.Enum):
    OPERATIONAL = "Operacional"
    NEEDS_MAINTENANCE = "Manutenção Necessária"
    REPLACED = "Substituído"


class PaymentStatus(str, enum.Enum):
    UP_TO_DATE = "Em dia"
    PENDING = "Pendente"
    OVERDUE = "Em atraso"


class BudgetStatus(str, enum.Enum):
    OPEN = "Em Aberto"
    ACCEPTED = "Aceito"
    REJECTED = "Rejeitado"
    EXPIRED = "Expirado"  # affichage uniquement, jamais stocké


class EventType(str, enum.Enum):
    STATUS_CHANGE = "Alteração de Status"
    CUSTOMER_INTERACTION = "Interação com Cliente"
    DATA_MODIFICATION = "Alteração de Dados"
    EQUIPMENT_MAINTENANCE = "Manutenção de Equipamento"
    SYSTEM = "Sistema"
    SECURITY_ALERT = "Alerta de Segurança"


class EventSeverity(str, enum.Enum):
    SUCCESS = "Sucesso"
    WARNING = "Alerta"
    CRITICAL = "Crítico"
    INFO = "Informativo"


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    account_number = Column(String, index=True)  # pas d'unicité imposée
    name = Column(String, nullable=False)
    address = Column(String, default="")
    phone = Column(String, default="")
    email = Column(String, default="")
    payment_status = Column(SQLEnum(PaymentStatus), default=PaymentStatus.UP_TO_DATE, nullable=False)
    created_at = Column(Date, default=today)

    services = relationship(
        "Service", back_populates="customer",
        order_by="Service.id.desc()", cascade="all, delete-orphan"
    )
    equipments = relationship(
        "Equipment", back_populates="customer",
        order_by="Equipment.id", cascade="all, delete-orphan"
    )
    notes = relationship(
        "Note", back_populates="customer",
        order_by="Note.id.desc()", cascade="all, delete-orphan"
    )


class Service(Base):
    __tablename__ = "services"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    type = Column(SQLEnum(ServiceType), nullable=False)
    status = Column(SQLEnum(ServiceStatus), default=ServiceStatus.AWAITING_APPROVAL, nullable=False)
    price = Column(Float, default=0.0)
    payment_method = Column(String, default="Boleto")
    start_date = Column(Date, default=today)
    end_date = Column(Date)
    renewal_date = Column(Date)
    description = Column(Text)
    contract_notes = Column(Text)
    pending_deletion = Column(Boolean, default=False)

    customer = relationship("Customer", back_populates="services")


class Equipment(Base):
    __tablename__ = "equipments"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    brand = Column(String, default="")
    model = Column(String, default="")
    installation_date = Column(Date, default=today)
    warranty_until = Column(Date)
    status = Column(SQLEnum(EquipmentStatus), default=EquipmentStatus.OPERATIONAL, nullable=False)
    is_leased = Column(Boolean, default=False)

    customer = relationship("Customer", back_populates="equipments")


class Note(Base):
    __tablename__ = "notes"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    text = Column(Text, nullable=False)
    created_at = Column(Date, default=today)

    customer = relationship("Customer", back_populates="notes")

    @property
    def is_system(self) -> bool:
        return SYSTEM_NOTE_MARKER in (self.text or "")


class Budget(Base):
    __tablename__ = "budgets"

    id = Column(Integer, primary_key=True, index=True)
    account_number = Column(String, index=True)
    # Référence faible : le client peut ne pas exister (prospect)
    customer_id = Column(Integer, index=True)
    customer_name = Column(String, nullable=False)
    customer_email = Column(String, nullable=False)
    subtotal = Column(Float, default=0.0)
    discount = Column(Float, default=0.0)
    total = Column(Float, default=0.0)
    payment_terms = Column(String)
    valid_until = Column(Date)
    status = Column(SQLEnum(BudgetStatus), default=BudgetStatus.OPEN, nullable=False)
    created_at = Column(Date, default=today)
    notes = Column(Text)

    items = relationship(
        "BudgetItem", back_populates="budget",
        order_by="BudgetItem.id", cascade="all, delete-orphan"
    )


class BudgetItem(Base):
    __tablename__ = "budget_items"

    id = Column(Integer, primary_key=True, index=True)
    budget_id = Column(Integer, ForeignKey("budgets.id"), nullable=False, index=True)
    description = Column(String, default="")
    quantity = Column(Integer, default=1)
    unit_price = Column(Float, default=0.0)
    total = Column(Float, default=0.0)

    budget = relationship("Budget", back_populates="items")


class AppEvent(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    timestamp = Column(DateTime, default=now, index=True)
    type = Column(SQLEnum(EventType), nullable=False)
    description = Column(Text, nullable=False)
    user = Column(String, nullable=False)
    status = Column(SQLEnum(EventSeverity), default=EventSeverity.INFO, nullable=False)
    details = Column(Text)
    target_id = Column(String)


@event.listens_for(AppEvent, "before_update")
def _refuse_event_update(mapper, connection, target):
    raise ValidationError("Les événements du journal ne peuvent pas être modifiés")


@event.listens_for(AppEvent, "before_delete")
def _refuse_event_delete(mapper, connection, target):
    raise ValidationError("Les événements du journal ne peuvent pas être supprimés")
