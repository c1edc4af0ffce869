# =====================================
# securetrack/customers.py
# =====================================
import logging
import random
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from .constants import EQUIPMENT_CATALOG, DEFAULT_SERVICE_PAYMENT_METHOD, TYPES_WITH_DESCRIPTION
from .database import commit_or_rollback
from .exceptions import ValidationError, NotFoundError
from .models import (
    Customer, Service, Equipment, Note,
    ServiceStatus, ServiceType, EquipmentStatus, PaymentStatus, SYSTEM_NOTE_MARKER,
)
from .scheduler import today, add_one_year

logger = logging.getLogger(__name__)

EQUIPMENT_FIELDS = ("name", "brand", "model", "installation_date", "warranty_until", "status", "is_leased")


def generate_account_number() -> str:
    return f"ACC-{1000 + random.randint(0, 8999)}"


def compose_address(street: str, city: Optional[str] = None, state: Optional[str] = None) -> str:
    """Adresse complète "rue, ville - UF" quand ville ou UF sont connus"""
    if not (city or state):
        return street or ""
    address = street or ""
    if city:
        address += f", {city}"
    if state:
        address += f" - {state}"
    return address


def get_customer(db: Session, customer_id: int) -> Customer:
    customer = db.get(Customer, customer_id)
    if customer is None:
        raise NotFoundError(f"Cliente {customer_id} não encontrado", customer_id)
    return customer


def list_customers(db: Session):
    return db.query(Customer).order_by(Customer.id).all()


def _find(collection, child_id: int, label: str):
    for child in collection:
        if child.id == child_id:
            return child
    raise NotFoundError(f"{label} {child_id} não encontrado", child_id)


def _user_note(text: str) -> Note:
    return Note(text=text, created_at=today())


# -------------------------------------------------------------------
# Fiche client
# -------------------------------------------------------------------

def create_customer(db: Session, name: str, phone: str = "", email: str = "", address: str = "",
                    city: Optional[str] = None, state: Optional[str] = None,
                    account_number: Optional[str] = None, note: Optional[str] = None) -> Customer:
    """Crée un client "em dia" sans service ni équipement"""
    if not (name or "").strip():
        raise ValidationError("O nome do cliente é obrigatório.")

    customer = Customer(
        account_number=account_number or generate_account_number(),
        name=name.strip(),
        phone=phone or "",
        email=email or "",
        address=compose_address(address, city, state),
        payment_status=PaymentStatus.UP_TO_DATE,
        created_at=today(),
    )
    if note and note.strip():
        customer.notes.insert(0, _user_note(note))

    db.add(customer)
    commit_or_rollback(db)
    db.refresh(customer)
    logger.info(f"Cliente {customer.account_number} criado: {customer.name}")
    return customer


def update_customer(db: Session, customer_id: int, name: Optional[str] = None, phone: Optional[str] = None,
                    email: Optional[str] = None, address: Optional[str] = None,
                    city: Optional[str] = None, state: Optional[str] = None,
                    account_number: Optional[str] = None, note: Optional[str] = None) -> Customer:
    """Édition du profil. Une note différente de la plus récente est ajoutée en tête."""
    customer = get_customer(db, customer_id)
    if name is not None and not name.strip():
        raise ValidationError("O nome do cliente é obrigatório.")

    if name is not None:
        customer.name = name.strip()
    if phone is not None:
        customer.phone = phone
    if email is not None:
        customer.email = email
    if account_number:
        customer.account_number = account_number
    if address is not None or city or state:
        customer.address = compose_address(address if address is not None else customer.address, city, state)

    latest = customer.notes[0].text if customer.notes else None
    if note and note.strip() and note != latest:
        customer.notes.insert(0, _user_note(note))

    commit_or_rollback(db)
    logger.info(f"Cliente {customer.account_number} atualizado")
    return customer


def change_payment_status(db: Session, customer_id: int, status: PaymentStatus) -> Optional[Note]:
    """Change le statut financier et trace le changement dans une note système.

    Aucun effet si le statut demandé est déjà le statut courant.
    """
    customer = get_customer(db, customer_id)
    previous = customer.payment_status
    if status == previous:
        logger.info(f"Cliente {customer.account_number}: status financeiro inalterado ({status.value})")
        return None

    system_note = Note(
        text=f'{SYSTEM_NOTE_MARKER} Status financeiro alterado de "{previous.value}" para "{status.value}".',
        created_at=today(),
    )
    customer.payment_status = status
    customer.notes.insert(0, system_note)
    commit_or_rollback(db)

    logger.info(f"Cliente {customer.account_number}: {previous.value} -> {status.value}")
    return system_note


# -------------------------------------------------------------------
# Notes
# -------------------------------------------------------------------

def add_note(db: Session, customer_id: int, text: str) -> Note:
    if not (text or "").strip():
        raise ValidationError("A nota não pode estar vazia.")
    customer = get_customer(db, customer_id)
    note = _user_note(text)
    customer.notes.insert(0, note)
    commit_or_rollback(db)
    return note


def delete_note(db: Session, customer_id: int, note_id: int):
    customer = get_customer(db, customer_id)
    note = _find(customer.notes, note_id, "Nota")
    if note.is_system:
        raise ValidationError("Notas do sistema não podem ser excluídas.", note_id)
    customer.notes.remove(note)
    commit_or_rollback(db)
    logger.info(f"Nota {note_id} excluída do cliente {customer.account_number}")


# -------------------------------------------------------------------
# Services
# -------------------------------------------------------------------

def add_service(db: Session, customer_id: int, type: ServiceType, price=0.0,
                payment_method: str = DEFAULT_SERVICE_PAYMENT_METHOD,
                start_date: Optional[date] = None, end_date: Optional[date] = None,
                renewal_date: Optional[date] = None, description: Optional[str] = None,
                contract_notes: Optional[str] = None) -> Service:
    """Nouveau service, toujours en attente d'autorisation"""
    if type in TYPES_WITH_DESCRIPTION and not (description or "").strip():
        raise ValidationError(f"Descreva os detalhes técnicos da {type.value.lower()}.")
    customer = get_customer(db, customer_id)

    service = Service(
        type=type,
        status=ServiceStatus.AWAITING_APPROVAL,
        # Comodato : équipement prêté, pas de prix
        price=0.0 if type == ServiceType.LEASE else float(price or 0.0),
        payment_method=payment_method or DEFAULT_SERVICE_PAYMENT_METHOD,
        start_date=start_date or today(),
        end_date=end_date,
        renewal_date=renewal_date,
        description=description,
        contract_notes=contract_notes,
        pending_deletion=False,
    )
    customer.services.insert(0, service)
    commit_or_rollback(db)
    logger.info(f"Serviço {service.type.value} solicitado para {customer.account_number}")
    return service


def set_service_status(db: Session, customer_id: int, service_id: int, status: ServiceStatus) -> Service:
    customer = get_customer(db, customer_id)
    service = _find(customer.services, service_id, "Serviço")
    previous = service.status
    service.status = status
    commit_or_rollback(db)
    logger.info(f"Serviço {service_id}: {previous.value} -> {status.value}")
    return service


def approve_service(db: Session, customer_id: int, service_id: int) -> Service:
    return set_service_status(db, customer_id, service_id, ServiceStatus.ACTIVE)


def request_service_deletion(db: Session, customer_id: int, service_id: int) -> Service:
    """Première étape de la suppression : marque le service"""
    customer = get_customer(db, customer_id)
    service = _find(customer.services, service_id, "Serviço")
    service.pending_deletion = True
    commit_or_rollback(db)
    return service


def cancel_service_deletion(db: Session, customer_id: int, service_id: int) -> Service:
    customer = get_customer(db, customer_id)
    service = _find(customer.services, service_id, "Serviço")
    service.pending_deletion = False
    commit_or_rollback(db)
    return service


def confirm_service_deletion(db: Session, customer_id: int, service_id: int):
    """Suppression définitive ; aucune note ni événement n'est créé"""
    customer = get_customer(db, customer_id)
    service = _find(customer.services, service_id, "Serviço")
    if not service.pending_deletion:
        raise ValidationError("Solicite a exclusão antes de confirmá-la.", service_id)
    customer.services.remove(service)
    commit_or_rollback(db)
    logger.info(f"Serviço {service_id} removido do cliente {customer.account_number}")


# -------------------------------------------------------------------
# Équipements
# -------------------------------------------------------------------

def add_equipment(db: Session, customer_id: int, name: str, brand: str = "", model: str = "",
                  installation_date: Optional[date] = None, warranty_until: Optional[date] = None,
                  status: EquipmentStatus = EquipmentStatus.OPERATIONAL, is_leased: bool = False) -> Equipment:
    if not (name or "").strip():
        raise ValidationError("O nome do equipamento é obrigatório.")
    customer = get_customer(db, customer_id)

    installed = installation_date or today()
    equipment = Equipment(
        name=name,
        brand=brand or "",
        model=model or "",
        installation_date=installed,
        warranty_until=warranty_until or add_one_year(today()),
        status=status or EquipmentStatus.OPERATIONAL,
        is_leased=bool(is_leased),
    )
    customer.equipments.append(equipment)
    commit_or_rollback(db)
    logger.info(f"Equipamento {equipment.name} adicionado ao cliente {customer.account_number}")
    return equipment


def add_catalog_equipment(db: Session, customer_id: int, catalog_index: int, **overrides) -> Equipment:
    try:
        entry = EQUIPMENT_CATALOG[catalog_index]
    except (IndexError, TypeError):
        raise NotFoundError(f"Item de catálogo {catalog_index} inexistente")
    return add_equipment(
        db, customer_id,
        name=entry["name"], brand=entry["brand"], model=entry["model"],
        **overrides
    )


def update_equipment(db: Session, customer_id: int, equipment_id: int, **changes) -> Equipment:
    """Remplace les champs fournis du formulaire"""
    customer = get_customer(db, customer_id)
    equipment = _find(customer.equipments, equipment_id, "Equipamento")
    if "name" in changes and not (changes["name"] or "").strip():
        raise ValidationError("O nome do equipamento é obrigatório.")
    for field in EQUIPMENT_FIELDS:
        if field in changes and changes[field] is not None:
            setattr(equipment, field, changes[field])
    commit_or_rollback(db)
    return equipment


def delete_equipment(db: Session, customer_id: int, equipment_id: int):
    customer = get_customer(db, customer_id)
    equipment = _find(customer.equipments, equipment_id, "Equipamento")
    customer.equipments.remove(equipment)
    commit_or_rollback(db)
    logger.info(f"Equipamento {equipment_id} removido do cliente {customer.account_number}")
