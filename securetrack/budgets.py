# =====================================
# securetrack/budgets.py
# =====================================
import logging
import math
import random
from datetime import date, datetime, timedelta
from typing import Iterable, Optional, Union

from sqlalchemy.orm import Session

from .constants import (
    EQUIPMENT_CATALOG, DEFAULT_BUDGET_PAYMENT_TERMS, BUDGET_VALIDITY_DAYS, EXPIRING_SOON_DAYS,
)
from .database import commit_or_rollback
from .exceptions import ValidationError, NotFoundError, ConversionError
from .models import Budget, BudgetItem, BudgetStatus, Customer, Service, ServiceStatus, ServiceType
from .scheduler import now, today, to_local

logger = logging.getLogger(__name__)

CONVERSION_MARKER = "[CONVERTIDO]"


# -------------------------------------------------------------------
# Calculs
# -------------------------------------------------------------------

def parse_quantity(value) -> int:
    """Quantité saisie ; toute valeur illisible vaut 0"""
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return int(value)
    try:
        return int(float(str(value).strip().replace(",", ".")))
    except (TypeError, ValueError):
        return 0


def parse_amount(value) -> float:
    """Montant saisi (accepte la virgule décimale) ; illisible vaut 0"""
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).strip().replace(",", "."))
    except (TypeError, ValueError):
        return 0.0


def recalculate_totals(budget: Budget) -> Budget:
    """subtotal = somme des items, total = max(0, subtotal - remise)"""
    subtotal = sum((item.total or 0.0) for item in budget.items)
    budget.subtotal = subtotal
    budget.total = max(0.0, subtotal - (budget.discount or 0.0))
    return budget


def update_item(budget: Budget, item: BudgetItem, description: Optional[str] = None,
                quantity=None, unit_price=None) -> BudgetItem:
    if description is not None:
        item.description = description
    if quantity is not None:
        item.quantity = parse_quantity(quantity)
    if unit_price is not None:
        item.unit_price = parse_amount(unit_price)
    item.total = (item.quantity or 0) * (item.unit_price or 0.0)
    recalculate_totals(budget)
    return item


def add_item(budget: Budget, description: str = "", quantity=1, unit_price=0) -> BudgetItem:
    item = BudgetItem(description=description, quantity=0, unit_price=0.0, total=0.0)
    budget.items.append(item)
    return update_item(budget, item, quantity=quantity, unit_price=unit_price)


def add_catalog_item(budget: Budget, catalog_index: int) -> BudgetItem:
    """Ajoute un équipement du catalogue au prix de base"""
    try:
        entry = EQUIPMENT_CATALOG[catalog_index]
    except (IndexError, TypeError):
        raise NotFoundError(f"Item de catálogo {catalog_index} inexistente")
    description = f"{entry['name']} {entry['brand']} {entry['model']}"
    return add_item(budget, description=description, quantity=1, unit_price=entry.get("base_price") or 0)


def remove_item(budget: Budget, item: BudgetItem):
    budget.items.remove(item)
    recalculate_totals(budget)


def set_discount(budget: Budget, value) -> Budget:
    budget.discount = parse_amount(value)
    return recalculate_totals(budget)


# -------------------------------------------------------------------
# Statut affiché
# -------------------------------------------------------------------

Reference = Optional[Union[date, datetime]]


def _moment(reference: Reference) -> datetime:
    """Instant de comparaison ; une date seule vaut la fin de ce jour"""
    if reference is None:
        return now()
    return to_local(reference, end_of_day=True)


def days_until_expiry(budget: Budget, reference: Reference = None) -> Optional[int]:
    """Jours restants, arrondis au jour supérieur"""
    if budget.valid_until is None:
        return None
    remaining = to_local(budget.valid_until) - _moment(reference)
    return math.ceil(remaining.total_seconds() / 86400)


def is_expired(budget: Budget, reference: Reference = None) -> bool:
    """La validité prend fin à 00:00 du jour indiqué"""
    if budget.valid_until is None:
        return False
    return to_local(budget.valid_until) < _moment(reference)


def display_status(budget: Budget, reference: Reference = None) -> BudgetStatus:
    """Statut présenté à l'écran. EXPIRED n'est jamais écrit en base."""
    if budget.status == BudgetStatus.OPEN and is_expired(budget, reference):
        return BudgetStatus.EXPIRED
    return budget.status


def is_expiring_soon(budget: Budget, reference: Reference = None) -> bool:
    if budget.status != BudgetStatus.OPEN or is_expired(budget, reference):
        return False
    days = days_until_expiry(budget, reference)
    return days is not None and days <= EXPIRING_SOON_DAYS


# -------------------------------------------------------------------
# Opérations
# -------------------------------------------------------------------

def generate_reference() -> str:
    return f"QT-{5000 + random.randint(0, 998)}"


def get_budget(db: Session, budget_id: int) -> Budget:
    budget = db.get(Budget, budget_id)
    if budget is None:
        raise NotFoundError(f"Orçamento {budget_id} não encontrado", budget_id)
    return budget


def list_budgets(db: Session):
    """Orçamentos, les plus récents en premier"""
    return db.query(Budget).order_by(Budget.id.desc()).all()


def _validate(customer_name: str, customer_email: str, items: Iterable):
    if not (customer_name or "").strip() or not (customer_email or "").strip():
        raise ValidationError("Preencha os dados do cliente.")
    if not list(items):
        raise ValidationError("Adicione pelo menos um item.")


def _resolve_customer(db: Session, customer_id: Optional[int], name: str, email: str):
    """Complète nom et e-mail depuis le client lié quand ils sont vides"""
    if not customer_id:
        return None, name, email
    customer = db.get(Customer, customer_id)
    if customer is None:
        logger.warning(f"Orçamento lié au client {customer_id} inexistant")
        return customer_id, name, email
    return customer.id, (name or customer.name), (email or customer.email)


def _check_settable(status: BudgetStatus):
    if status == BudgetStatus.EXPIRED:
        raise ValidationError("O status Expirado é calculado pela validade e não pode ser definido.")


def _fill_items(budget: Budget, items: Iterable[dict]):
    budget.items = []
    for data in items:
        add_item(
            budget,
            description=data.get("description", ""),
            quantity=data.get("quantity", 1),
            unit_price=data.get("unit_price", 0),
        )


def create_budget(db: Session, customer_name: str = "", customer_email: str = "",
                  items: Iterable[dict] = (), customer_id: Optional[int] = None,
                  discount=0, payment_terms: Optional[str] = None,
                  valid_until: Optional[date] = None, status: BudgetStatus = BudgetStatus.OPEN,
                  notes: Optional[str] = None, account_number: Optional[str] = None) -> Budget:
    """Crée un orçamento et calcule ses totaux"""
    items = list(items)
    customer_id, customer_name, customer_email = _resolve_customer(db, customer_id, customer_name, customer_email)
    _validate(customer_name, customer_email, items)
    _check_settable(status)

    budget = Budget(
        account_number=account_number or generate_reference(),
        customer_id=customer_id,
        customer_name=customer_name,
        customer_email=customer_email,
        payment_terms=payment_terms or DEFAULT_BUDGET_PAYMENT_TERMS,
        valid_until=valid_until or today() + timedelta(days=BUDGET_VALIDITY_DAYS),
        status=status,
        created_at=today(),
        notes=notes,
        discount=0.0,
    )
    _fill_items(budget, items)
    set_discount(budget, discount)

    db.add(budget)
    commit_or_rollback(db)
    db.refresh(budget)
    logger.info(f"Orçamento {budget.account_number} criado - total {budget.total:.2f}")
    return budget


def update_budget(db: Session, budget_id: int, **changes) -> Budget:
    """Met à jour un orçamento ; `items` remplace la liste complète"""
    budget = get_budget(db, budget_id)

    customer_id = changes.get("customer_id", budget.customer_id)
    name = changes.get("customer_name") or budget.customer_name
    email = changes.get("customer_email") or budget.customer_email
    if "customer_id" in changes:
        customer_id, name, email = _resolve_customer(db, customer_id, name, email)
    items = changes.get("items")
    _validate(name, email, items if items is not None else budget.items)
    if "status" in changes:
        _check_settable(changes["status"])

    budget.customer_id = customer_id
    budget.customer_name = name
    budget.customer_email = email
    for field in ("payment_terms", "valid_until", "status", "notes"):
        if field in changes and changes[field] is not None:
            setattr(budget, field, changes[field])
    if items is not None:
        _fill_items(budget, items)
    discount = changes.get("discount")
    set_discount(budget, budget.discount if discount is None else discount)

    commit_or_rollback(db)
    logger.info(f"Orçamento {budget.account_number} atualizado - total {budget.total:.2f}")
    return budget


def set_budget_status(db: Session, budget_id: int, status: BudgetStatus) -> Budget:
    """Changement manuel du statut (EXPIRED refusé)"""
    _check_settable(status)
    budget = get_budget(db, budget_id)
    previous = budget.status
    budget.status = status
    commit_or_rollback(db)
    logger.info(f"Orçamento {budget.account_number}: {previous.value} -> {status.value}")
    return budget


def conversion_description(budget: Budget) -> str:
    descriptions = ", ".join(item.description for item in budget.items)
    return f"{CONVERSION_MARKER} Orçamento {budget.account_number}. Itens: {descriptions}"


def convert_budget_to_service(db: Session, budget_id: int) -> Service:
    """Transforme un orçamento en service d'installation chez le client lié.

    Le nouveau service et le passage du orçamento à ACCEPTED sont validés
    dans le même commit : soit les deux, soit aucun.
    """
    budget = get_budget(db, budget_id)

    if not budget.customer_id:
        logger.warning(f"Conversion refusée: orçamento {budget.account_number} sans client")
        raise ConversionError("Para converter, vincule este orçamento a um cliente cadastrado.", budget.id)
    if budget.status == BudgetStatus.REJECTED:
        logger.warning(f"Conversion refusée: orçamento {budget.account_number} rejeté")
        raise ConversionError("Um orçamento rejeitado não pode ser convertido.", budget.id)

    customer = db.get(Customer, budget.customer_id)
    if customer is None:
        logger.warning(f"Conversion refusée: client {budget.customer_id} introuvable")
        raise ConversionError("Cliente vinculado ao orçamento não encontrado.", budget.id)

    service = Service(
        type=ServiceType.INSTALLATION,
        status=ServiceStatus.PENDING,
        start_date=today(),
        price=budget.total,
        payment_method=budget.payment_terms,
        description=conversion_description(budget),
        contract_notes=budget.notes,
        pending_deletion=False,
    )
    customer.services.insert(0, service)
    budget.status = BudgetStatus.ACCEPTED
    commit_or_rollback(db)
    db.refresh(service)

    logger.info(
        f"Orçamento {budget.account_number} convertido - serviço {service.id} "
        f"adicionado ao cliente {customer.name}"
    )
    return service
