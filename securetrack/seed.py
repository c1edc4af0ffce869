# =====================================
# securetrack/seed.py
# =====================================
import logging

from sqlalchemy.orm import Session

from .budgets import add_item, set_discount
from .constants import initial_customers, initial_budgets, initial_events
from .database import commit_or_rollback
from .models import Customer, Service, Equipment, Note, Budget, AppEvent
from .scheduler import now

logger = logging.getLogger(__name__)


def seed_demo_data(db: Session):
    """Charge les clients, orçamentos et événements de démonstration"""
    if db.query(Customer).first() is not None:
        logger.info("Données déjà présentes, chargement ignoré")
        return

    customers = []
    for data in initial_customers():
        data = dict(data)
        customer = Customer(
            services=[Service(pending_deletion=False, **s) for s in data.pop("services")],
            equipments=[Equipment(**e) for e in data.pop("equipments")],
            notes=[Note(**n) for n in reversed(data.pop("notes"))],
            **data
        )
        customers.append(customer)
    db.add_all(customers)
    db.flush()

    # Insérés en ordre inverse : la liste est affichée par id décroissant
    for data in reversed(initial_budgets()):
        data = dict(data)
        items = data.pop("items")
        discount = data.pop("discount")
        index = data.pop("customer_index", None)
        budget = Budget(customer_id=customers[index].id if index is not None else None, discount=0.0, **data)
        for item in items:
            add_item(budget, **item)
        set_discount(budget, discount)
        db.add(budget)

    db.add_all(AppEvent(**e) for e in initial_events(now()))
    commit_or_rollback(db)
    logger.info(f"Données de démonstration chargées: {len(customers)} clients")
