# =====================================
# securetrack/reports.py
# =====================================
"""Indicateurs du tableau de bord, recalculés à chaque appel (aucun cache)."""
from collections import OrderedDict
from typing import Iterable, List, Tuple

from .constants import WARRANTY_PREVIEW_LIMIT
from .models import (
    Customer, Budget, AppEvent, Equipment,
    ServiceStatus, ServiceType, PaymentStatus, BudgetStatus, EventSeverity,
)


def dashboard_stats(customers: Iterable[Customer]) -> dict:
    customers = list(customers)
    return {
        "total_customers": len(customers),
        "active_services": sum(
            1 for c in customers for s in c.services if s.status == ServiceStatus.ACTIVE
        ),
        "total_equipments": sum(len(c.equipments) for c in customers),
        "pending_payments": sum(
            1 for c in customers if c.payment_status != PaymentStatus.UP_TO_DATE
        ),
    }


def budget_report(budgets: Iterable[Budget]) -> dict:
    """Valeur totale, nombre et taux de conversion d'un ensemble filtré"""
    budgets = list(budgets)
    count = len(budgets)
    accepted = sum(1 for b in budgets if b.status == BudgetStatus.ACCEPTED)
    return {
        "total_value": sum((b.total or 0.0) for b in budgets),
        "count": count,
        "open_count": sum(1 for b in budgets if b.status == BudgetStatus.OPEN),
        "conversion_rate": (accepted / count) * 100 if count else 0.0,
    }


def warranty_report(customers: Iterable[Customer],
                    limit: int = WARRANTY_PREVIEW_LIMIT) -> List[Tuple[Equipment, str]]:
    pairs = [(e, c.name) for c in customers for e in c.equipments]
    return pairs[:max(limit, 0)]


def event_stats(events: Iterable[AppEvent]) -> dict:
    events = list(events)
    return {
        "critical": sum(1 for e in events if e.status == EventSeverity.CRITICAL),
        "warnings": sum(1 for e in events if e.status == EventSeverity.WARNING),
        "total": len(events),
    }


def service_mix(customers: Iterable[Customer]) -> "OrderedDict[str, int]":
    """Nombre de services par type (tous les types, même à zéro)"""
    mix = OrderedDict((t.value, 0) for t in ServiceType)
    for customer in customers:
        for service in customer.services:
            mix[service.type.value] += 1
    return mix
