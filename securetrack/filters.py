# =====================================
# securetrack/filters.py
# =====================================
from datetime import date, datetime
from typing import Iterable, List, Optional, Union

from .models import Customer, Budget, AppEvent
from .scheduler import to_local

ALL = "all"

CONTRACT_ALL = "all"
CONTRACT_ACTIVE = "active"
CONTRACT_NONE = "no-contract"
CONTRACT_FILTERS = (CONTRACT_ALL, CONTRACT_ACTIVE, CONTRACT_NONE)

DateBound = Optional[Union[date, datetime]]


def _matches_text(query: str, *fields) -> bool:
    """Sous-chaîne insensible à la casse sur au moins un champ"""
    if not query:
        return True
    needle = query.lower()
    return any(needle in (field or "").lower() for field in fields)


def _matches_choice(selected, value) -> bool:
    return selected is None or selected == ALL or value == selected


def in_date_range(value: Union[date, datetime, None], start: DateBound = None, end: DateBound = None) -> bool:
    """Intervalle inclusif ; une borne de fin sans heure couvre toute la journée"""
    if start is None and end is None:
        return True
    if value is None:
        return False
    instant = to_local(value)
    if start is not None and instant < to_local(start):
        return False
    if end is not None and instant > to_local(end, end_of_day=True):
        return False
    return True


def filter_customers(customers: Iterable[Customer], query: str = "",
                     contract: str = CONTRACT_ALL) -> List[Customer]:
    if contract not in CONTRACT_FILTERS:
        raise ValueError(f"Filtre contrat inconnu: {contract}")
    result = []
    for customer in customers:
        if not _matches_text(query, customer.name, customer.account_number):
            continue
        has_contract = len(customer.services) > 0
        if contract == CONTRACT_ACTIVE and not has_contract:
            continue
        if contract == CONTRACT_NONE and has_contract:
            continue
        result.append(customer)
    return result


def filter_budgets(budgets: Iterable[Budget], query: str = "", status=ALL,
                   start: DateBound = None, end: DateBound = None) -> List[Budget]:
    """Filtre sur le statut stocké (jamais sur EXPIRED, qui est calculé)"""
    return [
        b for b in budgets
        if _matches_text(query, b.customer_name, b.account_number)
        and _matches_choice(status, b.status)
        and in_date_range(b.created_at, start, end)
    ]


def filter_events(events: Iterable[AppEvent], query: str = "", event_type=ALL, severity=ALL,
                  start: DateBound = None, end: DateBound = None) -> List[AppEvent]:
    return [
        e for e in events
        if _matches_text(query, e.description, e.user)
        and _matches_choice(event_type, e.type)
        and _matches_choice(severity, e.status)
        and in_date_range(e.timestamp, start, end)
    ]
