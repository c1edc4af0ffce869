from datetime import date, datetime

import pytest
import pytz

from securetrack import filters
from securetrack.budgets import display_status, list_budgets
from securetrack.customers import add_service, create_customer, list_customers
from securetrack.events import list_events, record_event
from securetrack.models import (
    AppEvent, Budget, BudgetStatus, EventSeverity, EventType, ServiceType,
)


class TestDateRange:
    def test_no_bounds(self):
        assert filters.in_date_range(None)
        assert filters.in_date_range(date(2020, 1, 1))

    def test_missing_value_with_bound(self):
        assert not filters.in_date_range(None, start=date(2024, 1, 1))

    def test_bounds_are_inclusive(self):
        assert filters.in_date_range(date(2024, 1, 1), start=date(2024, 1, 1), end=date(2024, 1, 1))

    def test_end_date_covers_whole_day(self):
        late = datetime(2024, 3, 10, 23, 59, 30)
        assert filters.in_date_range(late, end=date(2024, 3, 10))
        assert not filters.in_date_range(datetime(2024, 3, 11, 0, 0, 1), end=date(2024, 3, 10))

    def test_aware_bound_converted_to_local_time(self):
        # 02:00 UTC on the 11th is still the 10th in São Paulo
        bound = pytz.utc.localize(datetime(2024, 3, 11, 2, 0))
        assert filters.in_date_range(datetime(2024, 3, 10, 22, 30), end=bound)
        assert not filters.in_date_range(datetime(2024, 3, 10, 23, 30), end=bound)


class TestCustomerFilter:
    def test_text_matches_name_or_account(self, seeded_db):
        customers = list_customers(seeded_db)
        assert [c.name for c in filters.filter_customers(customers, "maria")] == ["Maria Oliveira"]
        assert [c.name for c in filters.filter_customers(customers, "acc-1001")] == ["João Silva"]
        assert filters.filter_customers(customers, "nobody") == []

    def test_contract_filter(self, seeded_db):
        create_customer(seeded_db, name="Lead Sem Contrato")
        customers = list_customers(seeded_db)

        active = filters.filter_customers(customers, contract=filters.CONTRACT_ACTIVE)
        none = filters.filter_customers(customers, contract=filters.CONTRACT_NONE)
        assert {c.name for c in active} == {"João Silva", "Maria Oliveira"}
        assert [c.name for c in none] == ["Lead Sem Contrato"]
        assert len(filters.filter_customers(customers)) == 3

    def test_filters_combine(self, seeded_db):
        created = create_customer(seeded_db, name="Maria Souza")
        add_service(seeded_db, created.id, ServiceType.LEASE)
        customers = list_customers(seeded_db)

        result = filters.filter_customers(customers, "maria", filters.CONTRACT_NONE)
        assert result == []
        result = filters.filter_customers(customers, "souza", filters.CONTRACT_ACTIVE)
        assert [c.name for c in result] == ["Maria Souza"]

    def test_unknown_contract_filter(self):
        with pytest.raises(ValueError):
            filters.filter_customers([], contract="expired")


class TestBudgetFilter:
    def test_status_and_text(self, seeded_db):
        budgets = list_budgets(seeded_db)
        assert [b.account_number for b in filters.filter_budgets(budgets, status=BudgetStatus.OPEN)] == ["QT-5001"]
        assert [b.account_number for b in filters.filter_budgets(budgets, "joão")] == ["QT-5002"]
        assert [b.account_number for b in filters.filter_budgets(budgets, "qt-500")] == ["QT-5001", "QT-5002"]

    def test_created_range(self, seeded_db):
        budgets = list_budgets(seeded_db)
        result = filters.filter_budgets(budgets, start=date(2023, 12, 1), end=date(2023, 12, 5))
        assert [b.account_number for b in result] == ["QT-5002"]

    def test_expired_display_does_not_change_stored_filter(self):
        stale = Budget(customer_name="Antigo", account_number="QT-5100",
                       status=BudgetStatus.OPEN, valid_until=date(2020, 1, 1), created_at=date(2019, 12, 1))
        assert display_status(stale, reference=date(2024, 1, 1)) == BudgetStatus.EXPIRED
        assert filters.filter_budgets([stale], status=BudgetStatus.OPEN) == [stale]
        assert filters.filter_budgets([stale], status=BudgetStatus.EXPIRED) == []


class TestEventFilter:
    def test_type_severity_and_text(self, seeded_db):
        events = list_events(seeded_db)
        critical = filters.filter_events(events, severity=EventSeverity.CRITICAL)
        assert [e.type for e in critical] == [EventType.SECURITY_ALERT]

        admin = filters.filter_events(events, "admin")
        assert len(admin) == 2
        assert len(filters.filter_events(events, "admin", event_type=EventType.STATUS_CHANGE)) == 1

    def test_all_selects_everything(self, seeded_db):
        events = list_events(seeded_db)
        assert filters.filter_events(events, event_type=filters.ALL, severity=filters.ALL) == events

    def test_timestamp_range(self, seeded_db):
        record_event(seeded_db, EventType.SYSTEM, "Backup noturno", "Sistema",
                     timestamp=datetime(2024, 6, 1, 23, 45))
        record_event(seeded_db, EventType.SYSTEM, "Reinício do servidor", "Sistema",
                     timestamp=datetime(2024, 6, 2, 8, 0))
        events = list_events(seeded_db)
        result = filters.filter_events(events, start=date(2024, 6, 1), end=date(2024, 6, 1))
        assert [e.description for e in result] == ["Backup noturno"]

    def test_text_is_case_insensitive(self):
        older = AppEvent(timestamp=datetime(2024, 1, 1), type=EventType.SYSTEM, description="a", user="u",
                         status=EventSeverity.INFO)
        assert filters.filter_events([older], "A") == [older]
