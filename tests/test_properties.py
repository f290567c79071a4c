"""
Property-based tests for the ledger invariants.

- Whatever sequence of time-entry creates and updates is attempted, a
  contract's used hours never exceed its total hours.
- Whatever sequence of payment creates, updates and deletes is applied, the
  delta-maintained billed_amount equals a fresh recomputation from the
  payment history.
- The same holds for a project's paid_amount under payments, time entries
  and switches between independent and contract-linked billing.
"""
import tempfile
from datetime import date
from decimal import Decimal

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from app.core.clock import FixedClock
from app.core.exceptions import InsufficientHours
from app.db.store import JsonFileStore
from app.models.payment import Payment
from app.models.time_entry import TimeEntry
from app.schemas.client import ClientCreate
from app.schemas.contract import ContractCreate
from app.schemas.payment import PaymentCreate, PaymentUpdate
from app.schemas.project import ProjectCreate, ProjectUpdate
from app.schemas.time_entry import TimeEntryCreate, TimeEntryUpdate
from app.services import aggregation
from app.services.categories import CategoryService
from app.services.clients import ClientService
from app.services.ledger import Ledger
from app.services.reports import Reports

hours = st.decimals(min_value=Decimal("0.25"), max_value=Decimal("8"), places=2)
amounts = st.decimals(min_value=Decimal("0.01"), max_value=Decimal("5000"), places=2)

entry_ops = st.lists(
    st.one_of(
        st.tuples(st.just("create"), hours),
        st.tuples(st.just("update"), st.integers(min_value=0, max_value=20), hours),
        st.tuples(st.just("delete"), st.integers(min_value=0, max_value=20)),
    ),
    min_size=1,
    max_size=25,
)

payment_ops = st.lists(
    st.one_of(
        st.tuples(st.just("create"), amounts),
        st.tuples(st.just("update"), st.integers(min_value=0, max_value=20), amounts),
        st.tuples(st.just("delete"), st.integers(min_value=0, max_value=20)),
    ),
    min_size=1,
    max_size=25,
)

project_ops = st.lists(
    st.one_of(
        st.tuples(st.just("pay"), amounts),
        st.tuples(st.just("repay"), st.integers(min_value=0, max_value=20), amounts),
        st.tuples(st.just("unpay"), st.integers(min_value=0, max_value=20)),
        st.tuples(st.just("log"), hours),
        st.tuples(st.just("relog"), st.integers(min_value=0, max_value=20), hours),
        st.tuples(st.just("unlog"), st.integers(min_value=0, max_value=20)),
        st.tuples(st.just("toggle")),
    ),
    min_size=1,
    max_size=30,
)


def fresh_ledger(data_dir, total_hours="20"):
    clock = FixedClock()
    store = JsonFileStore(data_dir)
    CategoryService(store, clock).seed_defaults()
    client = ClientService(store, clock).create(ClientCreate(name="Acme", email="a@example.com"))
    ledger = Ledger(store, clock)
    contract = ledger.create_contract(ContractCreate(
        client_id=client.id,
        contract_number="C-1",
        description="Retainer",
        total_hours=Decimal(total_hours),
        hourly_rate=Decimal("50"),
    ))
    return ledger, Reports(store), contract


def entry(contract_id, hours_used):
    return TimeEntryCreate(
        contract_id=contract_id, description="Work", hours_used=hours_used, entry_date=date(2024, 3, 1),
    )


def project_entry(project_id, hours_used):
    return TimeEntryCreate(
        project_id=project_id, description="Work", hours_used=hours_used, entry_date=date(2024, 3, 1),
    )

class TestLedgerProperties:
    @settings(max_examples=40, deadline=None, suppress_health_check=[HealthCheck.too_slow])
    @given(ops=entry_ops)
    def test_used_hours_never_exceed_total(self, ops):
        with tempfile.TemporaryDirectory() as data_dir:
            ledger, reports, contract = fresh_ledger(data_dir)
            live = []

            for op in ops:
                try:
                    if op[0] == "create":
                        live.append(ledger.record_time_entry(entry(contract.id, op[1])).id)
                    elif op[0] == "update" and live:
                        entry_id = live[op[1] % len(live)]
                        ledger.update_time_entry(entry_id, TimeEntryUpdate(**entry(contract.id, op[2]).model_dump()))
                    elif op[0] == "delete" and live:
                        ledger.delete_time_entry(live.pop(op[1] % len(live)))
                except InsufficientHours:
                    pass

                listing = reports.contract(contract.id)
                assert listing.used_hours <= listing.total_hours
                assert listing.remaining_hours == listing.total_hours - listing.used_hours

    @settings(max_examples=40, deadline=None, suppress_health_check=[HealthCheck.too_slow])
    @given(ops=payment_ops)
    def test_delta_billing_matches_recompute(self, ops):
        with tempfile.TemporaryDirectory() as data_dir:
            ledger, reports, contract = fresh_ledger(data_dir)
            live = []

            for op in ops:
                if op[0] == "create":
                    payment, _ = ledger.record_payment(
                        PaymentCreate(amount=op[1], payment_date=date(2024, 4, 1)), contract_id=contract.id,
                    )
                    live.append(payment.id)
                elif op[0] == "update" and live:
                    ledger.update_payment(
                        live[op[1] % len(live)], PaymentUpdate(amount=op[2], payment_date=date(2024, 4, 2)),
                    )
                elif op[0] == "delete" and live:
                    ledger.delete_payment(live.pop(op[1] % len(live)))

                with ledger.store.snapshot("payments") as uow:
                    history = uow.all(Payment)
                listing = reports.contract(contract.id)
                expected = aggregation.fold_contributions(
                    aggregation.payment_contributions(history, contract_id=contract.id)
                )
                assert listing.billed_amount == expected
                assert listing.remaining_amount == max(Decimal("0"), listing.total_value - expected)

    @settings(max_examples=40, deadline=None, suppress_health_check=[HealthCheck.too_slow])
    @given(ops=project_ops)
    def test_project_paid_amount_matches_recompute(self, ops):
        with tempfile.TemporaryDirectory() as data_dir:
            ledger, reports, contract = fresh_ledger(data_dir, total_hours="1000")
            project = ledger.create_project(ProjectCreate(name="Phase 1", description="D", contract_id=contract.id))
            payments, entries = [], []

            for op in ops:
                kind = op[0]
                if kind == "pay":
                    payment, _ = ledger.record_payment(
                        PaymentCreate(amount=op[1], payment_date=date(2024, 4, 1)), project_id=project.id,
                    )
                    payments.append(payment.id)
                elif kind == "repay" and payments:
                    ledger.update_payment(
                        payments[op[1] % len(payments)], PaymentUpdate(amount=op[2], payment_date=date(2024, 4, 2)),
                    )
                elif kind == "unpay" and payments:
                    ledger.delete_payment(payments.pop(op[1] % len(payments)))
                elif kind == "log":
                    entries.append(ledger.record_time_entry(project_entry(project.id, op[1])).id)
                elif kind == "relog" and entries:
                    ledger.update_time_entry(
                        entries[op[1] % len(entries)],
                        TimeEntryUpdate(**project_entry(project.id, op[2]).model_dump()),
                    )
                elif kind == "unlog" and entries:
                    ledger.delete_time_entry(entries.pop(op[1] % len(entries)))
                elif kind == "toggle":
                    if reports.project(project.id).is_independent:
                        change = ProjectUpdate(is_independent=False, contract_id=contract.id)
                    else:
                        change = ProjectUpdate(is_independent=True, hourly_rate=Decimal("40"))
                    ledger.update_project(project.id, change)

                with ledger.store.snapshot("payments", "time_entries") as uow:
                    history, recorded = uow.all(Payment), uow.all(TimeEntry)
                listing = reports.project(project.id)
                assert listing.paid_amount == aggregation.recompute_project_paid(listing, history, recorded)
