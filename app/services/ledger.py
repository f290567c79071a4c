"""
Ledger Engine

Every mutation that touches hours or money goes through this module:
contracts, projects, time entries and payments.

Rules:
- Used and remaining hours are never stored. They are recomputed from time
  entries whenever a guard or a view needs them.
- ``billed_amount`` (contracts) and ``paid_amount`` (projects) are running
  totals moved by signed deltas: a payment update applies new - old, a delete
  reverses the full prior amount. ``resync_*`` rebuilds them from history with
  the same arithmetic (see ``app.services.aggregation``).
- Time entries recorded on an independent project double as billing events
  and are flagged ``billed_to_project``: recording one raises the project's
  paid_amount by its amount, updating it applies the amount delta and
  deleting it reverses the amount. Entries recorded while a project was
  linked to a contract never touch paid_amount, even after the project is
  detached or made independent.
- Each operation runs in one store transaction that locks every collection it
  reads or writes, so the remaining-hours guard can never pass on a stale read
  and a payment and its target balance are persisted together.
"""
from decimal import Decimal
from typing import Optional, Tuple, Union

from app.core.clock import Clock, SystemClock
from app.core.exceptions import (
    Conflict,
    HasDependents,
    InsufficientHours,
    ValidationError,
)
from app.core.logging_config import get_logger
from app.db.store import EntityStore, UnitOfWork
from app.models.category import Category
from app.models.client import Client
from app.models.contract import Contract
from app.models.fields import ZERO
from app.models.payment import Payment
from app.models.project import Project, ProjectStatus
from app.models.time_entry import TimeEntry
from app.schemas.contract import ContractCreate, ContractDeletion, ContractUpdate
from app.schemas.payment import PaymentCreate, PaymentUpdate
from app.schemas.project import ProjectCreate, ProjectUpdate
from app.schemas.time_entry import TimeEntryCreate, TimeEntryUpdate
from app.services import aggregation
from app.services.common import changes, iso, require

logger = get_logger("ledger")

CLIENTS = Client.__collection__
CONTRACTS = Contract.__collection__
PROJECTS = Project.__collection__
TIME_ENTRIES = TimeEntry.__collection__
PAYMENTS = Payment.__collection__
CATEGORIES = Category.__collection__

Target = Union[Contract, Project]


def _single_target(contract_id: Optional[int], project_id: Optional[int]) -> None:
    if contract_id is not None and project_id is not None:
        raise ValidationError("A record can reference a contract or a project, not both")


class Ledger:
    """Balance-keeping operations over contracts, projects, time entries and payments."""

    def __init__(self, store: EntityStore, clock: Optional[Clock] = None):
        self.store = store
        self.clock = clock or SystemClock()

    # ------------------------------------------------------------------
    # Contracts
    # ------------------------------------------------------------------

    def create_contract(self, data: ContractCreate) -> Contract:
        with self.store.transaction(CONTRACTS, CLIENTS) as uow:
            require(uow, Client, data.client_id, "Client")
            if any(c.contract_number == data.contract_number for c in uow.all(Contract)):
                raise Conflict(f"Contract number '{data.contract_number}' already exists")

            now = self.clock.isoformat()
            contract = Contract(
                client_id=data.client_id,
                contract_number=data.contract_number,
                description=data.description,
                total_hours=data.total_hours,
                hourly_rate=data.hourly_rate,
                start_date=iso(data.start_date),
                end_date=iso(data.end_date),
                status=data.status,
                created_at=now,
                updated_at=now,
            )
            uow.add(contract)

        logger.info("contract_created", extra={"contract_id": contract.id, "client_id": contract.client_id})
        return contract

    def update_contract(self, contract_id: int, data: ContractUpdate) -> Contract:
        with self.store.transaction(CONTRACTS, CLIENTS, TIME_ENTRIES) as uow:
            contract = require(uow, Contract, contract_id, "Contract")
            updates = changes(data, nullable=("description", "start_date", "end_date"))

            if "client_id" in updates:
                require(uow, Client, updates["client_id"], "Client")
            if "contract_number" in updates and any(
                c.contract_number == updates["contract_number"] and c.id != contract_id
                for c in uow.all(Contract)
            ):
                raise Conflict(f"Contract number '{updates['contract_number']}' already exists")
            if "total_hours" in updates:
                used = aggregation.sum_hours(aggregation.contract_entries(uow.all(TimeEntry), contract_id))
                if updates["total_hours"] < used:
                    raise InsufficientHours(
                        aggregation.remaining(contract.total_hours, used),
                        message=f"total_hours cannot be lower than the {used}h already used",
                    )

            for key, value in updates.items():
                setattr(contract, key, value)
            contract.updated_at = self.clock.isoformat()
            uow.put(contract)

        logger.info("contract_updated", extra={"contract_id": contract_id, "fields": sorted(updates)})
        return contract

    def delete_contract(self, contract_id: int, force: bool = False) -> ContractDeletion:
        """
        Delete a contract.

        Without ``force`` a contract that still has time entries or projects is
        left untouched and the result asks for confirmation. With ``force`` its
        time entries are deleted and its projects are detached: they become
        independent (keeping the contract's rate) and cancelled.
        """
        with self.store.transaction(CONTRACTS, TIME_ENTRIES, PROJECTS) as uow:
            contract = require(uow, Contract, contract_id, "Contract")
            has_entries = any(e.contract_id == contract_id for e in uow.all(TimeEntry))
            has_projects = any(p.contract_id == contract_id for p in uow.all(Project))

            if not force and (has_entries or has_projects):
                return ContractDeletion(
                    deleted=False,
                    requires_confirmation=True,
                    has_time_entries=has_entries,
                    has_projects=has_projects,
                    contract=contract,
                )

            removed = uow.remove_where(TimeEntry, lambda e: e.contract_id == contract_id)

            now = self.clock.isoformat()
            detached = 0
            for project in uow.filter(Project, lambda p: p.contract_id == contract_id):
                project.contract_id = None
                project.is_independent = True
                project.status = ProjectStatus.cancelled
                if not project.hourly_rate:
                    project.hourly_rate = contract.hourly_rate
                project.updated_at = now
                uow.put(project)
                detached += 1

            uow.remove(Contract, contract_id)

        logger.info(
            "contract_deleted",
            extra={
                "contract_id": contract_id,
                "forced": force,
                "removed_time_entries": len(removed),
                "detached_projects": detached,
            },
        )
        return ContractDeletion(
            deleted=True,
            has_time_entries=has_entries,
            has_projects=has_projects,
            contract=contract,
            removed_time_entries=len(removed),
            detached_projects=detached,
        )

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    def _apply_project_links(self, uow: UnitOfWork, project: Project, contract_given: bool) -> None:
        """Enforce the independent / contract-linked invariants on ``project``."""
        if project.is_independent:
            if contract_given and project.contract_id is not None:
                raise ValidationError("Independent projects cannot reference a contract")
            if not project.hourly_rate or project.hourly_rate <= 0:
                raise ValidationError("Independent projects require a positive hourly_rate")
            project.contract_id = None
            project.client_id = None
        else:
            if project.contract_id is not None:
                project.client_id = require(uow, Contract, project.contract_id, "Contract").client_id
            if project.client_id is not None:
                client = require(uow, Client, project.client_id, "Client")
                project.client_name = client.name
        project.total_amount = project.planned_total()

    def create_project(self, data: ProjectCreate) -> Project:
        with self.store.transaction(PROJECTS, CONTRACTS, CLIENTS) as uow:
            now = self.clock.isoformat()
            project = Project(
                name=data.name,
                description=data.description,
                contract_id=data.contract_id,
                client_id=data.client_id,
                is_independent=data.is_independent,
                client_name=data.client_name,
                hourly_rate=data.hourly_rate if data.is_independent else None,
                estimated_hours=data.estimated_hours,
                start_date=iso(data.start_date),
                end_date=iso(data.end_date),
                status=data.status,
                created_at=now,
                updated_at=now,
            )
            self._apply_project_links(uow, project, contract_given=data.contract_id is not None)
            uow.add(project)

        logger.info(
            "project_created",
            extra={"project_id": project.id, "independent": project.is_independent, "contract_id": project.contract_id},
        )
        return project

    def update_project(self, project_id: int, data: ProjectUpdate) -> Project:
        with self.store.transaction(PROJECTS, CONTRACTS, CLIENTS) as uow:
            project = require(uow, Project, project_id, "Project")
            updates = changes(
                data,
                nullable=("contract_id", "client_id", "client_name", "hourly_rate",
                          "estimated_hours", "start_date", "end_date"),
            )
            for key, value in updates.items():
                setattr(project, key, value)
            self._apply_project_links(uow, project, contract_given=updates.get("contract_id") is not None)
            project.updated_at = self.clock.isoformat()
            uow.put(project)

        logger.info("project_updated", extra={"project_id": project_id, "fields": sorted(updates)})
        return project

    def delete_project(self, project_id: int) -> Project:
        with self.store.transaction(PROJECTS, TIME_ENTRIES) as uow:
            project = require(uow, Project, project_id, "Project")
            if any(e.project_id == project_id for e in uow.all(TimeEntry)):
                raise HasDependents("Project cannot be deleted because it has time entries")
            uow.remove(Project, project_id)

        logger.info("project_deleted", extra={"project_id": project_id})
        return project

    # ------------------------------------------------------------------
    # Time entries
    # ------------------------------------------------------------------

    def _entry_rate(self, uow: UnitOfWork, contract: Optional[Contract], project: Optional[Project]) -> Decimal:
        if contract is not None:
            return contract.hourly_rate
        if project is not None:
            linked = uow.get(Contract, project.contract_id) if project.contract_id else None
            return aggregation.applicable_rate(project, linked)
        return ZERO

    def _check_hours(self, uow: UnitOfWork, contract: Contract, needed: Decimal) -> None:
        used = aggregation.sum_hours(aggregation.contract_entries(uow.all(TimeEntry), contract.id))
        available = aggregation.remaining(contract.total_hours, used)
        if needed > available:
            logger.warning(
                "time_entry_rejected",
                extra={"contract_id": contract.id, "requested_hours": needed, "remaining_hours": available},
            )
            raise InsufficientHours(available)

    def _bill_project(self, uow: UnitOfWork, project_id: Optional[int], delta: Decimal) -> None:
        """Move the paid_amount of the project a billed entry was recorded on."""
        if project_id is None or delta == 0:
            return
        project = uow.get(Project, project_id)
        if project is None:
            return
        project.paid_amount = aggregation.apply_delta(project.paid_amount, delta)
        project.updated_at = self.clock.isoformat()
        uow.put(project)

    def record_time_entry(self, data: TimeEntryCreate) -> TimeEntry:
        """
        Record hours against a contract, a project or nothing.

        Raises InsufficientHours when a contract does not have the hours left.
        """
        _single_target(data.contract_id, data.project_id)

        with self.store.transaction(TIME_ENTRIES, CONTRACTS, PROJECTS, CATEGORIES) as uow:
            require(uow, Category, data.category_id, "Category")
            contract = require(uow, Contract, data.contract_id, "Contract") if data.contract_id else None
            project = require(uow, Project, data.project_id, "Project") if data.project_id else None

            if contract is not None:
                self._check_hours(uow, contract, data.hours_used)

            amount = data.hours_used * self._entry_rate(uow, contract, project)
            entry_date = data.entry_date.isoformat()
            now = self.clock.isoformat()
            entry = TimeEntry(
                contract_id=data.contract_id,
                project_id=data.project_id,
                description=data.description,
                hours_used=data.hours_used,
                amount=amount,
                billed_to_project=project is not None and project.is_independent,
                entry_date=entry_date,
                month_year=entry_date[:7],
                category_id=data.category_id,
                created_by=data.created_by,
                notes=data.notes,
                created_at=now,
                updated_at=now,
            )
            if entry.billed_to_project:
                self._bill_project(uow, data.project_id, amount)
            uow.add(entry)

        logger.info(
            "time_entry_recorded",
            extra={
                "entry_id": entry.id,
                "contract_id": entry.contract_id,
                "project_id": entry.project_id,
                "hours": entry.hours_used,
                "amount": entry.amount,
            },
        )
        return entry

    def update_time_entry(self, entry_id: int, data: TimeEntryUpdate) -> TimeEntry:
        """
        Replace a time entry's fields.

        The hours guard works on the difference between new and old hours when
        the entry stays on the same contract, and on the full new hours when it
        moves to another one. Independent-project billing follows the amount
        difference the same way.
        """
        _single_target(data.contract_id, data.project_id)

        with self.store.transaction(TIME_ENTRIES, CONTRACTS, PROJECTS, CATEGORIES) as uow:
            entry = require(uow, TimeEntry, entry_id, "Time entry")
            require(uow, Category, data.category_id, "Category")
            contract = require(uow, Contract, data.contract_id, "Contract") if data.contract_id else None
            project = require(uow, Project, data.project_id, "Project") if data.project_id else None

            hours_difference = data.hours_used - entry.hours_used
            if contract is not None:
                needed = hours_difference if entry.contract_id == contract.id else data.hours_used
                self._check_hours(uow, contract, needed)

            amount = data.hours_used * self._entry_rate(uow, contract, project)
            billed = project is not None and project.is_independent
            if billed and entry.billed_to_project and entry.project_id == data.project_id:
                self._bill_project(uow, data.project_id, amount - entry.amount)
            else:
                if entry.billed_to_project:
                    self._bill_project(uow, entry.project_id, -entry.amount)
                if billed:
                    self._bill_project(uow, data.project_id, amount)

            entry_date = data.entry_date.isoformat()
            entry.contract_id = data.contract_id
            entry.project_id = data.project_id
            entry.description = data.description
            entry.hours_used = data.hours_used
            entry.amount = amount
            entry.billed_to_project = billed
            entry.entry_date = entry_date
            entry.month_year = entry_date[:7]
            entry.category_id = data.category_id
            entry.created_by = data.created_by
            entry.notes = data.notes
            entry.updated_at = self.clock.isoformat()
            uow.put(entry)

        logger.info(
            "time_entry_updated",
            extra={"entry_id": entry_id, "hours_difference": hours_difference, "amount": amount},
        )
        return entry

    def delete_time_entry(self, entry_id: int) -> TimeEntry:
        with self.store.transaction(TIME_ENTRIES, PROJECTS) as uow:
            entry = require(uow, TimeEntry, entry_id, "Time entry")
            if entry.billed_to_project:
                self._bill_project(uow, entry.project_id, -entry.amount)
            uow.remove(TimeEntry, entry_id)

        logger.info("time_entry_deleted", extra={"entry_id": entry_id, "hours": entry.hours_used})
        return entry

    # ------------------------------------------------------------------
    # Payments
    # ------------------------------------------------------------------

    def _payment_target(self, uow: UnitOfWork, payment: Payment) -> Optional[Target]:
        if payment.contract_id is not None:
            return uow.get(Contract, payment.contract_id)
        if payment.project_id is not None:
            return uow.get(Project, payment.project_id)
        return None

    def _move_balance(self, uow: UnitOfWork, target: Target, delta: Decimal) -> None:
        if isinstance(target, Contract):
            target.billed_amount = aggregation.apply_delta(target.billed_amount, delta)
        else:
            target.paid_amount = aggregation.apply_delta(target.paid_amount, delta)
        target.updated_at = self.clock.isoformat()
        uow.put(target)

    def record_payment(
        self,
        data: PaymentCreate,
        *,
        contract_id: Optional[int] = None,
        project_id: Optional[int] = None,
    ) -> Tuple[Payment, Target]:
        """Register money received against exactly one contract or project."""
        if (contract_id is None) == (project_id is None):
            raise ValidationError("A payment needs exactly one of contract_id or project_id")

        with self.store.transaction(PAYMENTS, CONTRACTS, PROJECTS) as uow:
            if contract_id is not None:
                target = require(uow, Contract, contract_id, "Contract")
            else:
                target = require(uow, Project, project_id, "Project")

            payment_date = data.payment_date.isoformat()
            target.last_payment_date = payment_date
            self._move_balance(uow, target, data.amount)

            payment = Payment(
                contract_id=contract_id,
                project_id=project_id,
                amount=data.amount,
                description=data.description,
                payment_date=payment_date,
                payment_type=data.payment_type,
                percentage=data.percentage,
                created_at=self.clock.isoformat(),
            )
            uow.add(payment)

        logger.info(
            "payment_recorded",
            extra={"payment_id": payment.id, "contract_id": contract_id, "project_id": project_id, "amount": payment.amount},
        )
        return payment, target

    def update_payment(self, payment_id: int, data: PaymentUpdate) -> Payment:
        """Amend a payment, moving its target's balance by new - old amount."""
        with self.store.transaction(PAYMENTS, CONTRACTS, PROJECTS) as uow:
            payment = require(uow, Payment, payment_id, "Payment")
            amount_difference = data.amount - payment.amount
            payment_date = data.payment_date.isoformat()

            target = self._payment_target(uow, payment)
            if target is not None:
                if payment_date >= (target.last_payment_date or ""):
                    target.last_payment_date = payment_date
                self._move_balance(uow, target, amount_difference)

            payment.amount = data.amount
            payment.description = data.description
            payment.payment_date = payment_date
            payment.payment_type = data.payment_type
            payment.percentage = data.percentage
            payment.updated_at = self.clock.isoformat()
            uow.put(payment)

        logger.info("payment_updated", extra={"payment_id": payment_id, "amount_difference": amount_difference})
        return payment

    def delete_payment(self, payment_id: int) -> Payment:
        """Reverse a payment's full amount from its target, then remove it."""
        with self.store.transaction(PAYMENTS, CONTRACTS, PROJECTS) as uow:
            payment = require(uow, Payment, payment_id, "Payment")
            target = self._payment_target(uow, payment)
            if target is not None:
                self._move_balance(uow, target, -payment.amount)
            uow.remove(Payment, payment_id)

        logger.info("payment_deleted", extra={"payment_id": payment_id, "amount": payment.amount})
        return payment

    # ------------------------------------------------------------------
    # Resync
    # ------------------------------------------------------------------

    def resync_contract(self, contract_id: int) -> Contract:
        """Rebuild billed_amount and last_payment_date from payment history."""
        with self.store.transaction(CONTRACTS, PAYMENTS) as uow:
            contract = require(uow, Contract, contract_id, "Contract")
            payments = uow.filter(Payment, lambda p: p.contract_id == contract_id)
            previous = contract.billed_amount
            contract.billed_amount = aggregation.recompute_contract_billed(contract, payments)
            contract.last_payment_date = aggregation.latest_payment_date(payments)
            contract.updated_at = self.clock.isoformat()
            uow.put(contract)

        logger.info(
            "contract_resynced",
            extra={"contract_id": contract_id, "previous": previous, "billed_amount": contract.billed_amount},
        )
        return contract

    def resync_project(self, project_id: int) -> Project:
        """Rebuild paid_amount and last_payment_date from payments and billed entries."""
        with self.store.transaction(PROJECTS, PAYMENTS, TIME_ENTRIES) as uow:
            project = require(uow, Project, project_id, "Project")
            payments = uow.filter(Payment, lambda p: p.project_id == project_id)
            previous = project.paid_amount
            project.paid_amount = aggregation.recompute_project_paid(project, payments, uow.all(TimeEntry))
            project.last_payment_date = aggregation.latest_payment_date(payments)
            project.updated_at = self.clock.isoformat()
            uow.put(project)

        logger.info(
            "project_resynced",
            extra={"project_id": project_id, "previous": previous, "paid_amount": project.paid_amount},
        )
        return project
