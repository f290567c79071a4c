"""
Read views over the ledger.

Nothing here is cached or persisted: every listing, summary and report is
rebuilt from leaf records (time entries, payments) on each call, using the
same arithmetic as the mutation path in ``app.services.aggregation``.
"""
from collections import OrderedDict
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

from app.core.exceptions import NotFound, ValidationError
from app.db.store import EntityStore, UnitOfWork
from app.models.category import Category
from app.models.client import Client
from app.models.contract import Contract, ContractStatus
from app.models.fields import ZERO
from app.models.payment import Payment
from app.models.project import Project, ProjectStatus
from app.models.time_entry import TimeEntry
from app.schemas.client import ClientSummary, ClientWithStats
from app.schemas.contract import ContractListing
from app.schemas.project import ProjectListing
from app.schemas.reports import (
    ActiveContractLine,
    MonthlyClientLine,
    MonthlyContractLine,
    Overview,
    TimeEntryReportLine,
    TimeEntryReportSummary,
)
from app.schemas.time_entry import TimeEntryListing
from app.services import aggregation

UNKNOWN_CLIENT = "Unknown client"
UNASSIGNED = "Unassigned"
INDEPENDENT_CLIENT = "Independent client"

ALL_COLLECTIONS = (
    Client.__collection__,
    Contract.__collection__,
    Project.__collection__,
    TimeEntry.__collection__,
    Payment.__collection__,
    Category.__collection__,
)


def _by_id(items) -> Dict[int, object]:
    return {item.id: item for item in items}


class Reports:
    """Listings, summaries and reports computed from a consistent snapshot."""

    def __init__(self, store: EntityStore):
        self.store = store

    # ------------------------------------------------------------------
    # Building blocks
    # ------------------------------------------------------------------

    @staticmethod
    def _contract_listing(contract: Contract, clients: Dict[int, Client], entries: List[TimeEntry]) -> ContractListing:
        linked = aggregation.contract_entries(entries, contract.id)
        used = aggregation.sum_hours(linked)
        client = clients.get(contract.client_id)
        return ContractListing(
            **contract.model_dump(),
            client_name=client.name if client else UNKNOWN_CLIENT,
            used_hours=used,
            remaining_hours=aggregation.remaining(contract.total_hours, used),
            total_value=aggregation.contract_value(contract),
            remaining_amount=aggregation.contract_remaining_amount(contract),
            entries_count=len(linked),
        )

    @staticmethod
    def _project_client_id(project: Project, contracts: Dict[int, Contract]) -> Optional[int]:
        """The client a project bills to: its contract's client when linked."""
        contract = contracts.get(project.contract_id) if project.contract_id else None
        return contract.client_id if contract else project.client_id

    def _project_listing(self, project: Project, contracts: Dict[int, Contract], clients: Dict[int, Client],
                         entries: List[TimeEntry]) -> ProjectListing:
        linked = aggregation.project_entries(entries, project.id)
        used = aggregation.sum_hours(linked)
        contract = contracts.get(project.contract_id) if project.contract_id else None
        rate = aggregation.applicable_rate(project, contract)
        if project.is_independent:
            client_name = project.client_name or INDEPENDENT_CLIENT
        else:
            client = clients.get(self._project_client_id(project, contracts))
            client_name = client.name if client else UNKNOWN_CLIENT
        return ProjectListing(
            **{**project.model_dump(), "client_name": client_name},
            used_hours=used,
            remaining_hours=aggregation.remaining(project.estimated_hours, used),
            current_cost=used * rate,
            entries_count=len(linked),
            contract_number=contract.contract_number if contract else None,
        )

    @staticmethod
    def _entry_rate(entry: TimeEntry, contracts: Dict[int, Contract], projects: Dict[int, Project]) -> Decimal:
        if entry.contract_id is not None:
            contract = contracts.get(entry.contract_id)
            return contract.hourly_rate if contract else ZERO
        if entry.project_id is not None:
            project = projects.get(entry.project_id)
            if project is None:
                return ZERO
            linked = contracts.get(project.contract_id) if project.contract_id else None
            return aggregation.applicable_rate(project, linked)
        return ZERO

    @staticmethod
    def _entry_client(entry: TimeEntry, clients, contracts, projects) -> Optional[Client]:
        client_id = None
        if entry.contract_id is not None and entry.contract_id in contracts:
            client_id = contracts[entry.contract_id].client_id
        elif entry.project_id is not None and entry.project_id in projects:
            client_id = Reports._project_client_id(projects[entry.project_id], contracts)
        return clients.get(client_id) if client_id is not None else None

    def _entry_listing(self, entry: TimeEntry, lookups: dict, line_model=TimeEntryListing):
        clients, contracts, projects, categories = (
            lookups["clients"], lookups["contracts"], lookups["projects"], lookups["categories"],
        )
        contract = contracts.get(entry.contract_id) if entry.contract_id else None
        project = projects.get(entry.project_id) if entry.project_id else None
        category = categories.get(entry.category_id)
        client = self._entry_client(entry, clients, contracts, projects)

        if client is not None:
            client_name = client.name
        elif project is not None and project.client_name:
            client_name = project.client_name
        else:
            client_name = UNASSIGNED

        fields = dict(
            entry.model_dump(),
            contract_number=contract.contract_number if contract else None,
            project_name=project.name if project else None,
            category_name=category.name if category else "General",
            client_name=client_name,
        )
        if line_model is TimeEntryReportLine:
            fields["client_company"] = client.company if client else None
            fields["hourly_rate"] = self._entry_rate(entry, contracts, projects)
        return line_model(**fields)

    @staticmethod
    def _lookups(uow: UnitOfWork) -> dict:
        return {
            "clients": _by_id(uow.all(Client)),
            "contracts": _by_id(uow.all(Contract)),
            "projects": _by_id(uow.all(Project)),
            "categories": _by_id(uow.all(Category)),
        }

    # ------------------------------------------------------------------
    # Contracts and projects
    # ------------------------------------------------------------------

    def contracts(self, client_id: Optional[int] = None) -> List[ContractListing]:
        with self.store.snapshot(*ALL_COLLECTIONS) as uow:
            clients = _by_id(uow.all(Client))
            entries = uow.all(TimeEntry)
            return [
                self._contract_listing(c, clients, entries)
                for c in uow.all(Contract)
                if client_id is None or c.client_id == client_id
            ]

    def contract(self, contract_id: int) -> ContractListing:
        with self.store.snapshot(*ALL_COLLECTIONS) as uow:
            contract = uow.get(Contract, contract_id)
            if contract is None:
                raise NotFound("Contract", contract_id)
            return self._contract_listing(contract, _by_id(uow.all(Client)), uow.all(TimeEntry))

    def projects(self, contract_id: Optional[int] = None, client_id: Optional[int] = None) -> List[ProjectListing]:
        with self.store.snapshot(*ALL_COLLECTIONS) as uow:
            contracts = _by_id(uow.all(Contract))
            clients = _by_id(uow.all(Client))
            entries = uow.all(TimeEntry)
            return [
                self._project_listing(p, contracts, clients, entries)
                for p in uow.all(Project)
                if (contract_id is None or p.contract_id == contract_id)
                and (client_id is None or self._project_client_id(p, contracts) == client_id)
            ]

    def project(self, project_id: int) -> ProjectListing:
        with self.store.snapshot(*ALL_COLLECTIONS) as uow:
            project = uow.get(Project, project_id)
            if project is None:
                raise NotFound("Project", project_id)
            return self._project_listing(
                project, _by_id(uow.all(Contract)), _by_id(uow.all(Client)), uow.all(TimeEntry),
            )

    # ------------------------------------------------------------------
    # Clients
    # ------------------------------------------------------------------

    @staticmethod
    def _client_stats(client: Client, contracts: List[Contract], projects: List[Project], model=ClientWithStats):
        own_contracts = [c for c in contracts if c.client_id == client.id]
        own_projects = [p for p in projects if p.client_id == client.id]
        contract_value = sum((aggregation.contract_value(c) for c in own_contracts), ZERO)
        project_value = sum((aggregation.project_value(p) for p in own_projects), ZERO)
        fields = dict(
            client.model_dump(),
            contracts_count=len(own_contracts),
            projects_count=len(own_projects),
            total_contract_value=contract_value,
            total_project_value=project_value,
            total_value=contract_value + project_value,
        )
        if model is ClientSummary:
            contract_billed = sum((c.billed_amount for c in own_contracts), ZERO)
            project_billed = sum((p.paid_amount for p in own_projects), ZERO)
            fields.update(
                total_contract_billed=contract_billed,
                total_project_billed=project_billed,
                total_billed=contract_billed + project_billed,
            )
        return model(**fields)

    def clients(self) -> List[ClientWithStats]:
        with self.store.snapshot(*ALL_COLLECTIONS) as uow:
            contracts = uow.all(Contract)
            projects = uow.all(Project)
            return [self._client_stats(c, contracts, projects) for c in uow.all(Client)]

    def client(self, client_id: int) -> ClientWithStats:
        with self.store.snapshot(*ALL_COLLECTIONS) as uow:
            client = uow.get(Client, client_id)
            if client is None:
                raise NotFound("Client", client_id)
            return self._client_stats(client, uow.all(Contract), uow.all(Project))

    def client_summary(self, client_id: int) -> ClientSummary:
        with self.store.snapshot(*ALL_COLLECTIONS) as uow:
            client = uow.get(Client, client_id)
            if client is None:
                raise NotFound("Client", client_id)
            return self._client_stats(client, uow.all(Contract), uow.all(Project), model=ClientSummary)

    # ------------------------------------------------------------------
    # Time entries and payments
    # ------------------------------------------------------------------

    def time_entries(
        self,
        contract_id: Optional[int] = None,
        project_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[TimeEntryListing]:
        """Enriched time entries, newest first."""
        start = start_date.isoformat() if start_date else None
        end = end_date.isoformat() if end_date else None
        with self.store.snapshot(*ALL_COLLECTIONS) as uow:
            lookups = self._lookups(uow)
            entries = [
                e for e in uow.all(TimeEntry)
                if (contract_id is None or e.contract_id == contract_id)
                and (project_id is None or e.project_id == project_id)
                and (start is None or e.entry_date >= start)
                and (end is None or e.entry_date <= end)
            ]
            entries.sort(key=lambda e: (e.entry_date, e.id or 0), reverse=True)
            return [self._entry_listing(e, lookups) for e in entries]

    def time_entry(self, entry_id: int) -> TimeEntryListing:
        with self.store.snapshot(*ALL_COLLECTIONS) as uow:
            entry = uow.get(TimeEntry, entry_id)
            if entry is None:
                raise NotFound("Time entry", entry_id)
            return self._entry_listing(entry, self._lookups(uow))

    def payments(self, contract_id: Optional[int] = None, project_id: Optional[int] = None) -> List[Payment]:
        with self.store.snapshot(Payment.__collection__) as uow:
            payments = [
                p for p in uow.all(Payment)
                if (contract_id is None or p.contract_id == contract_id)
                and (project_id is None or p.project_id == project_id)
            ]
        payments.sort(key=lambda p: (p.payment_date, p.id or 0), reverse=True)
        return payments

    def payment(self, payment_id: int) -> Payment:
        with self.store.snapshot(Payment.__collection__) as uow:
            payment = uow.get(Payment, payment_id)
        if payment is None:
            raise NotFound("Payment", payment_id)
        return payment

    # ------------------------------------------------------------------
    # Reports
    # ------------------------------------------------------------------

    def overview(self) -> Overview:
        with self.store.snapshot(*ALL_COLLECTIONS) as uow:
            contracts = uow.all(Contract)
            projects = uow.all(Project)
            entries = uow.all(TimeEntry)
            contract_map = _by_id(contracts)
            project_map = _by_id(projects)
            billed = sum(
                (e.hours_used * self._entry_rate(e, contract_map, project_map) for e in entries),
                ZERO,
            )
            return Overview(
                total_contracts=len(contracts),
                active_contracts=sum(1 for c in contracts if c.status == ContractStatus.active),
                total_projects=len(projects),
                active_projects=sum(1 for p in projects if p.status == ProjectStatus.active),
                total_used_hours=aggregation.sum_hours(entries),
                total_billed_amount=billed,
            )

    def monthly(self, year: int, month: int) -> List[MonthlyClientLine]:
        """
        Contract hours for one calendar month, grouped by client then contract.

        Each entry is valued at its contract's hourly rate.
        """
        if not 1 <= month <= 12:
            raise ValidationError("month must be between 1 and 12")
        month_year = f"{year:04d}-{month:02d}"

        with self.store.snapshot(*ALL_COLLECTIONS) as uow:
            clients = _by_id(uow.all(Client))
            contracts = _by_id(uow.all(Contract))
            grouped: "OrderedDict[int, MonthlyClientLine]" = OrderedDict()
            lines: Dict[int, MonthlyContractLine] = {}

            entries = sorted(
                (e for e in uow.all(TimeEntry) if e.month_year == month_year and e.contract_id in contracts),
                key=lambda e: (e.entry_date, e.id or 0),
            )
            for entry in entries:
                contract = contracts[entry.contract_id]
                client = clients.get(contract.client_id)
                client_line = grouped.get(contract.client_id)
                if client_line is None:
                    client_line = grouped[contract.client_id] = MonthlyClientLine(
                        client_id=contract.client_id,
                        client_name=client.name if client else UNKNOWN_CLIENT,
                        company=client.company if client else None,
                    )
                contract_line = lines.get(contract.id)
                if contract_line is None:
                    contract_line = lines[contract.id] = MonthlyContractLine(
                        contract_id=contract.id,
                        contract_number=contract.contract_number,
                    )
                    client_line.contracts.append(contract_line)

                amount = entry.hours_used * contract.hourly_rate
                contract_line.hours += entry.hours_used
                contract_line.amount += amount
                client_line.total_hours += entry.hours_used
                client_line.total_amount += amount

            return list(grouped.values())

    def active_contracts(self) -> List[ActiveContractLine]:
        with self.store.snapshot(*ALL_COLLECTIONS) as uow:
            clients = _by_id(uow.all(Client))
            entries = uow.all(TimeEntry)
            report = []
            for contract in uow.all(Contract):
                if contract.status != ContractStatus.active:
                    continue
                linked = aggregation.contract_entries(entries, contract.id)
                used = aggregation.sum_hours(linked)
                client = clients.get(contract.client_id)
                report.append(ActiveContractLine(
                    id=contract.id,
                    contract_number=contract.contract_number,
                    client_name=client.name if client else UNKNOWN_CLIENT,
                    client_company=client.company if client else None,
                    description=contract.description,
                    total_hours=contract.total_hours,
                    used_hours=used,
                    remaining_hours=aggregation.remaining(contract.total_hours, used),
                    hourly_rate=contract.hourly_rate,
                    total_amount=aggregation.contract_value(contract),
                    billed_amount=contract.billed_amount,
                    remaining_amount=aggregation.contract_remaining_amount(contract),
                    progress_percentage=aggregation.progress_percentage(used, contract.total_hours),
                    start_date=contract.start_date,
                    end_date=contract.end_date,
                    last_activity=max((e.entry_date for e in linked), default=None),
                ))
            return report

    def time_entries_report(self, start_date: Optional[date] = None, end_date: Optional[date] = None):
        """Enriched entries in an inclusive date range, with totals."""
        start = start_date.isoformat() if start_date else None
        end = end_date.isoformat() if end_date else None
        with self.store.snapshot(*ALL_COLLECTIONS) as uow:
            lookups = self._lookups(uow)
            entries = [
                e for e in uow.all(TimeEntry)
                if (start is None or e.entry_date >= start) and (end is None or e.entry_date <= end)
            ]
            entries.sort(key=lambda e: (e.entry_date, e.id or 0), reverse=True)
            lines = [self._entry_listing(e, lookups, line_model=TimeEntryReportLine) for e in entries]

        summary = TimeEntryReportSummary(
            total_entries=len(lines),
            total_hours=sum((line.hours_used for line in lines), ZERO),
            total_amount=sum((line.hours_used * line.hourly_rate for line in lines), ZERO),
            start_date=start,
            end_date=end,
        )
        return lines, summary
