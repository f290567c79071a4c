"""Read views: listings, client summary and dashboard reports."""
from datetime import date
from decimal import Decimal

import pytest

from app.core.exceptions import NotFound, ValidationError
from app.schemas.client import ClientCreate, ClientUpdate
from app.schemas.contract import ContractUpdate
from app.schemas.payment import PaymentCreate
from app.schemas.project import ProjectCreate, ProjectUpdate


class TestListings:
    def test_contract_listing_fields(self, ledger, reports, make_contract, customer, entry_for):
        contract = make_contract(total_hours="10", hourly_rate="50")
        ledger.record_time_entry(entry_for(3, contract_id=contract.id))
        ledger.record_payment(
            PaymentCreate(amount=Decimal("200"), payment_date=date(2024, 4, 1)), contract_id=contract.id,
        )

        listing = reports.contracts()[0]

        assert listing.client_name == customer.name
        assert listing.used_hours == Decimal("3")
        assert listing.remaining_hours == Decimal("7")
        assert listing.total_value == Decimal("500")
        assert listing.billed_amount == Decimal("200")
        assert listing.remaining_amount == Decimal("300")
        assert listing.entries_count == 1

    def test_contract_filter_by_client(self, reports, client_service, make_contract):
        make_contract()
        other = client_service.create(ClientCreate(name="Other", email="other@example.com"))

        assert len(reports.contracts(client_id=other.id)) == 0
        assert len(reports.contracts()) == 1

    def test_project_listing(self, ledger, reports, make_independent_project, entry_for):
        project = make_independent_project(hourly_rate="40", estimated_hours="20")
        ledger.record_time_entry(entry_for(5, project_id=project.id))

        listing = reports.project(project.id)

        assert listing.used_hours == Decimal("5")
        assert listing.remaining_hours == Decimal("15")
        assert listing.current_cost == Decimal("200")
        assert listing.contract_number is None

    def test_project_client_name_follows_renames(self, ledger, reports, client_service, make_contract, customer):
        contract = make_contract()
        project = ledger.create_project(ProjectCreate(name="Linked", description="D", contract_id=contract.id))

        client_service.update(customer.id, ClientUpdate(name="Renamed Co"))

        assert reports.project(project.id).client_name == "Renamed Co"

    def test_project_moves_with_its_contract(self, ledger, reports, client_service, make_contract, customer):
        project = ledger.create_project(
            ProjectCreate(name="Linked", description="D", contract_id=make_contract().id),
        )
        other = client_service.create(ClientCreate(name="Beta", email="beta@example.com"))

        ledger.update_project(project.id, ProjectUpdate(contract_id=make_contract(client_id=other.id).id))

        assert reports.project(project.id).client_name == "Beta"
        assert [p.id for p in reports.projects(client_id=other.id)] == [project.id]
        assert reports.projects(client_id=customer.id) == []

    def test_independent_project_client_label(self, reports, make_independent_project):
        named = make_independent_project()
        anonymous = make_independent_project(client_name=None)

        assert reports.project(named.id).client_name == "Walk-in customer"
        assert reports.project(anonymous.id).client_name == "Independent client"

    def test_time_entry_listing_is_enriched(self, ledger, reports, make_contract, customer, entry_for):
        contract = make_contract()
        ledger.record_time_entry(entry_for(1, contract_id=contract.id, category_id=3))
        ledger.record_time_entry(entry_for(1, entry_date=date(2024, 3, 20)))

        newest, oldest = reports.time_entries()

        assert newest.entry_date == "2024-03-20"
        assert newest.client_name == "Unassigned"
        assert oldest.contract_number == contract.contract_number
        assert oldest.client_name == customer.name
        assert oldest.category_name == "Technical Support"

    def test_time_entry_date_range(self, ledger, reports, entry_for):
        ledger.record_time_entry(entry_for(1, entry_date=date(2024, 1, 10)))
        ledger.record_time_entry(entry_for(1, entry_date=date(2024, 2, 10)))

        entries = reports.time_entries(start_date=date(2024, 2, 1), end_date=date(2024, 2, 29))

        assert [e.entry_date for e in entries] == ["2024-02-10"]

    def test_missing_records(self, reports):
        with pytest.raises(NotFound):
            reports.contract(1)
        with pytest.raises(NotFound):
            reports.payment(1)


class TestClientSummary:
    def test_totals(self, ledger, reports, make_contract, customer):
        first = make_contract(total_hours="10", hourly_rate="50")
        make_contract(total_hours="4", hourly_rate="100")
        ledger.create_project(ProjectCreate(name="Linked", description="D", contract_id=first.id))
        ledger.record_payment(PaymentCreate(amount=Decimal("120"), payment_date=date(2024, 4, 1)), contract_id=first.id)

        summary = reports.client_summary(customer.id)

        assert summary.contracts_count == 2
        assert summary.projects_count == 1
        assert summary.total_contract_value == Decimal("900")
        assert summary.total_project_value == 0
        assert summary.total_value == Decimal("900")
        assert summary.total_contract_billed == Decimal("120")
        assert summary.total_billed == Decimal("120")

    def test_listing_has_stats(self, reports, make_contract, customer):
        make_contract(total_hours="2", hourly_rate="10")

        (listed,) = reports.clients()

        assert listed.id == customer.id
        assert listed.contracts_count == 1
        assert listed.total_value == Decimal("20")


class TestReports:
    def test_overview(self, ledger, reports, make_contract, make_independent_project, entry_for):
        contract = make_contract(hourly_rate="50")
        project = make_independent_project(hourly_rate="40")
        ledger.record_time_entry(entry_for(2, contract_id=contract.id))
        ledger.record_time_entry(entry_for(1, project_id=project.id))
        ledger.update_contract(contract.id, ContractUpdate(status="completed"))

        overview = reports.overview()

        assert overview.total_contracts == 1
        assert overview.active_contracts == 0
        assert overview.total_projects == 1
        assert overview.active_projects == 1
        assert overview.total_used_hours == Decimal("3")
        assert overview.total_billed_amount == Decimal("140")

    def test_monthly_groups_by_client_and_contract(self, ledger, reports, client_service, make_contract, entry_for):
        first = make_contract(hourly_rate="50")
        second = make_contract(hourly_rate="20")
        other = client_service.create(ClientCreate(name="Beta", email="beta@example.com"))
        third = make_contract(hourly_rate="10", client_id=other.id)
        ledger.record_time_entry(entry_for(2, contract_id=first.id, entry_date=date(2024, 3, 1)))
        ledger.record_time_entry(entry_for(1, contract_id=first.id, entry_date=date(2024, 3, 2)))
        ledger.record_time_entry(entry_for(3, contract_id=second.id, entry_date=date(2024, 3, 3)))
        ledger.record_time_entry(entry_for(4, contract_id=third.id, entry_date=date(2024, 3, 4)))
        ledger.record_time_entry(entry_for(5, contract_id=first.id, entry_date=date(2024, 4, 1)))

        acme, beta = reports.monthly(2024, 3)

        assert acme.total_hours == Decimal("6")
        assert acme.total_amount == Decimal("210")
        assert [line.contract_number for line in acme.contracts] == [first.contract_number, second.contract_number]
        assert acme.contracts[0].hours == Decimal("3")
        assert beta.client_name == "Beta"
        assert beta.total_amount == Decimal("40")

    def test_monthly_rejects_bad_month(self, reports):
        with pytest.raises(ValidationError):
            reports.monthly(2024, 13)

    def test_active_contracts(self, ledger, reports, make_contract, entry_for):
        contract = make_contract(total_hours="8", hourly_rate="25")
        ledger.record_time_entry(entry_for(2, contract_id=contract.id, entry_date=date(2024, 3, 1)))
        ledger.record_time_entry(entry_for(4, contract_id=contract.id, entry_date=date(2024, 3, 9)))

        (line,) = reports.active_contracts()

        assert line.used_hours == Decimal("6")
        assert line.remaining_hours == Decimal("2")
        assert line.progress_percentage == Decimal("75")
        assert line.total_amount == Decimal("200")
        assert line.last_activity == "2024-03-09"

    def test_time_entries_report_totals(self, ledger, reports, make_contract, entry_for):
        contract = make_contract(hourly_rate="30")
        ledger.record_time_entry(entry_for(2, contract_id=contract.id, entry_date=date(2024, 3, 1)))
        ledger.record_time_entry(entry_for(1, contract_id=contract.id, entry_date=date(2024, 5, 1)))

        lines, summary = reports.time_entries_report(date(2024, 3, 1), date(2024, 3, 31))

        assert len(lines) == 1
        assert lines[0].client_company == "Acme"
        assert lines[0].hourly_rate == Decimal("30")
        assert summary.total_entries == 1
        assert summary.total_hours == Decimal("2")
        assert summary.total_amount == Decimal("60")
