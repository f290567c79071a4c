"""Clients, categories and users."""

import pytest

from app.core.exceptions import Conflict, HasDependents, Unauthorized, ValidationError
from app.models.user import UserRole
from app.schemas.category import CategoryCreate, CategoryUpdate
from app.schemas.client import ClientUpdate
from app.schemas.project import ProjectCreate
from app.schemas.user import UserCreate, UserUpdate


class TestClients:
    def test_update_merges_fields(self, client_service, customer):
        updated = client_service.update(customer.id, ClientUpdate(phone="555-0100", name=None))

        assert updated.phone == "555-0100"
        assert updated.name == customer.name

    def test_delete_blocked_by_contract(self, client_service, customer, make_contract):
        make_contract()

        with pytest.raises(HasDependents):
            client_service.delete(customer.id)

    def test_delete_blocked_by_linked_project(self, ledger, client_service, customer):
        ledger.create_project(ProjectCreate(name="P", description="D", client_id=customer.id))

        with pytest.raises(HasDependents):
            client_service.delete(customer.id)

    def test_delete_free_client(self, client_service, customer, reports):
        client_service.delete(customer.id)

        assert reports.clients() == []


class TestCategories:
    def test_defaults_seeded_once(self, category_service):
        assert category_service.seed_defaults() == []

        names = [c.name for c in category_service.list()]
        assert "General" in names
        assert category_service.get(1).name == "General"

    def test_general_is_protected(self, category_service):
        with pytest.raises(ValidationError):
            category_service.delete(1)

    def test_used_category_is_protected(self, ledger, category_service, entry_for):
        ledger.record_time_entry(entry_for(1, category_id=2))

        with pytest.raises(HasDependents):
            category_service.delete(2)

    def test_unused_category_can_go(self, category_service):
        category_service.delete(5)

        assert 5 not in [c.id for c in category_service.list(include_inactive=True)]

    def test_names_unique_ignoring_case(self, category_service):
        with pytest.raises(Conflict):
            category_service.create(CategoryCreate(name="general"))

    def test_default_color(self, category_service):
        category = category_service.create(CategoryCreate(name="Training"))

        assert category.color == "#3B82F6"
        assert category.is_active

    def test_toggle_hides_from_default_listing(self, category_service):
        category_service.update(2, CategoryUpdate(toggle_active=True))

        assert 2 not in [c.id for c in category_service.list()]
        assert 2 in [c.id for c in category_service.list(include_inactive=True)]

    def test_rename_conflict(self, category_service):
        with pytest.raises(Conflict):
            category_service.update(2, CategoryUpdate(name="Consulting"))


class TestUsers:
    def make(self, user_service, username="jane", role=UserRole.COLLABORATOR):
        return user_service.create(UserCreate(
            username=username, email=f"{username}@example.com",
            password="pw-123", full_name="Jane Doe", role=role,
        ))

    def test_password_is_hashed(self, user_service):
        user = self.make(user_service)

        assert user.password != "pw-123"
        assert user.password.startswith("$2")

    def test_duplicate_username(self, user_service):
        self.make(user_service)

        with pytest.raises(Conflict):
            self.make(user_service)

    def test_authenticate_stamps_last_login(self, user_service, clock):
        self.make(user_service)

        user = user_service.authenticate("jane", "pw-123")

        assert user.last_login == clock.isoformat()

    def test_wrong_password_and_inactive_user(self, user_service):
        user = self.make(user_service)

        with pytest.raises(Unauthorized):
            user_service.authenticate("jane", "nope")

        user_service.update(user.id, UserUpdate(is_active=False))
        with pytest.raises(Unauthorized):
            user_service.authenticate("jane", "pw-123")

    def test_cannot_delete_self(self, user_service):
        user = self.make(user_service, role=UserRole.ADMIN)

        with pytest.raises(ValidationError):
            user_service.delete(user.id, actor_id=user.id)
