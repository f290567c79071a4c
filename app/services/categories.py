"""
Hour categories.

Category 1 ("General") is the default for uncategorized time entries and can
never be deleted. Names are unique ignoring case.
"""
from typing import List, Optional

from app.core.clock import Clock, SystemClock
from app.core.config import settings
from app.core.exceptions import Conflict, HasDependents, NotFound, ValidationError
from app.core.logging_config import get_logger
from app.db.store import EntityStore, UnitOfWork
from app.models.category import Category
from app.models.time_entry import GENERAL_CATEGORY_ID, TimeEntry
from app.schemas.category import CategoryCreate, CategoryUpdate
from app.services.common import changes, require

logger = get_logger("categories")

DEFAULT_CATEGORIES = (
    ("General", "Uncategorized hours", "#10B981"),
    ("Project Work", "Hours spent on a specific project", "#3B82F6"),
    ("Technical Support", "Support and maintenance", "#F59E0B"),
    ("Consulting", "Advisory and consulting hours", "#8B5CF6"),
    ("Emergency", "Urgent out-of-hours work", "#EF4444"),
)


def _check_unique(uow: UnitOfWork, name: str, exclude_id: Optional[int] = None) -> None:
    wanted = name.strip().lower()
    for category in uow.all(Category):
        if category.id != exclude_id and category.name.strip().lower() == wanted:
            raise Conflict(f"A category named '{name}' already exists")


class CategoryService:
    def __init__(self, store: EntityStore, clock: Optional[Clock] = None):
        self.store = store
        self.clock = clock or SystemClock()

    def seed_defaults(self) -> List[Category]:
        """Create the default categories when the collection is empty. Returns what was created."""
        created = []
        with self.store.transaction(Category.__collection__) as uow:
            if uow.all(Category):
                return created
            now = self.clock.isoformat()
            for name, description, color in DEFAULT_CATEGORIES:
                created.append(uow.add(Category(
                    name=name, description=description, color=color, created_at=now, updated_at=now,
                )))
        logger.info("categories_seeded", extra={"count": len(created)})
        return created

    def list(self, include_inactive: bool = False) -> List[Category]:
        with self.store.snapshot(Category.__collection__) as uow:
            categories = uow.all(Category)
        if not include_inactive:
            categories = [c for c in categories if c.is_active]
        return sorted(categories, key=lambda c: c.name.lower())

    def get(self, category_id: int) -> Category:
        with self.store.snapshot(Category.__collection__) as uow:
            category = uow.get(Category, category_id)
        if category is None:
            raise NotFound("Category", category_id)
        return category

    def create(self, data: CategoryCreate) -> Category:
        with self.store.transaction(Category.__collection__) as uow:
            _check_unique(uow, data.name)
            now = self.clock.isoformat()
            category = Category(
                name=data.name.strip(),
                description=data.description,
                color=data.color or settings.DEFAULT_CATEGORY_COLOR,
                is_active=data.is_active,
                created_at=now,
                updated_at=now,
            )
            uow.add(category)
        logger.info("category_created", extra={"category_id": category.id})
        return category

    def update(self, category_id: int, data: CategoryUpdate) -> Category:
        with self.store.transaction(Category.__collection__) as uow:
            category = require(uow, Category, category_id, "Category")
            if data.toggle_active:
                category.is_active = not category.is_active
            else:
                updates = changes(data, nullable=("description",))
                updates.pop("toggle_active", None)
                if "name" in updates:
                    _check_unique(uow, updates["name"], exclude_id=category_id)
                    updates["name"] = updates["name"].strip()
                for key, value in updates.items():
                    setattr(category, key, value)
            category.updated_at = self.clock.isoformat()
            uow.put(category)
        logger.info("category_updated", extra={"category_id": category_id, "is_active": category.is_active})
        return category

    def delete(self, category_id: int) -> Category:
        if category_id == GENERAL_CATEGORY_ID:
            raise ValidationError("The General category cannot be deleted")
        with self.store.transaction(Category.__collection__, TimeEntry.__collection__) as uow:
            category = require(uow, Category, category_id, "Category")
            in_use = sum(1 for e in uow.all(TimeEntry) if e.category_id == category_id)
            if in_use:
                raise HasDependents(f"Category is used by {in_use} time entries")
            uow.remove(Category, category_id)
        logger.info("category_deleted", extra={"category_id": category_id})
        return category
