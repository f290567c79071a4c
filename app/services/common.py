"""Small helpers shared by the service layer."""
from datetime import date
from typing import Any, Dict, Iterable, Optional, Type

from app.core.exceptions import NotFound
from app.db.store import UnitOfWork


def iso(value: Any) -> Any:
    if isinstance(value, date):
        return value.isoformat()
    return value


def require(uow: UnitOfWork, model: Type, record_id: Optional[int], label: str):
    """Fetch a record or raise NotFound."""
    record = uow.get(model, record_id)
    if record is None:
        raise NotFound(label, record_id)
    return record


def changes(data, nullable: Iterable[str] = ()) -> Dict[str, Any]:
    """Fields explicitly sent in an update; None only counts for nullable fields."""
    nullable = set(nullable)
    return {
        key: iso(value)
        for key, value in data.model_dump(exclude_unset=True).items()
        if value is not None or key in nullable
    }
