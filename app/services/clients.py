from typing import Optional

from app.core.clock import Clock, SystemClock
from app.core.exceptions import HasDependents
from app.core.logging_config import get_logger
from app.db.store import EntityStore
from app.models.client import Client
from app.models.contract import Contract
from app.models.project import Project
from app.schemas.client import ClientCreate, ClientUpdate
from app.services.common import changes, require

logger = get_logger("clients")

NULLABLE_FIELDS = ("phone", "address", "company", "tax_id", "contact_person", "website", "notes")


class ClientService:
    """Create, update and delete clients. Listings live in ``Reports``."""

    def __init__(self, store: EntityStore, clock: Optional[Clock] = None):
        self.store = store
        self.clock = clock or SystemClock()

    def create(self, data: ClientCreate) -> Client:
        with self.store.transaction(Client.__collection__) as uow:
            now = self.clock.isoformat()
            client = Client(**data.model_dump(), created_at=now, updated_at=now)
            uow.add(client)
        logger.info("client_created", extra={"client_id": client.id})
        return client

    def update(self, client_id: int, data: ClientUpdate) -> Client:
        with self.store.transaction(Client.__collection__) as uow:
            client = require(uow, Client, client_id, "Client")
            updates = changes(data, nullable=NULLABLE_FIELDS)
            for key, value in updates.items():
                setattr(client, key, value)
            client.updated_at = self.clock.isoformat()
            uow.put(client)
        logger.info("client_updated", extra={"client_id": client_id, "fields": sorted(updates)})
        return client

    def delete(self, client_id: int) -> Client:
        """
        Delete a client that no contract and no contract-linked project
        references. Independent projects only carry a free-text client name
        and never block.
        """
        names = (Client.__collection__, Contract.__collection__, Project.__collection__)
        with self.store.transaction(*names) as uow:
            client = require(uow, Client, client_id, "Client")
            if any(c.client_id == client_id for c in uow.all(Contract)):
                raise HasDependents("Client cannot be deleted because it has contracts")
            if any(p.client_id == client_id and not p.is_independent for p in uow.all(Project)):
                raise HasDependents("Client cannot be deleted because it has projects")
            uow.remove(Client, client_id)
        logger.info("client_deleted", extra={"client_id": client_id})
        return client
