"""Entity store backends and the unit-of-work contract."""
import json

import pytest
from sqlmodel import create_engine

from app.core.exceptions import StorageError
from app.db.store import JsonFileStore, SqlStore
from app.models.client import Client
from app.models.contract import Contract


@pytest.fixture(params=["json", "sql"])
def backend(request, tmp_path):
    if request.param == "json":
        return JsonFileStore(str(tmp_path / "collections"))
    engine = create_engine(f"sqlite:///{tmp_path / 'ledger.db'}", connect_args={"check_same_thread": False})
    return SqlStore(engine)


def add_client(store, name):
    with store.transaction("clients") as uow:
        return uow.add(Client(name=name, email=f"{name.lower()}@example.com"))


class TestEntityStore:
    def test_missing_collection_is_empty(self, backend):
        assert backend.load("clients") == []

    def test_ids_are_max_plus_one(self, backend):
        first = add_client(backend, "A")
        second = add_client(backend, "B")
        third = add_client(backend, "C")

        with backend.transaction("clients") as uow:
            uow.remove(Client, second.id)

        assert (first.id, second.id, third.id) == (1, 2, 3)
        assert add_client(backend, "D").id == 4

    def test_records_round_trip(self, backend):
        add_client(backend, "Acme")

        with backend.snapshot("clients") as uow:
            (client,) = uow.all(Client)

        assert client.name == "Acme"
        assert client.is_active

    def test_failed_block_writes_nothing(self, backend):
        with pytest.raises(RuntimeError):
            with backend.transaction("clients") as uow:
                uow.add(Client(name="Ghost", email="ghost@example.com"))
                raise RuntimeError("boom")

        assert backend.load("clients") == []

    def test_multi_collection_commit(self, backend):
        with backend.transaction("clients", "contracts") as uow:
            client = uow.add(Client(name="Acme", email="a@example.com"))
            uow.add(Contract(client_id=client.id, contract_number="C-1", total_hours=1, hourly_rate=1))

        assert len(backend.load("clients")) == 1
        assert len(backend.load("contracts")) == 1

    def test_snapshot_is_read_only(self, backend):
        with backend.snapshot("clients") as uow:
            with pytest.raises(StorageError):
                uow.add(Client(name="X", email="x@example.com"))

    def test_undeclared_collection_rejected(self, backend):
        with backend.transaction("clients") as uow:
            with pytest.raises(StorageError):
                uow.all(Contract)

    def test_put_unknown_record(self, backend):
        with pytest.raises(StorageError):
            with backend.transaction("clients") as uow:
                uow.put(Client(id=9, name="X", email="x@example.com"))


class TestJsonFileStore:
    def test_writes_pretty_json_array(self, tmp_path):
        store = JsonFileStore(str(tmp_path))
        add_client(store, "Acme")

        data = json.loads((tmp_path / "clients.json").read_text(encoding="utf-8"))

        assert data[0]["name"] == "Acme"
        assert not list(tmp_path.glob(".clients.*.tmp"))

    def test_malformed_file_raises(self, tmp_path):
        (tmp_path / "clients.json").write_text("{not json", encoding="utf-8")
        store = JsonFileStore(str(tmp_path))

        with pytest.raises(StorageError):
            store.load("clients")

    def test_non_array_file_raises(self, tmp_path):
        (tmp_path / "clients.json").write_text('{"id": 1}', encoding="utf-8")

        with pytest.raises(StorageError):
            JsonFileStore(str(tmp_path)).load("clients")
