from __future__ import annotations
import pytest

from notary.models.invoice import ClientSnapshot, Invoice, InvoiceItem
from notary.storage.json_store import JsonStore


@pytest.fixture
def client():
    return ClientSnapshot(id="c-1", name="PT Maju Jaya", address="Jl. Dago 12, Bandung")


@pytest.fixture
def make_invoice(client):
    def _make(*amounts, taxed=False, **kw):
        items = [InvoiceItem(description=f"Jasa {i + 1}", amount=a, is_taxed=taxed) for i, a in enumerate(amounts)]
        kw.setdefault("date", "2025-01-10")
        return Invoice(client=client, items=items, **kw)
    return _make


@pytest.fixture
def store_factory(tmp_path):
    def _make(name="records", **kw):
        kw.setdefault("backup_keep", 2)
        return JsonStore(tmp_path / f"{name}.json", entity_name=name, **kw)
    return _make


class FailingWrite:
    """Remplace JsonStore._write_raw pour simuler un disque en erreur."""

    def __init__(self, message="disk full"):
        self.message = message
        self.calls = 0

    def __call__(self, data):
        self.calls += 1
        raise OSError(self.message)


@pytest.fixture
def failing_write():
    return FailingWrite()
