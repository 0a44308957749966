import random

import pytest

from notary.errors import PaymentNotFoundError, PaymentValidationError
from notary.models.invoice import LEGACY_PAYMENT_ID, PaymentInput
from notary.services import ledger_service as ledger
from notary.services.totals_service import grand_total


def pay(amount, date="2025-01-15", note=None):
    return PaymentInput(date=date, amount=amount, note=note)


def assert_status_invariant(inv):
    paid = sum(p.amount for p in inv.payment_history)
    assert (inv.status == "PAID") == (paid >= grand_total(inv.items))
    assert inv.payment_amount == paid


# ---------- vue effective / ancien format ----------

def test_effective_history_empty(make_invoice):
    assert ledger.effective_history(make_invoice(1000)) == []


def test_effective_history_returns_stored_history(make_invoice):
    inv = ledger.add_payment(make_invoice(1000), pay(400))
    assert ledger.effective_history(inv) == inv.payment_history


def test_legacy_scalar_payment_is_exposed_as_sentinel(make_invoice):
    inv = make_invoice(500000, payment_amount=500000, date="2025-01-02")
    history = ledger.effective_history(inv)
    assert len(history) == 1
    assert history[0].id == LEGACY_PAYMENT_ID
    assert history[0].amount == 500000
    assert history[0].date == "2025-01-02"  # pas de payment_date -> date de facture
    assert history[0].note == "previous payment"
    # simple vue : rien n'est matérialisé
    assert inv.payment_history == []


def test_legacy_sentinel_uses_legacy_payment_date(make_invoice):
    inv = make_invoice(500000, payment_amount=200000, payment_date="2025-01-20")
    assert ledger.effective_history(inv)[0].date == "2025-01-20"
    assert ledger.total_paid(inv) == 200000
    assert ledger.remaining_balance(inv) == 300000


# ---------- ajout ----------

def test_full_payment_flips_status_to_paid(make_invoice):
    inv = make_invoice(1_000_000)
    assert inv.status == "UNPAID"
    paid = ledger.add_payment(inv, pay(1_000_000, note="Transfer BCA"))
    assert paid.status == "PAID"
    assert ledger.remaining_balance(paid) == 0
    assert paid.id == inv.id
    assert paid.payment_amount == 1_000_000
    assert paid.payment_date == "2025-01-15"
    assert paid.total_amount == 1_000_000
    # l'original n'est pas modifié
    assert inv.payment_history == [] and inv.status == "UNPAID"


def test_partial_payment_stays_unpaid(make_invoice):
    inv = ledger.add_payment(make_invoice(1_000_000), pay(400_000))
    assert inv.status == "UNPAID"
    assert ledger.remaining_balance(inv) == 600_000


def test_status_uses_grand_total_with_withholding(make_invoice):
    # 100000 taxé -> brut 102564, retenue 2564, total 100000
    inv = make_invoice(100000, taxed=True)
    assert ledger.add_payment(inv, pay(99_999)).status == "UNPAID"
    assert ledger.add_payment(inv, pay(100_000)).status == "PAID"


@pytest.mark.parametrize("amount", [0, -1, -500000])
def test_add_rejects_non_positive_amount(make_invoice, amount):
    inv = make_invoice(1000)
    with pytest.raises(PaymentValidationError):
        ledger.add_payment(inv, pay(amount))
    assert inv.payment_history == []


def test_payment_date_is_last_entered_not_latest(make_invoice):
    inv = ledger.add_payment(make_invoice(1000), pay(100, date="2025-03-01"))
    inv = ledger.add_payment(inv, pay(100, date="2025-02-01"))
    assert inv.payment_date == "2025-02-01"


def test_add_materializes_legacy_payment(make_invoice):
    inv = make_invoice(1000, payment_amount=300, payment_date="2024-12-30")
    inv = ledger.add_payment(inv, pay(200))
    ids = [p.id for p in inv.payment_history]
    assert ids[0] == LEGACY_PAYMENT_ID
    assert len(ids) == 2 and len(set(ids)) == 2
    assert inv.payment_amount == 500


# ---------- modification ----------

def test_edit_replaces_fields_and_recomputes(make_invoice):
    inv = ledger.add_payment(make_invoice(1000), pay(400))
    pid = inv.payment_history[0].id
    inv = ledger.edit_payment(inv, pid, pay(1000, date="2025-02-01", note="lunas"))
    assert inv.status == "PAID"
    assert inv.payment_history[0].id == pid
    assert inv.payment_history[0].note == "lunas"
    assert inv.payment_date == "2025-02-01"

    inv = ledger.edit_payment(inv, pid, pay(10))
    assert inv.status == "UNPAID"
    assert_status_invariant(inv)


def test_edit_legacy_sentinel_materializes_it(make_invoice):
    inv = make_invoice(1000, payment_amount=300)
    inv = ledger.edit_payment(inv, LEGACY_PAYMENT_ID, pay(400, date="2024-12-01"))
    assert [(p.id, p.amount) for p in inv.payment_history] == [(LEGACY_PAYMENT_ID, 400)]
    assert inv.payment_amount == 400
    assert inv.payment_date == "2024-12-01"

    inv = ledger.edit_payment(inv, LEGACY_PAYMENT_ID, pay(450))
    assert sum(1 for p in inv.payment_history if p.id == LEGACY_PAYMENT_ID) == 1


def test_edit_rejects_non_positive_amount(make_invoice):
    inv = ledger.add_payment(make_invoice(1000), pay(400))
    with pytest.raises(PaymentValidationError):
        ledger.edit_payment(inv, inv.payment_history[0].id, pay(0))


def test_edit_unknown_payment(make_invoice):
    inv = ledger.add_payment(make_invoice(1000), pay(400))
    with pytest.raises(PaymentNotFoundError):
        ledger.edit_payment(inv, "nope", pay(10))


# ---------- suppression ----------

def test_deleting_only_payment_resets_date_and_status(make_invoice):
    inv = ledger.add_payment(make_invoice(1000), pay(1000))
    assert inv.status == "PAID"
    inv = ledger.delete_payment(inv, inv.payment_history[0].id)
    assert inv.payment_history == []
    assert inv.payment_date == ""
    assert inv.status == "UNPAID"
    assert inv.payment_amount == 0


def test_delete_uses_greatest_remaining_iso_date(make_invoice):
    inv = make_invoice(10_000)
    for d in ("2025-01-05", "2025-03-02", "2025-02-10"):
        inv = ledger.add_payment(inv, pay(100, date=d))
    target = next(p for p in inv.payment_history if p.date == "2025-03-02")
    inv = ledger.delete_payment(inv, target.id)
    assert inv.payment_date == "2025-02-10"


def test_add_then_delete_restores_previous_state(make_invoice):
    inv = ledger.add_payment(make_invoice(500), pay(300))
    before = (ledger.total_paid(inv), inv.status)
    added = ledger.add_payment(inv, pay(200))
    assert added.status == "PAID"
    new_id = added.payment_history[-1].id
    restored = ledger.delete_payment(added, new_id)
    assert (ledger.total_paid(restored), restored.status) == before


def test_deleting_materialized_legacy_is_not_invertible(make_invoice):
    inv = make_invoice(1000, payment_amount=300)
    inv = ledger.add_payment(inv, pay(200))
    inv = ledger.delete_payment(inv, LEGACY_PAYMENT_ID)
    assert [p.amount for p in inv.payment_history] == [200]
    assert inv.payment_amount == 200
    # l'ancien montant ne réapparaît pas
    assert all(p.id != LEGACY_PAYMENT_ID for p in ledger.effective_history(inv))


def test_deleting_unmaterialized_legacy_clears_it(make_invoice):
    inv = make_invoice(500, payment_amount=500, payment_date="2024-11-11", status="PAID")
    inv = ledger.delete_payment(inv, LEGACY_PAYMENT_ID)
    assert inv.payment_history == []
    assert inv.payment_amount == 0
    assert inv.payment_date == ""
    assert inv.status == "UNPAID"
    assert ledger.effective_history(inv) == []


def test_delete_unknown_payment(make_invoice):
    with pytest.raises(PaymentNotFoundError):
        ledger.delete_payment(make_invoice(1000), "nope")
    inv = ledger.add_payment(make_invoice(1000), pay(10))
    with pytest.raises(PaymentNotFoundError):
        ledger.delete_payment(inv, "nope")


# ---------- invariant de statut ----------

@pytest.mark.parametrize("seed", range(5))
def test_status_invariant_over_random_operations(make_invoice, seed):
    rng = random.Random(seed)
    inv = make_invoice(250_000, 150_000, taxed=bool(seed % 2))
    for _ in range(60):
        op = rng.choice(["add", "add", "edit", "delete"])
        if op == "add" or not inv.payment_history:
            inv = ledger.add_payment(inv, pay(rng.randint(1, 200_000), date=f"2025-0{rng.randint(1, 9)}-1{rng.randint(0, 9)}"))
        elif op == "edit":
            pid = rng.choice(inv.payment_history).id
            inv = ledger.edit_payment(inv, pid, pay(rng.randint(1, 200_000)))
        else:
            inv = ledger.delete_payment(inv, rng.choice(inv.payment_history).id)
        assert_status_invariant(inv)
