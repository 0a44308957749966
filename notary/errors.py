from __future__ import annotations
from typing import Any, Optional


class NotaryError(Exception):
    """Base de toutes les erreurs métier de l'application."""


class PaymentValidationError(NotaryError, ValueError):
    pass


class PaymentNotFoundError(NotaryError, KeyError):
    def __init__(self, payment_id: str):
        super().__init__(payment_id)
        self.payment_id = payment_id

    def __str__(self) -> str:
        return f"Paiement introuvable: {self.payment_id}"


class InvoiceValidationError(NotaryError, ValueError):
    pass


class DeedValidationError(NotaryError, ValueError):
    pass


class RecordNotFoundError(NotaryError, KeyError):
    def __init__(self, entity_name: str, record_id: Any):
        super().__init__(record_id)
        self.entity_name = entity_name
        self.record_id = record_id

    def __str__(self) -> str:
        return f"{self.entity_name} with id={self.record_id} not found"


class PersistenceError(NotaryError, RuntimeError):
    """
    Échec d'écriture du store.
    `record` porte l'enregistrement non persisté (la vue mémoire, elle, est déjà à jour).
    """

    def __init__(self, message: str, record: Optional[Any] = None):
        super().__init__(message)
        self.record = record
