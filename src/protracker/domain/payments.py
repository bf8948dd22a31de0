"""Payment ledger reconciliation.

An invoice's ``paid_amount``, ``tds_received`` and ``payment_status`` are
derived from its payments and are recomputed from the whole ledger every time
the ledger changes. Recomputing is idempotent, so the bulk pass run at startup
is safe to repeat.
"""

import dataclasses
import logging
import uuid
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from protracker.domain import errors
from protracker.domain.entities import (
    ZERO,
    Invoice,
    InvoiceStatus,
    Payment,
    PaymentStatus,
    WorkingSet,
)
from protracker.domain.entity_store import EntityStore, StorageKeys
from protracker.domain.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def classify_settlement(settled: Decimal, total_amount: Decimal) -> PaymentStatus:
    """Classify a settled amount against an invoice total."""
    if settled >= total_amount:
        return PaymentStatus.PAID
    if settled > ZERO:
        return PaymentStatus.PARTIALLY_PAID
    return PaymentStatus.UNPAID


def reconcile_invoice(invoice: Invoice, payments: Iterable[Payment]) -> Invoice:
    """Recompute an invoice's derived payment fields from its ledger.

    Payments for other invoices are ignored. Totals are clamped at zero.
    ``status`` is forced to Paid once the invoice is settled and otherwise
    left as it was.
    """
    ledger = [p for p in payments if p.invoice_id == invoice.id]
    paid = max(sum((p.amount for p in ledger), ZERO), ZERO)
    tds = max(sum((p.tds_amount or ZERO for p in ledger), ZERO), ZERO)

    payment_status = classify_settlement(paid + tds, invoice.total_amount)
    status = InvoiceStatus.PAID if payment_status is PaymentStatus.PAID else invoice.status
    return dataclasses.replace(
        invoice,
        paid_amount=paid,
        tds_received=tds,
        payment_status=payment_status,
        status=status,
    )


def reconcile_all(invoices: Iterable[Invoice], payments: Iterable[Payment]) -> list[Invoice]:
    """Reconcile every invoice against the full payment collection."""
    by_invoice: dict[str, list[Payment]] = defaultdict(list)
    for payment in payments:
        by_invoice[payment.invoice_id].append(payment)
    return [reconcile_invoice(invoice, by_invoice.get(invoice.id, [])) for invoice in invoices]


class PaymentService:
    """Service for recording and removing payments on a working set."""

    def __init__(self, store: EntityStore):
        """Initialize payment service.

        Args:
            store: Primary-tier store holding the migration flag
        """
        self.store = store

    def add_payment(
        self,
        working_set: WorkingSet,
        invoice_id: str,
        amount: Decimal,
        tds_amount: Optional[Decimal] = None,
        payment_date: Optional[date] = None,
        method: str = "",
        notes: str = "",
    ) -> Payment:
        """Record a payment and reconcile its invoice.

        Raises:
            NotFoundError: If the invoice doesn't exist
            ValidationError: If an amount is negative
        """
        self._require_invoice(working_set, invoice_id)
        if amount < ZERO:
            raise ValidationError(errors.negative_amount("Payment amount", amount))
        if tds_amount is not None and tds_amount < ZERO:
            raise ValidationError(errors.negative_amount("TDS amount", tds_amount))

        payment = Payment(
            id=uuid.uuid4().hex,
            invoice_id=invoice_id,
            amount=amount,
            date=payment_date,
            tds_amount=tds_amount,
            method=method,
            notes=notes,
        )
        working_set.payments.append(payment)
        self._reconcile(working_set, invoice_id)
        return payment

    def remove_payment(self, working_set: WorkingSet, payment_id: str) -> Payment:
        """Delete a payment and reconcile its invoice.

        Raises:
            NotFoundError: If the payment doesn't exist
        """
        payment = next((p for p in working_set.payments if p.id == payment_id), None)
        if payment is None:
            raise NotFoundError(errors.payment_not_found(payment_id))

        working_set.payments = [p for p in working_set.payments if p.id != payment_id]
        self._reconcile(working_set, payment.invoice_id)
        return payment

    def payments_for_invoice(self, working_set: WorkingSet, invoice_id: str) -> list[Payment]:
        """List the payments recorded against an invoice."""
        return [p for p in working_set.payments if p.invoice_id == invoice_id]

    def reconcile_working_set(self, working_set: WorkingSet) -> None:
        """Reconcile every invoice in the working set."""
        working_set.invoices = reconcile_all(working_set.invoices, working_set.payments)

    def run_startup_migration(self, working_set: WorkingSet) -> bool:
        """Run the one-time bulk reconcile if it hasn't run yet.

        Returns:
            True if the migration ran
        """
        if self.store.read(StorageKeys.PAYMENT_STATUS_MIGRATION, False) is True:
            return False

        logger.info("Running payment status migration over %d invoice(s)", len(working_set.invoices))
        self.reconcile_working_set(working_set)
        for invoice in working_set.invoices:
            logger.debug(
                "Invoice %s: paid=%s tds=%s total=%s status=%s",
                invoice.invoice_number,
                invoice.paid_amount,
                invoice.tds_received,
                invoice.total_amount,
                invoice.payment_status.value,
            )
        if not self.store.write(StorageKeys.PAYMENT_STATUS_MIGRATION, True):
            logger.warning("Payment status migration flag could not be recorded")
        return True

    def _require_invoice(self, working_set: WorkingSet, invoice_id: str) -> Invoice:
        for invoice in working_set.invoices:
            if invoice.id == invoice_id:
                return invoice
        raise NotFoundError(errors.invoice_not_found(invoice_id))

    def _reconcile(self, working_set: WorkingSet, invoice_id: str) -> None:
        ledger = self.payments_for_invoice(working_set, invoice_id)
        working_set.invoices = [
            reconcile_invoice(invoice, ledger) if invoice.id == invoice_id else invoice
            for invoice in working_set.invoices
        ]
