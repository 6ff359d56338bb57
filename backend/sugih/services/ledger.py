"""
Ledger writer.

A transaction and its postings are written as one unit inside a single
database transaction: either the event and its complete posting set are
committed, or nothing is.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from django.conf import settings
from django.db import DEFAULT_DB_ALIAS, transaction
from django.db.models import Exists, OuterRef, Q, Sum
from django.utils import timezone

from sugih.errors import ConflictError, NotFoundError, ValidationError, storage_errors
from sugih.models import Category, Posting, SavingsBucket, Transaction, Wallet
from sugih.services.references import require_active
from sugih.services.transaction_kinds import TransactionInput

logger = logging.getLogger(__name__)

IDEMPOTENCY_CONFLICT = "A transaction with this idempotency key already exists."


@dataclass(frozen=True)
class TransactionFilters:
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    type: Optional[str] = None
    wallet_id: Optional[str] = None
    category_id: Optional[str] = None
    include_deleted: bool = False
    limit: int = 50
    offset: int = 0


@dataclass(frozen=True)
class TransactionStats:
    total_income: int
    total_expense: int
    total_transfers: int
    total_savings_contributions: int
    total_savings_withdrawals: int
    transaction_count: int

    def as_dict(self):
        return {
            "totalIncome": self.total_income,
            "totalExpense": self.total_expense,
            "totalTransfers": self.total_transfers,
            "totalSavingsContributions": self.total_savings_contributions,
            "totalSavingsWithdrawals": self.total_savings_withdrawals,
            "transactionCount": self.transaction_count,
        }


class LedgerWriter:
    def __init__(self, using=DEFAULT_DB_ALIAS):
        self.using = using

    def _transactions(self):
        return Transaction.objects.using(self.using)

    def _with_postings(self, qs):
        return qs.select_related("category").prefetch_related("postings__wallet", "postings__savings_bucket")

    # Reads

    def get_transaction(self, transaction_id, include_deleted=False) -> Transaction:
        qs = self._with_postings(self._transactions().filter(pk=transaction_id))
        if not include_deleted:
            qs = qs.live()
        event = qs.first()
        if event is None:
            raise NotFoundError("Transaction not found.")
        return event

    def list_transactions(self, filters: Optional[TransactionFilters] = None):
        filters = filters or TransactionFilters()
        page_max = settings.SUGIH_TRANSACTION_PAGE_MAX
        if filters.limit < 1 or filters.limit > page_max:
            raise ValidationError("Invalid transaction query.", {"limit": [f"Limit must be between 1 and {page_max}."]})
        if filters.offset < 0:
            raise ValidationError("Invalid transaction query.", {"offset": ["Offset cannot be negative."]})
        if filters.type and filters.type not in dict(Transaction.TYPE_CHOICES):
            raise ValidationError("Invalid transaction query.", {"type": ["Unknown transaction type."]})

        qs = self._transactions().all()
        if not filters.include_deleted:
            qs = qs.live()
        if filters.date_from:
            qs = qs.filter(occurred_at__gte=filters.date_from)
        if filters.date_to:
            qs = qs.filter(occurred_at__lte=filters.date_to)
        if filters.type:
            qs = qs.filter(type=filters.type)
        if filters.category_id:
            qs = qs.filter(category_id=filters.category_id)
        if filters.wallet_id:
            on_wallet = Posting.objects.using(self.using).filter(event=OuterRef("pk"), wallet_id=filters.wallet_id)
            qs = qs.filter(Exists(on_wallet))
        qs = self._with_postings(qs).order_by("-occurred_at", "-created_at")
        return list(qs[filters.offset : filters.offset + filters.limit])

    def transaction_stats(self, date_from=None, date_to=None) -> TransactionStats:
        postings = Posting.objects.using(self.using).filter(event__deleted_at__isnull=True)
        events = self._transactions().live()
        if date_from:
            postings = postings.filter(event__occurred_at__gte=date_from)
            events = events.filter(occurred_at__gte=date_from)
        if date_to:
            postings = postings.filter(event__occurred_at__lte=date_to)
            events = events.filter(occurred_at__lte=date_to)

        rows = postings.order_by().values("event__type").annotate(
            inflow=Sum("amount_idr", filter=Q(amount_idr__gt=0)),
            outflow=Sum("amount_idr", filter=Q(amount_idr__lt=0)),
        )
        totals = {}
        for row in rows:
            # Income has no outgoing leg; every other kind is measured by what left.
            if row["event__type"] == Transaction.INCOME:
                totals[row["event__type"]] = row["inflow"] or 0
            else:
                totals[row["event__type"]] = -(row["outflow"] or 0)

        return TransactionStats(
            total_income=totals.get(Transaction.INCOME, 0),
            total_expense=totals.get(Transaction.EXPENSE, 0),
            total_transfers=totals.get(Transaction.TRANSFER, 0),
            total_savings_contributions=totals.get(Transaction.SAVINGS_CONTRIBUTION, 0),
            total_savings_withdrawals=totals.get(Transaction.SAVINGS_WITHDRAWAL, 0),
            transaction_count=events.count(),
        )

    # Writes

    def _check_references(self, data: TransactionInput):
        for field, wallet_id in zip(self._wallet_fields(data), data.wallet_ids()):
            require_active(Wallet, wallet_id, using=self.using, field=field)
        for bucket_id in data.savings_bucket_ids():
            require_active(SavingsBucket, bucket_id, using=self.using, field="bucketId")
        if data.category_id:
            category = require_active(Category, data.category_id, using=self.using, field="categoryId")
            if category.type != data.type:
                raise ValidationError(
                    f"Category must be an {data.type} category.",
                    {"categoryId": [f"Choose an {data.type} category."]},
                )

    def _wallet_fields(self, data):
        if data.type == Transaction.TRANSFER:
            return ["fromWalletId", "toWalletId"]
        return ["walletId"]

    def _write_postings(self, event, data):
        Posting.objects.using(self.using).bulk_create(
            [
                Posting(
                    event=event,
                    wallet_id=line.wallet_id,
                    savings_bucket_id=line.savings_bucket_id,
                    amount_idr=line.amount_idr,
                )
                for line in data.posting_lines()
            ]
        )

    def create_transaction(self, data: TransactionInput) -> Transaction:
        data.validate()
        if data.idempotency_key:
            existing = self._transactions().filter(idempotency_key=data.idempotency_key).first()
            if existing is not None:
                logger.info("Idempotent replay of transaction %s", existing.pk)
                return self.get_transaction(existing.pk, include_deleted=True)
        self._check_references(data)

        with storage_errors("create transaction", conflict_message=IDEMPOTENCY_CONFLICT):
            with transaction.atomic(using=self.using):
                event = self._transactions().create(
                    type=data.type,
                    occurred_at=data.occurred_at,
                    note=data.note or "",
                    payee=data.payee or "",
                    category_id=data.category_id,
                    idempotency_key=data.idempotency_key or None,
                )
                self._write_postings(event, data)
        logger.info("Created %s transaction %s", event.type, event.pk)
        return self.get_transaction(event.pk)

    def update_transaction(self, transaction_id, data: TransactionInput) -> Transaction:
        """
        Replace the event fields and its entire posting set. The type is fixed at creation.
        """
        data.validate()
        with storage_errors("update transaction"):
            with transaction.atomic(using=self.using):
                event = self._transactions().select_for_update().live().filter(pk=transaction_id).first()
                if event is None:
                    raise NotFoundError("Transaction not found.")
                if event.type != data.type:
                    raise ValidationError(
                        "Transaction type cannot be changed.",
                        {"type": [f"Expected {event.type}, got {data.type}."]},
                    )
                self._check_references(data)

                event.occurred_at = data.occurred_at
                event.note = data.note or ""
                event.payee = data.payee or ""
                event.category_id = data.category_id
                event.save(using=self.using, update_fields=["occurred_at", "note", "payee", "category", "updated_at"])
                Posting.objects.using(self.using).filter(event=event).delete()
                self._write_postings(event, data)
        logger.info("Replaced postings of %s transaction %s", event.type, event.pk)
        return self.get_transaction(event.pk)

    def delete_transaction(self, transaction_id) -> None:
        """
        Soft delete. A second call for the same id reports NotFoundError.
        """
        now = timezone.now()
        with storage_errors("delete transaction"):
            updated = self._transactions().live().filter(pk=transaction_id).update(deleted_at=now, updated_at=now)
        if not updated:
            raise NotFoundError("Transaction not found.")
        logger.info("Soft-deleted transaction %s", transaction_id)

    def restore_transaction(self, transaction_id) -> Transaction:
        event = self.get_transaction(transaction_id, include_deleted=True)
        if not event.is_deleted:
            raise ConflictError("Transaction is not deleted.")
        with storage_errors("restore transaction"):
            updated = (
                self._transactions()
                .deleted()
                .filter(pk=transaction_id)
                .update(deleted_at=None, updated_at=timezone.now())
            )
        if not updated:
            raise ConflictError("Transaction is not deleted.")
        logger.info("Restored transaction %s", transaction_id)
        return self.get_transaction(transaction_id)

    def purge_transaction(self, transaction_id) -> None:
        """Permanently remove a transaction and its postings."""
        event = self.get_transaction(transaction_id, include_deleted=True)
        with storage_errors("purge transaction"):
            with transaction.atomic(using=self.using):
                Posting.objects.using(self.using).filter(event=event).delete()
                event.delete(using=self.using)
        logger.info("Purged transaction %s", transaction_id)
