from django.db import models
from django.db.models import Q

from .base import LedgerModel
from .category import Category


class TransactionQuerySet(models.QuerySet):
    def live(self):
        return self.filter(deleted_at__isnull=True)

    def deleted(self):
        return self.filter(deleted_at__isnull=False)


class Transaction(LedgerModel):
    """
    One user-initiated financial event. Money movement lives in its postings.
    Type rules (signs assigned by the ledger writer, never by callers):
    - expense: one wallet posting, negative; category required
    - income: one wallet posting, positive; category optional
    - transfer: two wallet postings, equal and opposite, distinct wallets
    - savings_contribution: wallet negative, bucket positive
    - savings_withdrawal: bucket negative, wallet positive
    Soft-deleted rows (deleted_at set) are excluded from every balance and budget figure.
    """

    EXPENSE = "expense"
    INCOME = "income"
    TRANSFER = "transfer"
    SAVINGS_CONTRIBUTION = "savings_contribution"
    SAVINGS_WITHDRAWAL = "savings_withdrawal"

    TYPE_CHOICES = [
        (EXPENSE, "Expense"),
        (INCOME, "Income"),
        (TRANSFER, "Transfer"),
        (SAVINGS_CONTRIBUTION, "Savings contribution"),
        (SAVINGS_WITHDRAWAL, "Savings withdrawal"),
    ]

    type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    occurred_at = models.DateField()
    note = models.TextField(blank=True)
    payee = models.CharField(max_length=255, blank=True)
    category = models.ForeignKey(
        Category,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="transactions",
    )
    idempotency_key = models.CharField(max_length=64, null=True, blank=True, unique=True)
    deleted_at = models.DateTimeField(null=True, blank=True)

    objects = TransactionQuerySet.as_manager()

    class Meta:
        db_table = "transactions"
        ordering = ["-occurred_at", "-created_at"]
        indexes = [
            models.Index(fields=["occurred_at"], name="transactions_occurred_idx"),
            models.Index(fields=["type", "occurred_at"], name="transactions_type_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(category__isnull=True) | Q(type__in=["expense", "income"]),
                name="transaction_category_kind_check",
            ),
        ]

    @property
    def is_deleted(self):
        return self.deleted_at is not None

    @property
    def display_amount(self):
        """
        Positive magnitude of the movement, read from the prefetched posting set.
        """
        amounts = [p.amount_idr for p in self.postings.all()]
        if not amounts:
            return 0
        if self.type == self.INCOME:
            return amounts[0]
        return max(abs(a) for a in amounts)

    def __str__(self):
        return f"{self.occurred_at} {self.type} {self.id}"
