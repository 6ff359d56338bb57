from django.db import models
from django.db.models import Q

from .base import new_id
from .savings_bucket import SavingsBucket
from .transaction import Transaction
from .wallet import Wallet


class Posting(models.Model):
    """
    Immutable ledger line. Postings are only written and removed together with their
    owning transaction; editing a transaction replaces its whole posting set.
    """

    id = models.CharField(primary_key=True, max_length=36, default=new_id, editable=False)
    event = models.ForeignKey(Transaction, on_delete=models.CASCADE, related_name="postings")
    wallet = models.ForeignKey(
        Wallet,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="postings",
    )
    savings_bucket = models.ForeignKey(
        SavingsBucket,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="postings",
    )
    amount_idr = models.BigIntegerField(help_text="Signed whole rupiah.")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "postings"
        ordering = ["created_at", "id"]
        constraints = [
            models.CheckConstraint(
                condition=~Q(amount_idr=0),
                name="posting_amount_nonzero",
            ),
            models.CheckConstraint(
                condition=(
                    Q(wallet__isnull=False, savings_bucket__isnull=True)
                    | Q(wallet__isnull=True, savings_bucket__isnull=False)
                ),
                name="posting_single_account",
            ),
        ]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Postings are immutable; replace the transaction's posting set instead.")
        super().save(*args, **kwargs)

    def __str__(self):
        holder = self.wallet_id or self.savings_bucket_id
        return f"{self.event_id} {holder} {self.amount_idr}"
