from django.db import models

from .base import LedgerModel


class Wallet(LedgerModel):
    """
    Where money lives. Balance is always derived from postings (no stored balance column).
    """

    WALLET_TYPES = [
        ("cash", "Cash"),
        ("bank", "Bank"),
        ("ewallet", "E-wallet"),
        ("other", "Other"),
    ]

    name = models.CharField(max_length=255, unique=True)
    wallet_type = models.CharField(max_length=10, choices=WALLET_TYPES, default="bank")
    archived = models.BooleanField(
        default=False,
        help_text="Archive instead of delete. Archived wallets stay in history but reject new activity.",
    )

    class Meta:
        db_table = "wallets"
        ordering = ["name"]

    def delete(self, using=None, keep_parents=False):
        """
        Wallets with ledger history can only be archived.
        """
        if self.postings.exists():
            raise models.ProtectedError("Cannot delete wallet with transactions; archive it instead.", {self})
        return super().delete(using=using, keep_parents=keep_parents)

    def __str__(self):
        return self.name
