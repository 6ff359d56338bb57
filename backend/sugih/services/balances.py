"""
Balances are never stored. Each call sums the postings of non-deleted
transactions, so there is no running total to drift out of sync.
"""

from django.db import DEFAULT_DB_ALIAS
from django.db.models import BigIntegerField, Q, Sum
from django.db.models.functions import Coalesce

from sugih.errors import NotFoundError
from sugih.models import Posting, SavingsBucket, Wallet


def _live_total(path):
    return Coalesce(
        Sum(f"{path}amount_idr", filter=Q(**{f"{path}event__deleted_at__isnull": True})),
        0,
        output_field=BigIntegerField(),
    )


class BalanceEngine:
    def __init__(self, using=DEFAULT_DB_ALIAS):
        self.using = using

    def _live_postings(self):
        return Posting.objects.using(self.using).filter(event__deleted_at__isnull=True)

    def _sum(self, **lookup):
        return self._live_postings().filter(**lookup).aggregate(
            total=Coalesce(Sum("amount_idr"), 0, output_field=BigIntegerField())
        )["total"]

    def wallet_balance(self, wallet_id) -> int:
        if not Wallet.objects.using(self.using).filter(pk=wallet_id).exists():
            raise NotFoundError("Wallet not found.")
        return self._sum(wallet_id=wallet_id)

    def savings_bucket_balance(self, bucket_id) -> int:
        if not SavingsBucket.objects.using(self.using).filter(pk=bucket_id).exists():
            raise NotFoundError("Savings bucket not found.")
        return self._sum(savings_bucket_id=bucket_id)

    def wallet_balances(self, include_archived=False):
        """Wallets annotated with `balance`, one query."""
        qs = Wallet.objects.using(self.using).annotate(balance=_live_total("postings__"))
        if not include_archived:
            qs = qs.filter(archived=False)
        return list(qs.order_by("name"))

    def savings_bucket_balances(self, include_archived=False):
        qs = SavingsBucket.objects.using(self.using).annotate(balance=_live_total("postings__"))
        if not include_archived:
            qs = qs.filter(archived=False)
        return list(qs.order_by("name"))

    def total_wallet_balance(self) -> int:
        return self._sum(wallet__isnull=False)

    def total_savings_balance(self) -> int:
        return self._sum(savings_bucket__isnull=False)
