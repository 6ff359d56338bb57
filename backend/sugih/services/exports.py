"""
Exports of the ledger for use outside the app.

Each CSV writer takes any text file-like object (an HttpResponse works) and
returns the number of data rows written. Amounts are whole rupiah, dates ISO.
The full JSON dump uses Django's serializer, so it loads back with loaddata.
"""

import csv
import logging
from itertools import chain

from django.core import serializers
from django.db import DEFAULT_DB_ALIAS

from sugih.models import Budget, Category, Posting, SavingsBucket, Transaction, Wallet
from sugih.services.balances import BalanceEngine
from sugih.services.reports import check_range
from sugih.services.targets import CATEGORY

logger = logging.getLogger(__name__)

TRANSACTION_HEADERS = [
    "ID",
    "Date",
    "Type",
    "Amount (IDR)",
    "Category",
    "Wallet",
    "From Wallet",
    "To Wallet",
    "Savings Bucket",
    "Payee",
    "Note",
    "Deleted",
]
WALLET_HEADERS = ["ID", "Name", "Type", "Balance (IDR)", "Archived", "Created At", "Updated At"]
CATEGORY_HEADERS = ["ID", "Name", "Type", "Archived", "Created At", "Updated At"]
SAVINGS_BUCKET_HEADERS = ["ID", "Name", "Description", "Balance (IDR)", "Archived", "Created At", "Updated At"]
BUDGET_HEADERS = [
    "ID",
    "Month",
    "Target Type",
    "Target",
    "Budget Amount (IDR)",
    "Note",
    "Archived",
    "Created At",
    "Updated At",
]

# Parents before children so a dump loads in one pass.
DUMP_MODELS = [Wallet, Category, SavingsBucket, Transaction, Posting, Budget]


def _yes_no(flag):
    return "Yes" if flag else "No"


def _iso(value):
    return value.isoformat() if value else ""


def _posting_columns(event):
    """(wallet, from wallet, to wallet, savings bucket) names for one event."""
    wallet = from_wallet = to_wallet = bucket = ""
    for posting in event.postings.all():
        if posting.savings_bucket_id:
            bucket = posting.savings_bucket.name
        elif event.type == Transaction.TRANSFER:
            if posting.amount_idr < 0:
                from_wallet = posting.wallet.name
            else:
                to_wallet = posting.wallet.name
        else:
            wallet = posting.wallet.name
    return wallet, from_wallet, to_wallet, bucket


class LedgerExporter:
    def __init__(self, using=DEFAULT_DB_ALIAS):
        self.using = using

    def transactions_csv(self, out, date_from=None, date_to=None, include_deleted=False) -> int:
        check_range(date_from, date_to)
        qs = (
            Transaction.objects.using(self.using)
            .select_related("category")
            .prefetch_related("postings__wallet", "postings__savings_bucket")
            .order_by("-occurred_at", "-created_at")
        )
        if not include_deleted:
            qs = qs.live()
        if date_from:
            qs = qs.filter(occurred_at__gte=date_from)
        if date_to:
            qs = qs.filter(occurred_at__lte=date_to)

        writer = csv.writer(out)
        writer.writerow(TRANSACTION_HEADERS)
        count = 0
        for event in qs.iterator(chunk_size=500):
            wallet, from_wallet, to_wallet, bucket = _posting_columns(event)
            writer.writerow(
                [
                    event.pk,
                    event.occurred_at.isoformat(),
                    event.type,
                    event.display_amount,
                    event.category.name if event.category_id else "",
                    wallet,
                    from_wallet,
                    to_wallet,
                    bucket,
                    event.payee,
                    event.note,
                    _yes_no(event.is_deleted),
                ]
            )
            count += 1
        logger.info("Exported %d transactions", count)
        return count

    def wallets_csv(self, out) -> int:
        wallets = BalanceEngine(using=self.using).wallet_balances(include_archived=True)
        writer = csv.writer(out)
        writer.writerow(WALLET_HEADERS)
        for wallet in wallets:
            writer.writerow(
                [
                    wallet.pk,
                    wallet.name,
                    wallet.wallet_type,
                    wallet.balance,
                    _yes_no(wallet.archived),
                    _iso(wallet.created_at),
                    _iso(wallet.updated_at),
                ]
            )
        return len(wallets)

    def categories_csv(self, out) -> int:
        categories = list(Category.objects.using(self.using).order_by("type", "name"))
        writer = csv.writer(out)
        writer.writerow(CATEGORY_HEADERS)
        for category in categories:
            writer.writerow(
                [
                    category.pk,
                    category.name,
                    category.type,
                    _yes_no(category.archived),
                    _iso(category.created_at),
                    _iso(category.updated_at),
                ]
            )
        return len(categories)

    def savings_buckets_csv(self, out) -> int:
        buckets = BalanceEngine(using=self.using).savings_bucket_balances(include_archived=True)
        writer = csv.writer(out)
        writer.writerow(SAVINGS_BUCKET_HEADERS)
        for bucket in buckets:
            writer.writerow(
                [
                    bucket.pk,
                    bucket.name,
                    bucket.description or "",
                    bucket.balance,
                    _yes_no(bucket.archived),
                    _iso(bucket.created_at),
                    _iso(bucket.updated_at),
                ]
            )
        return len(buckets)

    def budgets_csv(self, out, month_from=None, month_to=None) -> int:
        qs = Budget.objects.using(self.using).select_related("category", "savings_bucket").order_by("-month", "id")
        if month_from:
            qs = qs.filter(month__gte=month_from)
        if month_to:
            qs = qs.filter(month__lte=month_to)
        budgets = sorted(qs, key=lambda b: (-b.month.toordinal(), b.target.kind != CATEGORY, b.target_name.lower()))
        writer = csv.writer(out)
        writer.writerow(BUDGET_HEADERS)
        for budget in budgets:
            writer.writerow(
                [
                    budget.pk,
                    budget.month.isoformat(),
                    budget.target.kind,
                    budget.target_name,
                    budget.amount_idr,
                    budget.note or "",
                    _yes_no(budget.archived),
                    _iso(budget.created_at),
                    _iso(budget.updated_at),
                ]
            )
        return len(budgets)

    def database_json(self, out):
        """Every ledger row in Django's fixture format."""
        querysets = [model.objects.using(self.using).order_by("pk") for model in DUMP_MODELS]
        serializers.serialize("json", chain.from_iterable(querysets), stream=out, indent=2)
        logger.info("Exported database snapshot")
