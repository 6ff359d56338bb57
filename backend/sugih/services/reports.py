"""
Read-only reports over the posting ledger: spending over time, spending by
category, net worth over time, money left to spend in a month and the
dashboard bundle that combines them.

Like balances and budget figures, every number here is summed from the
postings of non-deleted transactions at read time.
"""

import calendar
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import List, Optional

from django.db import DEFAULT_DB_ALIAS
from django.db.models import BigIntegerField, Count, Q, Sum
from django.db.models.functions import Abs, Coalesce, TruncDay, TruncMonth, TruncQuarter, TruncWeek
from django.utils import timezone

from sugih.errors import ValidationError
from sugih.models import Posting, Transaction
from sugih.months import parse_month
from sugih.services.balances import BalanceEngine
from sugih.services.budgets import BudgetAggregator, percent_used
from sugih.services.ledger import LedgerWriter, TransactionFilters
from sugih.services.targets import CATEGORY

TRUNC_BY_GRANULARITY = {
    "day": TruncDay,
    "week": TruncWeek,
    "month": TruncMonth,
    "quarter": TruncQuarter,
}

UNCATEGORIZED = "Uncategorized"
RECENT_TRANSACTIONS = 5


def _as_date(value):
    return value.date() if isinstance(value, datetime) else value


def _round_div(numerator, denominator):
    """Integer division rounded half up, for non-negative operands."""
    return (2 * numerator + denominator) // (2 * denominator)


def days_in_month(month_start):
    return calendar.monthrange(month_start.year, month_start.month)[1]


def month_earlier(day):
    year, month = (day.year - 1, 12) if day.month == 1 else (day.year, day.month - 1)
    return date(year, month, min(day.day, calendar.monthrange(year, month)[1]))


def period_start(day, granularity):
    """First day of the day, ISO week, month or quarter holding `day`."""
    if granularity == "day":
        return day
    if granularity == "week":
        return day - timedelta(days=day.weekday())
    if granularity == "month":
        return day.replace(day=1)
    return date(day.year, 3 * ((day.month - 1) // 3) + 1, 1)


def check_range(date_from, date_to):
    if date_from and date_to and date_from > date_to:
        raise ValidationError("Invalid report range.", {"dateTo": ["End date must be on or after the start date."]})


def check_granularity(granularity):
    if granularity not in TRUNC_BY_GRANULARITY:
        raise ValidationError(
            "Invalid report granularity.",
            {"granularity": [f"Must be one of: {', '.join(TRUNC_BY_GRANULARITY)}."]},
        )
    return TRUNC_BY_GRANULARITY[granularity]


@dataclass(frozen=True)
class SpendingPoint:
    period: date
    total_amount: int
    transaction_count: int

    def as_dict(self):
        return {
            "period": self.period.isoformat(),
            "totalAmount": self.total_amount,
            "transactionCount": self.transaction_count,
        }


@dataclass(frozen=True)
class CategoryShare:
    category_id: Optional[str]
    category_name: str
    total_amount: int
    transaction_count: int
    percentage: float

    def as_dict(self):
        return {
            "categoryId": self.category_id,
            "categoryName": self.category_name,
            "totalAmount": self.total_amount,
            "transactionCount": self.transaction_count,
            "percentage": self.percentage,
        }


@dataclass(frozen=True)
class NetWorthPoint:
    period: date
    wallet_balance: int
    savings_balance: int

    @property
    def total_net_worth(self):
        return self.wallet_balance + self.savings_balance

    def as_dict(self):
        return {
            "period": self.period.isoformat(),
            "walletBalance": self.wallet_balance,
            "savingsBalance": self.savings_balance,
            "totalNetWorth": self.total_net_worth,
        }


@dataclass(frozen=True)
class MoneyLeft:
    month: date
    total_budget: int
    total_spent: int
    percent_used: int
    days_remaining: int
    average_daily_spending: int
    projected_month_end_spending: int

    @property
    def remaining(self):
        return self.total_budget - self.total_spent

    @property
    def budget_variance(self):
        return self.total_budget - self.projected_month_end_spending

    def as_dict(self):
        return {
            "month": self.month.isoformat(),
            "totalBudget": self.total_budget,
            "totalSpent": self.total_spent,
            "remaining": self.remaining,
            "percentUsed": self.percent_used,
            "daysRemaining": self.days_remaining,
            "averageDailySpending": self.average_daily_spending,
            "projectedMonthEndSpending": self.projected_month_end_spending,
            "budgetVariance": self.budget_variance,
        }


class ReportService:
    def __init__(self, using=DEFAULT_DB_ALIAS):
        self.using = using

    def _expense_postings(self, date_from=None, date_to=None):
        postings = Posting.objects.using(self.using).filter(
            event__deleted_at__isnull=True,
            event__type=Transaction.EXPENSE,
        )
        if date_from:
            postings = postings.filter(event__occurred_at__gte=date_from)
        if date_to:
            postings = postings.filter(event__occurred_at__lte=date_to)
        return postings.order_by()

    def spending_trend(self, date_from=None, date_to=None, granularity="month") -> List[SpendingPoint]:
        """Expense totals per period, oldest first. Periods without spending are left out."""
        trunc = check_granularity(granularity)
        check_range(date_from, date_to)
        rows = (
            self._expense_postings(date_from, date_to)
            .annotate(period=trunc("event__occurred_at"))
            .values("period")
            .annotate(
                total=Coalesce(Sum(Abs("amount_idr")), 0, output_field=BigIntegerField()),
                events=Count("event", distinct=True),
            )
            .order_by("period")
        )
        return [SpendingPoint(_as_date(row["period"]), row["total"], row["events"]) for row in rows]

    def category_breakdown(self, date_from=None, date_to=None) -> List[CategoryShare]:
        check_range(date_from, date_to)
        rows = (
            self._expense_postings(date_from, date_to)
            .values("event__category_id", "event__category__name")
            .annotate(
                total=Coalesce(Sum(Abs("amount_idr")), 0, output_field=BigIntegerField()),
                events=Count("event", distinct=True),
            )
        )
        rows = sorted(rows, key=lambda row: (-row["total"], (row["event__category__name"] or "").lower()))
        grand_total = sum(row["total"] for row in rows)
        return [
            CategoryShare(
                category_id=row["event__category_id"],
                category_name=row["event__category__name"] or UNCATEGORIZED,
                total_amount=row["total"],
                transaction_count=row["events"],
                percentage=round(100 * row["total"] / grand_total, 2) if grand_total else 0.0,
            )
            for row in rows
        ]

    def net_worth_trend(self, date_from=None, date_to=None, granularity="month") -> List[NetWorthPoint]:
        """
        Wallet and savings balances as of the end of each period that saw activity.
        Postings before date_from still count towards the opening balance.
        """
        trunc = check_granularity(granularity)
        check_range(date_from, date_to)
        postings = Posting.objects.using(self.using).filter(event__deleted_at__isnull=True)
        if date_to:
            postings = postings.filter(event__occurred_at__lte=date_to)
        rows = (
            postings.order_by()
            .annotate(period=trunc("event__occurred_at"))
            .values("period")
            .annotate(
                wallets=Coalesce(
                    Sum("amount_idr", filter=Q(wallet__isnull=False)), 0, output_field=BigIntegerField()
                ),
                savings=Coalesce(
                    Sum("amount_idr", filter=Q(savings_bucket__isnull=False)), 0, output_field=BigIntegerField()
                ),
            )
            .order_by("period")
        )
        points = []
        wallets = savings = 0
        for row in rows:
            wallets += row["wallets"]
            savings += row["savings"]
            points.append(NetWorthPoint(_as_date(row["period"]), wallets, savings))
        if date_from:
            points = [point for point in points if point.period >= period_start(date_from, granularity)]
        return points

    def money_left_to_spend(self, month, today=None) -> MoneyLeft:
        """
        Spending budgets for the month against what has been spent so far, with a
        straight-line projection to month end. Savings budgets are not included.
        """
        month = parse_month(month)
        today = today or timezone.localdate()
        items = [item for item in BudgetAggregator(using=self.using).summary(month).items if item.target_type == CATEGORY]
        total_budget = sum(item.budget_amount for item in items)
        total_spent = sum(item.spent_amount for item in items)

        length = days_in_month(month)
        if (today.year, today.month) == (month.year, month.month):
            elapsed = today.day
        elif today < month:
            elapsed = 0
        else:
            elapsed = length

        return MoneyLeft(
            month=month,
            total_budget=total_budget,
            total_spent=total_spent,
            percent_used=percent_used(total_spent, total_budget),
            days_remaining=length - elapsed,
            average_daily_spending=_round_div(total_spent, elapsed) if elapsed else 0,
            projected_month_end_spending=_round_div(total_spent * length, elapsed) if elapsed else 0,
        )

    def dashboard(self, date_from=None, date_to=None, granularity="month", today=None):
        """
        Everything the overview screen shows, in one payload. Without a range the
        window is the month leading up to today.
        """
        today = today or timezone.localdate()
        date_to = date_to or today
        date_from = date_from or month_earlier(date_to)
        check_range(date_from, date_to)

        balances = BalanceEngine(using=self.using)
        ledger = LedgerWriter(using=self.using)
        stats = ledger.transaction_stats(date_from=date_from, date_to=date_to)
        money_left = self.money_left_to_spend(date_to.replace(day=1), today=today)
        return {
            "summary": {
                "currentNetWorth": balances.total_wallet_balance() + balances.total_savings_balance(),
                "moneyLeftToSpend": money_left.remaining,
                "totalSpending": stats.total_expense,
                "totalIncome": stats.total_income,
                "dateFrom": date_from.isoformat(),
                "dateTo": date_to.isoformat(),
            },
            "moneyLeft": money_left.as_dict(),
            "spendingTrend": [p.as_dict() for p in self.spending_trend(date_from, date_to, granularity)],
            "netWorthTrend": [p.as_dict() for p in self.net_worth_trend(date_from, date_to, granularity)],
            "categoryBreakdown": [c.as_dict() for c in self.category_breakdown(date_from, date_to)],
            "recentTransactions": ledger.list_transactions(TransactionFilters(limit=RECENT_TRANSACTIONS)),
        }
