"""
Monthly budgets: the single-item primitives (BudgetBook) and the
budget-vs-actual read model (BudgetAggregator).
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.db import DEFAULT_DB_ALIAS, transaction
from django.db.models import BigIntegerField, Count, Sum
from django.db.models.functions import Abs, Coalesce

from sugih.errors import ConflictError, NotFoundError, ValidationError, storage_errors
from sugih.models import Budget, Category, Posting, SavingsBucket, Transaction
from sugih.months import month_label, month_range, parse_month
from sugih.services.references import require_active
from sugih.services.targets import CATEGORY, Target

logger = logging.getLogger(__name__)

UNSET = object()

ON_TRACK = "on_track"
NEAR_LIMIT = "near_limit"
REACHED_LIMIT = "reached_limit"
OVER_BUDGET = "over_budget"

NEAR_LIMIT_PERCENT = 80


def _validate_amount(amount_idr):
    if isinstance(amount_idr, bool) or not isinstance(amount_idr, int) or amount_idr <= 0:
        raise ValidationError(
            "Budget amount must be a positive whole number of rupiah.",
            {"amountIdr": ["Must be greater than zero."]},
        )


def percent_used(spent, budget):
    """Integer percent, rounded half up."""
    if budget <= 0:
        return 0
    return (200 * spent + budget) // (2 * budget)


def budget_status(percent):
    if percent > 100:
        return OVER_BUDGET
    if percent == 100:
        return REACHED_LIMIT
    if percent >= NEAR_LIMIT_PERCENT:
        return NEAR_LIMIT
    return ON_TRACK


# Savings policies. Each returns {bucket_id: spent} for the given buckets and month.


def _bucket_postings(using, bucket_ids):
    return Posting.objects.using(using).filter(
        savings_bucket_id__in=bucket_ids,
        event__deleted_at__isnull=True,
    )


def _sum_by_bucket(postings):
    rows = postings.order_by().values("savings_bucket_id").annotate(total=Sum("amount_idr"))
    return {row["savings_bucket_id"]: row["total"] or 0 for row in rows}


def month_net_movement(using, bucket_ids, month_start):
    """Contributions minus withdrawals posted to the bucket within the month."""
    start, end = month_range(month_start)
    postings = _bucket_postings(using, bucket_ids).filter(
        event__type__in=[Transaction.SAVINGS_CONTRIBUTION, Transaction.SAVINGS_WITHDRAWAL],
        event__occurred_at__gte=start,
        event__occurred_at__lt=end,
    )
    return _sum_by_bucket(postings)


def cumulative_balance(using, bucket_ids, month_start):
    """The bucket balance as of the end of the month."""
    _, end = month_range(month_start)
    return _sum_by_bucket(_bucket_postings(using, bucket_ids).filter(event__occurred_at__lt=end))


SAVINGS_POLICIES = {
    "month_net": month_net_movement,
    "cumulative": cumulative_balance,
}


def resolve_savings_policy(policy=None):
    if callable(policy):
        return policy
    name = policy or getattr(settings, "SUGIH_SAVINGS_BUDGET_POLICY", "month_net")
    try:
        return SAVINGS_POLICIES[name]
    except KeyError:
        raise ImproperlyConfigured(
            f"Unknown savings budget policy {name!r}; expected one of {', '.join(SAVINGS_POLICIES)}."
        ) from None


@dataclass(frozen=True)
class BudgetSummaryItem:
    budget_id: str
    target_id: str
    target_type: str
    target_name: str
    budget_amount: int
    spent_amount: int
    remaining: int
    percent_used: int
    status: str

    def as_dict(self):
        return {
            "budgetId": self.budget_id,
            "targetId": self.target_id,
            "targetType": self.target_type,
            "targetName": self.target_name,
            "budgetAmount": self.budget_amount,
            "spentAmount": self.spent_amount,
            "remaining": self.remaining,
            "percentUsed": self.percent_used,
            "status": self.status,
        }


@dataclass(frozen=True)
class BudgetSummary:
    month: date
    total_budget: int = 0
    total_spent: int = 0
    remaining: int = 0
    items: List[BudgetSummaryItem] = field(default_factory=list)

    def as_dict(self):
        return {
            "month": self.month.isoformat(),
            "totalBudget": self.total_budget,
            "totalSpent": self.total_spent,
            "remaining": self.remaining,
            "items": [item.as_dict() for item in self.items],
        }


class BudgetBook:
    def __init__(self, using=DEFAULT_DB_ALIAS):
        self.using = using

    def _budgets(self):
        return Budget.objects.using(self.using)

    def get_budget(self, budget_id) -> Budget:
        budget = self._budgets().select_related("category", "savings_bucket").filter(pk=budget_id).first()
        if budget is None:
            raise NotFoundError("Budget not found.")
        return budget

    def list_budgets(self, month=None, include_archived=True):
        qs = self._budgets().select_related("category", "savings_bucket")
        if month is not None:
            qs = qs.for_month(parse_month(month))
        if not include_archived:
            qs = qs.active()
        return list(qs)

    def months_with_budgets(self):
        """Distinct months holding active budgets, newest first."""
        rows = self._budgets().active().order_by("-month").values("month").annotate(budget_count=Count("id"))
        return [{"month": row["month"], "budget_count": row["budget_count"]} for row in rows]

    def active_budget_exists(self, month, target: Target, exclude_id=None) -> bool:
        qs = self._budgets().active().for_month(month).filter(**target.lookup())
        if exclude_id:
            qs = qs.exclude(pk=exclude_id)
        return qs.exists()

    def _check_target(self, target: Target):
        if target.is_category:
            category = require_active(Category, target.id, using=self.using, field="categoryId")
            if category.type != Category.EXPENSE:
                raise ValidationError(
                    "Budgets can only target expense categories.",
                    {"categoryId": ["Choose an expense category."]},
                )
            return category
        return require_active(SavingsBucket, target.id, using=self.using, field="savingsBucketId")

    def _conflict_message(self, month):
        return f"A budget for this target already exists in {month_label(month)}."

    def create_budget(self, month, target: Target, amount_idr, note=None) -> Budget:
        month = parse_month(month)
        if not isinstance(target, Target):
            raise ValidationError("A budget target is required.", {"target": ["A category or a savings bucket is required."]})
        _validate_amount(amount_idr)
        self._check_target(target)
        if self.active_budget_exists(month, target):
            raise ConflictError(self._conflict_message(month))
        return self.insert_budget(month, target, amount_idr, note=note)

    def insert_budget(self, month, target: Target, amount_idr, note=None) -> Budget:
        """
        Write the row without re-checking the target. Only the one-active-budget
        constraint applies; a duplicate comes back as ConflictError.
        """
        month = parse_month(month)
        with storage_errors("create budget", conflict_message=self._conflict_message(month)):
            with transaction.atomic(using=self.using):
                budget = self._budgets().create(
                    month=month,
                    amount_idr=amount_idr,
                    note=note,
                    **target.model_fields(),
                )
        logger.info("Created budget %s for %s %s in %s", budget.pk, target.kind, target.id, month)
        return self.get_budget(budget.pk)

    def update_budget(self, budget_id, amount_idr=UNSET, note=UNSET) -> Budget:
        """Change the amount and/or note. The month and target are fixed."""
        if amount_idr is UNSET and note is UNSET:
            raise ValidationError("No updates provided.")
        budget = self.get_budget(budget_id)
        update_fields = ["updated_at"]
        if amount_idr is not UNSET:
            _validate_amount(amount_idr)
            budget.amount_idr = amount_idr
            update_fields.append("amount_idr")
        if note is not UNSET:
            budget.note = note
            update_fields.append("note")
        with storage_errors("update budget"):
            with transaction.atomic(using=self.using):
                budget.save(using=self.using, update_fields=update_fields)
        return budget

    def archive_budget(self, budget_id) -> Budget:
        budget = self.get_budget(budget_id)
        if budget.archived:
            raise ConflictError("Budget is already archived.")
        budget.archived = True
        with storage_errors("archive budget"):
            with transaction.atomic(using=self.using):
                budget.save(using=self.using, update_fields=["archived", "updated_at"])
        logger.info("Archived budget %s", budget.pk)
        return budget

    def restore_budget(self, budget_id) -> Budget:
        budget = self.get_budget(budget_id)
        if not budget.archived:
            raise ConflictError("Budget is not archived.")
        self._check_target(budget.target)
        conflict = self._conflict_message(budget.month)
        if self.active_budget_exists(budget.month, budget.target, exclude_id=budget.pk):
            raise ConflictError(conflict)
        budget.archived = False
        with storage_errors("restore budget", conflict_message=conflict):
            with transaction.atomic(using=self.using):
                budget.save(using=self.using, update_fields=["archived", "updated_at"])
        logger.info("Restored budget %s", budget.pk)
        return budget

    def delete_budget(self, budget_id) -> None:
        budget = self.get_budget(budget_id)
        with storage_errors("delete budget"):
            with transaction.atomic(using=self.using):
                budget.delete(using=self.using)
        logger.info("Deleted budget %s", budget_id)


class BudgetAggregator:
    def __init__(self, using=DEFAULT_DB_ALIAS, savings_policy=None):
        self.using = using
        self.savings_policy = resolve_savings_policy(savings_policy)

    def category_spending(self, category_ids, month_start):
        if not category_ids:
            return {}
        start, end = month_range(month_start)
        rows = (
            Posting.objects.using(self.using)
            .filter(
                event__deleted_at__isnull=True,
                event__type=Transaction.EXPENSE,
                event__category_id__in=category_ids,
                event__occurred_at__gte=start,
                event__occurred_at__lt=end,
            )
            .order_by()
            .values("event__category_id")
            .annotate(total=Coalesce(Sum(Abs("amount_idr")), 0, output_field=BigIntegerField()))
        )
        return {row["event__category_id"]: row["total"] for row in rows}

    def savings_spending(self, bucket_ids, month_start):
        if not bucket_ids:
            return {}
        return self.savings_policy(self.using, bucket_ids, month_start)

    def summary(self, month) -> BudgetSummary:
        month = parse_month(month)
        budgets = list(
            Budget.objects.using(self.using)
            .active()
            .for_month(month)
            .select_related("category", "savings_bucket")
        )
        category_spent = self.category_spending([b.category_id for b in budgets if b.category_id], month)
        savings_spent = self.savings_spending([b.savings_bucket_id for b in budgets if b.savings_bucket_id], month)

        items = []
        for budget in budgets:
            target = budget.target
            if target.is_category:
                spent = category_spent.get(target.id, 0)
            else:
                spent = savings_spent.get(target.id, 0)
            percent = percent_used(spent, budget.amount_idr)
            items.append(
                BudgetSummaryItem(
                    budget_id=budget.pk,
                    target_id=target.id,
                    target_type=target.kind,
                    target_name=budget.target_name,
                    budget_amount=budget.amount_idr,
                    spent_amount=spent,
                    remaining=budget.amount_idr - spent,
                    percent_used=percent,
                    status=budget_status(percent),
                )
            )
        items.sort(key=lambda item: (item.target_type != CATEGORY, item.target_name.lower()))

        total_budget = sum(item.budget_amount for item in items)
        total_spent = sum(item.spent_amount for item in items)
        return BudgetSummary(
            month=month,
            total_budget=total_budget,
            total_spent=total_spent,
            remaining=total_budget - total_spent,
            items=items,
        )


def get_budget_summary(month, using=DEFAULT_DB_ALIAS, savings_policy: Optional[str] = None) -> BudgetSummary:
    return BudgetAggregator(using=using, savings_policy=savings_policy).summary(month)
