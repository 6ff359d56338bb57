from django.db import models
from django.db.models import Q

from sugih.services.targets import Target

from .base import LedgerModel
from .category import Category
from .savings_bucket import SavingsBucket


class BudgetQuerySet(models.QuerySet):
    def active(self):
        return self.filter(archived=False)

    def for_month(self, month):
        return self.filter(month=month)


class Budget(LedgerModel):
    """
    Monthly spending cap for exactly one target: an expense category or a savings bucket.
    The target is fixed at creation; only amount and note change afterwards.
    At most one active budget exists per (month, target); the partial unique
    constraints below are the backstop for concurrent creates.
    """

    month = models.DateField(help_text="First day of the budgeted month.")
    category = models.ForeignKey(
        Category,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="budgets",
    )
    savings_bucket = models.ForeignKey(
        SavingsBucket,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="budgets",
    )
    amount_idr = models.BigIntegerField()
    note = models.TextField(blank=True, null=True)
    archived = models.BooleanField(default=False)

    objects = BudgetQuerySet.as_manager()

    class Meta:
        db_table = "budgets"
        ordering = ["-month", "id"]
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(category__isnull=False, savings_bucket__isnull=True)
                    | Q(category__isnull=True, savings_bucket__isnull=False)
                ),
                name="budget_target_check",
            ),
            models.CheckConstraint(condition=Q(amount_idr__gt=0), name="budget_amount_positive"),
            models.UniqueConstraint(
                fields=["month", "category"],
                condition=Q(category__isnull=False, archived=False),
                name="budget_month_category_idx",
            ),
            models.UniqueConstraint(
                fields=["month", "savings_bucket"],
                condition=Q(savings_bucket__isnull=False, archived=False),
                name="budget_month_savings_bucket_idx",
            ),
        ]

    @property
    def target(self):
        return Target.of_budget(self)

    @property
    def target_name(self):
        holder = self.category if self.category_id else self.savings_bucket
        return holder.name if holder else ""

    def __str__(self):
        return f"{self.month:%Y-%m} {self.target_name} {self.amount_idr}"
