from django.db import models

from .base import LedgerModel


class Category(LedgerModel):
    """
    Classification label for expense and income transactions.
    Only expense categories can carry a budget.
    """

    INCOME = "income"
    EXPENSE = "expense"
    TYPE_CHOICES = [
        (INCOME, "Income"),
        (EXPENSE, "Expense"),
    ]

    name = models.CharField(max_length=255, unique=True)
    type = models.CharField(max_length=7, choices=TYPE_CHOICES)
    archived = models.BooleanField(default=False)

    class Meta:
        db_table = "categories"
        ordering = ["type", "name"]
        verbose_name_plural = "categories"

    def __str__(self):
        return f"{self.name} ({self.type})"
