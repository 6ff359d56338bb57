from datetime import date
from unittest import mock

from django.test import TestCase

from sugih.errors import NotFoundError, ValidationError
from sugih.models import Budget
from sugih.services.budget_copy import BudgetCopier
from sugih.services.budgets import BudgetBook
from sugih.services.targets import Target

from .helpers import LedgerFixtures

JANUARY = date(2024, 1, 1)
FEBRUARY = date(2024, 2, 1)


class BudgetCopierTests(LedgerFixtures, TestCase):
    def setUp(self):
        super().setUp()
        self.book = BudgetBook()
        self.copier = BudgetCopier()
        self.book.create_budget(JANUARY, Target.category(self.food.pk), 500000, note="groceries")
        self.book.create_budget(JANUARY, Target.savings_bucket(self.emergency.pk), 1000000)

    def test_copy_creates_then_skips(self):
        first = self.copier.copy("2024-01-01", "2024-02-01")
        self.assertEqual(len(first.created), 2)
        self.assertEqual(first.skipped, [])

        second = self.copier.copy(JANUARY, FEBRUARY)
        self.assertEqual(second.created, [])
        self.assertEqual({entry["targetId"] for entry in second.skipped}, {self.food.pk, self.emergency.pk})
        self.assertEqual(Budget.objects.filter(month=FEBRUARY).count(), 2)

    def test_copy_keeps_amount_and_note(self):
        self.copier.copy(JANUARY, FEBRUARY)
        copied = Budget.objects.get(month=FEBRUARY, category=self.food)
        self.assertEqual(copied.amount_idr, 500000)
        self.assertEqual(copied.note, "groceries")

    def test_existing_target_in_destination_is_skipped(self):
        self.book.create_budget(FEBRUARY, Target.category(self.food.pk), 750000)
        result = self.copier.copy(JANUARY, FEBRUARY)
        self.assertEqual([b.savings_bucket_id for b in result.created], [self.emergency.pk])
        self.assertEqual(
            result.skipped,
            [{"targetId": self.food.pk, "targetType": "category", "targetName": "Food"}],
        )
        self.assertEqual(Budget.objects.get(month=FEBRUARY, category=self.food).amount_idr, 750000)

    def test_archived_source_budgets_are_not_copied(self):
        food_budget = Budget.objects.get(month=JANUARY, category=self.food)
        self.book.archive_budget(food_budget.pk)
        result = self.copier.copy(JANUARY, FEBRUARY)
        self.assertEqual(len(result.created), 1)
        self.assertFalse(Budget.objects.filter(month=FEBRUARY, category=self.food).exists())

    def test_archived_target_does_not_abort_copy(self):
        self.book.create_budget(JANUARY, Target.category(self.transport.pk), 200000)
        self.transport.archived = True
        self.transport.save()

        result = self.copier.copy(JANUARY, FEBRUARY)

        self.assertEqual(len(result.created), 3)
        self.assertEqual(result.skipped, [])
        self.assertTrue(Budget.objects.filter(month=FEBRUARY, category=self.food).exists())
        self.assertEqual(Budget.objects.get(month=FEBRUARY, category=self.transport).amount_idr, 200000)

    def test_lost_race_is_reported_as_skipped(self):
        Budget.objects.create(month=FEBRUARY, category=self.food, amount_idr=1)
        with mock.patch.object(BudgetBook, "active_budget_exists", return_value=False):
            result = self.copier.copy(JANUARY, FEBRUARY)
        self.assertEqual([entry["targetId"] for entry in result.skipped], [self.food.pk])
        self.assertEqual(len(result.created), 1)
        self.assertEqual(Budget.objects.filter(month=FEBRUARY).count(), 2)

    def test_same_month_rejected(self):
        with self.assertRaises(ValidationError):
            self.copier.copy(JANUARY, "2024-01")

    def test_empty_source_month(self):
        with self.assertRaises(NotFoundError):
            self.copier.copy(date(2023, 12, 1), JANUARY)
