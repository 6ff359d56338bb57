import csv
import io
import json
from datetime import date

from django.test import TestCase

from sugih.errors import ValidationError
from sugih.services.budgets import BudgetBook
from sugih.services.exports import BUDGET_HEADERS, TRANSACTION_HEADERS, LedgerExporter
from sugih.services.targets import Target

from .helpers import LedgerFixtures


def read_rows(text):
    return list(csv.reader(io.StringIO(text)))


class LedgerExporterTests(LedgerFixtures, TestCase):
    def setUp(self):
        super().setUp()
        self.exporter = LedgerExporter()

    def export(self, method, **kwargs):
        out = io.StringIO()
        count = getattr(self.exporter, method)(out, **kwargs)
        return count, read_rows(out.getvalue())

    def test_transaction_rows_name_wallets_and_buckets(self):
        self.income(1000000, on=date(2024, 1, 1), payee="Office, Ltd")
        self.transfer(250000, self.bca, self.cash, on=date(2024, 1, 10))
        self.contribute(100000, on=date(2024, 1, 20))

        count, rows = self.export("transactions_csv")

        self.assertEqual(count, 3)
        self.assertEqual(rows[0], TRANSACTION_HEADERS)
        by_type = {row[2]: row for row in rows[1:]}
        self.assertEqual(by_type["income"][3:6], ["1000000", "", "BCA"])
        self.assertEqual(by_type["income"][9], "Office, Ltd")
        self.assertEqual(by_type["transfer"][6:8], ["BCA", "Cash"])
        self.assertEqual(by_type["savings_contribution"][5], "BCA")
        self.assertEqual(by_type["savings_contribution"][8], "Emergency fund")
        self.assertEqual([row[1] for row in rows[1:]], ["2024-01-20", "2024-01-10", "2024-01-01"])

    def test_deleted_transactions_only_on_request(self):
        kept = self.expense(5000, on=date(2024, 1, 3))
        deleted = self.expense(7000, on=date(2024, 1, 4))
        self.ledger.delete_transaction(deleted.pk)

        _, rows = self.export("transactions_csv")
        self.assertEqual([row[0] for row in rows[1:]], [kept.pk])

        _, rows = self.export("transactions_csv", include_deleted=True)
        self.assertEqual({row[0]: row[11] for row in rows[1:]}, {kept.pk: "No", deleted.pk: "Yes"})

    def test_transaction_date_range(self):
        self.expense(5000, on=date(2024, 1, 3))
        self.expense(7000, on=date(2024, 2, 4))
        count, rows = self.export("transactions_csv", date_from=date(2024, 2, 1), date_to=date(2024, 2, 29))
        self.assertEqual(count, 1)
        self.assertEqual(rows[1][3], "7000")
        with self.assertRaises(ValidationError):
            self.export("transactions_csv", date_from=date(2024, 2, 1), date_to=date(2024, 1, 1))

    def test_wallets_include_archived_with_balance(self):
        self.income(300000)
        self.cash.archived = True
        self.cash.save()
        count, rows = self.export("wallets_csv")
        self.assertEqual(count, 2)
        self.assertEqual([(row[1], row[3], row[4]) for row in rows[1:]], [("BCA", "300000", "No"), ("Cash", "0", "Yes")])

    def test_categories_and_buckets(self):
        count, rows = self.export("categories_csv")
        self.assertEqual(count, 3)
        self.assertEqual([row[1] for row in rows[1:]], ["Food", "Transport", "Salary"])

        self.income(500000)
        self.contribute(120000)
        count, rows = self.export("savings_buckets_csv")
        self.assertEqual(count, 1)
        self.assertEqual(rows[1][1:4], ["Emergency fund", "", "120000"])

    def test_budgets_newest_month_first(self):
        book = BudgetBook()
        book.create_budget(date(2024, 1, 1), Target.category(self.food.pk), 100000)
        book.create_budget(date(2024, 2, 1), Target.savings_bucket(self.emergency.pk), 300000)
        book.create_budget(date(2024, 2, 1), Target.category(self.transport.pk), 200000, note="bus")

        count, rows = self.export("budgets_csv")
        self.assertEqual(count, 3)
        self.assertEqual(rows[0], BUDGET_HEADERS)
        self.assertEqual(
            [row[1:6] for row in rows[1:]],
            [
                ["2024-02-01", "category", "Transport", "200000", "bus"],
                ["2024-02-01", "savings_bucket", "Emergency fund", "300000", ""],
                ["2024-01-01", "category", "Food", "100000", ""],
            ],
        )

        count, _ = self.export("budgets_csv", month_from=date(2024, 2, 1))
        self.assertEqual(count, 2)

    def test_database_snapshot_lists_every_model(self):
        self.expense(5000)
        BudgetBook().create_budget(date(2024, 1, 1), Target.category(self.food.pk), 100000)
        out = io.StringIO()
        self.exporter.database_json(out)
        models = [row["model"] for row in json.loads(out.getvalue())]
        self.assertEqual(
            sorted(set(models)),
            ["sugih.budget", "sugih.category", "sugih.posting", "sugih.savingsbucket", "sugih.transaction", "sugih.wallet"],
        )
        self.assertLess(models.index("sugih.transaction"), models.index("sugih.posting"))
