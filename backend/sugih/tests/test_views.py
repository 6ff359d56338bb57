import json
from datetime import date

from django.test import TestCase
from django.urls import reverse

from sugih.models import Budget, Category, SavingsBucket, Transaction, Wallet
from sugih.services.budgets import BudgetBook
from sugih.services.targets import Target

from .helpers import LedgerFixtures


class JsonClientMixin:
    def post_json(self, url, payload=None):
        return self.client.post(url, data=json.dumps(payload or {}), content_type="application/json")

    def patch_json(self, url, payload):
        return self.client.patch(url, data=json.dumps(payload), content_type="application/json")


class TransactionApiTests(JsonClientMixin, LedgerFixtures, TestCase):
    def test_create_expense(self):
        response = self.post_json(
            reverse("sugih:transaction_collection"),
            {
                "type": "expense",
                "occurredAt": "2024-01-15",
                "amountIdr": 250000,
                "walletId": self.bca.pk,
                "categoryId": self.food.pk,
                "payee": "Warung",
            },
        )
        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertEqual(body["type"], "expense")
        self.assertEqual(body["amountIdr"], 250000)
        self.assertEqual(body["categoryName"], "Food")
        self.assertEqual([p["amountIdr"] for p in body["postings"]], [-250000])

    def test_validation_errors_keyed_like_request(self):
        response = self.post_json(
            reverse("sugih:transaction_collection"),
            {"type": "transfer", "occurredAt": "2024-01-15", "amountIdr": 0, "fromWalletId": self.bca.pk},
        )
        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertEqual(body["error"], "validation")
        self.assertIn("amountIdr", body["errors"])
        self.assertIn("toWalletId", body["errors"])
        self.assertFalse(Transaction.objects.exists())

    def test_unknown_type(self):
        response = self.post_json(reverse("sugih:transaction_collection"), {"type": "refund"})
        self.assertEqual(response.status_code, 400)
        self.assertIn("type", response.json()["errors"])

    def test_invalid_json(self):
        response = self.client.post(
            reverse("sugih:transaction_collection"), data="{not json", content_type="application/json"
        )
        self.assertEqual(response.status_code, 400)

    def test_archived_wallet_is_bad_request(self):
        self.cash.archived = True
        self.cash.save()
        response = self.post_json(
            reverse("sugih:transaction_collection"),
            {"type": "income", "occurredAt": "2024-01-01", "amountIdr": 1000, "walletId": self.cash.pk},
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "archived_reference")

    def test_get_missing_transaction(self):
        response = self.client.get(reverse("sugih:transaction_detail", kwargs={"pk": "missing-id"}))
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["error"], "not_found")

    def test_patch_keeps_type(self):
        event = self.expense(250000)
        response = self.patch_json(
            reverse("sugih:transaction_detail", kwargs={"pk": event.pk}),
            {"occurredAt": "2024-01-20", "amountIdr": 100000, "walletId": self.cash.pk, "categoryId": self.food.pk},
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["postings"][0]["walletId"], self.cash.pk)

    def test_delete_restore_purge(self):
        event = self.expense(1000)
        detail = reverse("sugih:transaction_detail", kwargs={"pk": event.pk})
        self.assertEqual(self.client.delete(detail).status_code, 204)
        self.assertEqual(self.client.delete(detail).status_code, 404)

        restore = reverse("sugih:transaction_restore", kwargs={"pk": event.pk})
        self.assertEqual(self.post_json(restore).status_code, 200)
        self.assertEqual(self.post_json(restore).status_code, 409)

        purge = reverse("sugih:transaction_purge", kwargs={"pk": event.pk})
        self.assertEqual(self.client.delete(purge).status_code, 204)
        self.assertFalse(Transaction.objects.exists())

    def test_list_and_stats(self):
        self.income(1000000)
        self.expense(250000, wallet=self.cash)

        response = self.client.get(reverse("sugih:transaction_collection"), {"walletId": self.cash.pk})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.json()["transactions"]), 1)

        response = self.client.get(reverse("sugih:transaction_collection"), {"limit": "1000"})
        self.assertEqual(response.status_code, 400)

        stats = self.client.get(reverse("sugih:transaction_stats")).json()
        self.assertEqual(stats["totalIncome"], 1000000)
        self.assertEqual(stats["totalExpense"], 250000)

    def test_method_not_allowed(self):
        response = self.client.get(reverse("sugih:transaction_restore", kwargs={"pk": "any-id"}))
        self.assertEqual(response.status_code, 405)
        self.assertEqual(response["Allow"], "POST")


class ReferenceApiTests(JsonClientMixin, LedgerFixtures, TestCase):
    def test_wallet_listing_with_balances(self):
        self.income(500000)
        response = self.client.get(reverse("sugih:wallet_collection"))
        balances = {w["name"]: w["balance"] for w in response.json()["wallets"]}
        self.assertEqual(balances, {"BCA": 500000, "Cash": 0})

    def test_create_wallet_and_duplicate(self):
        response = self.post_json(reverse("sugih:wallet_collection"), {"name": "Jago", "walletType": "bank"})
        self.assertEqual(response.status_code, 201)
        self.assertTrue(Wallet.objects.filter(name="Jago").exists())
        response = self.post_json(reverse("sugih:wallet_collection"), {"name": "Jago"})
        self.assertEqual(response.status_code, 409)

    def test_rename_wallet(self):
        response = self.patch_json(reverse("sugih:wallet_detail", kwargs={"pk": self.cash.pk}), {"name": "Pocket"})
        self.assertEqual(response.status_code, 200)
        self.cash.refresh_from_db()
        self.assertEqual(self.cash.name, "Pocket")
        self.assertEqual(self.cash.wallet_type, "cash")

    def test_wallet_balance_and_lifecycle(self):
        self.income(1000)
        response = self.client.get(reverse("sugih:wallet_balance", kwargs={"pk": self.bca.pk}))
        self.assertEqual(response.json(), {"walletId": self.bca.pk, "balance": 1000})
        self.assertEqual(self.post_json(reverse("sugih:wallet_archive", kwargs={"pk": self.bca.pk})).status_code, 200)
        self.assertEqual(self.post_json(reverse("sugih:wallet_archive", kwargs={"pk": self.bca.pk})).status_code, 409)
        self.assertEqual(self.post_json(reverse("sugih:wallet_restore", kwargs={"pk": self.bca.pk})).status_code, 200)

    def test_savings_buckets(self):
        response = self.post_json(reverse("sugih:savings_bucket_collection"), {"name": "Holiday"})
        self.assertEqual(response.status_code, 201)
        bucket = SavingsBucket.objects.get(name="Holiday")
        self.contribute(20000, bucket=bucket)
        response = self.client.get(reverse("sugih:savings_bucket_balance", kwargs={"pk": bucket.pk}))
        self.assertEqual(response.json()["balance"], 20000)

    def test_categories(self):
        response = self.post_json(reverse("sugih:category_collection"), {"name": "Gifts", "type": "expense"})
        self.assertEqual(response.status_code, 201)
        response = self.client.get(reverse("sugih:category_collection"), {"type": "income"})
        self.assertEqual([c["name"] for c in response.json()["categories"]], ["Salary"])
        gifts = Category.objects.get(name="Gifts")
        self.assertEqual(self.post_json(reverse("sugih:category_archive", kwargs={"pk": gifts.pk})).status_code, 200)


class BudgetApiTests(JsonClientMixin, LedgerFixtures, TestCase):
    def create_budget(self, **payload):
        body = {"month": "2024-01-01", "amountIdr": 500000}
        body.update(payload)
        return self.post_json(reverse("sugih:budget_collection"), body)

    def test_budget_summary_for_month(self):
        response = self.create_budget(categoryId=self.food.pk)
        self.assertEqual(response.status_code, 201)
        self.expense(250000, on=date(2024, 1, 15))

        response = self.client.get(reverse("sugih:budget_collection"), {"month": "2024-01-01"})
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(len(body["budgets"]), 1)
        item = body["summary"]["items"][0]
        self.assertEqual(
            (item["budgetAmount"], item["spentAmount"], item["remaining"], item["percentUsed"]),
            (500000, 250000, 250000, 50),
        )

    def test_listing_without_month_is_raw_list(self):
        self.create_budget(categoryId=self.food.pk)
        response = self.client.get(reverse("sugih:budget_collection"))
        self.assertIsInstance(response.json(), list)

    def test_duplicate_budget_conflicts(self):
        self.assertEqual(self.create_budget(categoryId=self.food.pk).status_code, 201)
        response = self.create_budget(categoryId=self.food.pk)
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["error"], "conflict")

    def test_target_must_be_exactly_one(self):
        response = self.create_budget(categoryId=self.food.pk, savingsBucketId=self.emergency.pk)
        self.assertEqual(response.status_code, 400)
        response = self.create_budget()
        self.assertEqual(response.status_code, 400)
        response = self.create_budget(categoryId=self.food.pk, month="2024-01-15")
        self.assertIn("month", response.json()["errors"])

    def test_update_only_amount_and_note(self):
        budget = BudgetBook().create_budget(date(2024, 1, 1), Target.category(self.food.pk), 1000, note="keep")
        url = reverse("sugih:budget_detail", kwargs={"pk": budget.pk})
        response = self.patch_json(url, {"amountIdr": 2000})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["amountIdr"], 2000)
        self.assertEqual(response.json()["note"], "keep")

        response = self.patch_json(url, {"categoryId": self.transport.pk})
        self.assertEqual(response.status_code, 400)

    def test_copy(self):
        self.create_budget(categoryId=self.food.pk)
        url = reverse("sugih:budget_copy")
        response = self.post_json(url, {"fromMonth": "2024-01-01", "toMonth": "2024-02-01"})
        self.assertEqual(response.status_code, 201)
        self.assertEqual(len(response.json()["created"]), 1)

        response = self.post_json(url, {"fromMonth": "2024-01-01", "toMonth": "2024-02-01"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["created"], [])
        self.assertEqual(response.json()["skipped"][0]["targetName"], "Food")

        response = self.post_json(url, {"fromMonth": "2023-12-01", "toMonth": "2024-02-01"})
        self.assertEqual(response.status_code, 404)

    def test_bulk_delete_partial_is_multi_status(self):
        budget = BudgetBook().create_budget(date(2024, 1, 1), Target.category(self.food.pk), 1000)
        response = self.post_json(reverse("sugih:budget_bulk_delete"), {"ids": [budget.pk, "missing-id"]})
        self.assertEqual(response.status_code, 207)
        self.assertEqual(response.json(), {"deletedCount": 1, "failedIds": ["missing-id"]})

    def test_bulk_archive_all_succeed(self):
        budget = BudgetBook().create_budget(date(2024, 1, 1), Target.category(self.food.pk), 1000)
        response = self.post_json(reverse("sugih:budget_bulk_archive"), {"ids": [budget.pk]})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"archivedCount": 1, "failedIds": []})
        self.assertTrue(Budget.objects.get(pk=budget.pk).archived)

    def test_bulk_requires_ids(self):
        response = self.post_json(reverse("sugih:budget_bulk_restore"), {"ids": []})
        self.assertEqual(response.status_code, 400)
        response = self.post_json(reverse("sugih:budget_bulk_restore"), {"ids": "abc"})
        self.assertEqual(response.status_code, 400)

    def test_months(self):
        self.create_budget(categoryId=self.food.pk)
        self.create_budget(categoryId=self.food.pk, month="2024-02")
        response = self.client.get(reverse("sugih:budget_months"))
        self.assertEqual(
            response.json(),
            {"months": [{"month": "2024-02-01", "budgetCount": 1}, {"month": "2024-01-01", "budgetCount": 1}]},
        )


class ReportApiTests(JsonClientMixin, LedgerFixtures, TestCase):
    def setUp(self):
        super().setUp()
        self.income(1000000, on=date(2024, 1, 1))
        self.expense(250000, on=date(2024, 1, 15))

    def test_spending_trend(self):
        response = self.client.get(reverse("sugih:report_spending_trend"), {"dateFrom": "2024-01-01", "granularity": "day"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), [{"period": "2024-01-15", "totalAmount": 250000, "transactionCount": 1}])

    def test_bad_report_query(self):
        response = self.client.get(reverse("sugih:report_net_worth_trend"), {"granularity": "year"})
        self.assertEqual(response.status_code, 400)
        self.assertIn("granularity", response.json()["errors"])
        response = self.client.get(
            reverse("sugih:report_category_breakdown"), {"dateFrom": "2024-02-01", "dateTo": "2024-01-01"}
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("dateTo", response.json()["errors"])

    def test_category_breakdown_and_net_worth(self):
        shares = self.client.get(reverse("sugih:report_category_breakdown")).json()
        self.assertEqual([(s["categoryName"], s["percentage"]) for s in shares], [("Food", 100.0)])
        points = self.client.get(reverse("sugih:report_net_worth_trend")).json()
        self.assertEqual(points[-1]["totalNetWorth"], 750000)

    def test_money_left_for_month(self):
        BudgetBook().create_budget(date(2024, 1, 1), Target.category(self.food.pk), 1000000)
        response = self.client.get(reverse("sugih:report_money_left"), {"month": "2024-01"})
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual((body["totalBudget"], body["totalSpent"], body["remaining"]), (1000000, 250000, 750000))
        self.assertEqual(body["percentUsed"], 25)

    def test_dashboard(self):
        response = self.client.get(reverse("sugih:dashboard"), {"dateFrom": "2024-01-01", "dateTo": "2024-01-31"})
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["summary"]["totalSpending"], 250000)
        self.assertEqual(body["summary"]["totalIncome"], 1000000)
        self.assertEqual(body["recentTransactions"][0]["type"], "expense")

    def test_transaction_export_is_csv_download(self):
        response = self.client.get(reverse("sugih:export_transactions"), {"dateFrom": "2024-01-10"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response["Content-Type"], "text/csv; charset=utf-8")
        self.assertTrue(response["Content-Disposition"].startswith('attachment; filename="sugih-transactions-'))
        lines = response.content.decode().splitlines()
        self.assertEqual(len(lines), 2)
        self.assertIn("250000", lines[1])

    def test_reference_and_budget_exports(self):
        for name in ("export_wallets", "export_categories", "export_savings_buckets", "export_budgets"):
            with self.subTest(name=name):
                response = self.client.get(reverse(f"sugih:{name}"))
                self.assertEqual(response.status_code, 200)
                self.assertEqual(response["Content-Type"], "text/csv; charset=utf-8")
        response = self.client.get(reverse("sugih:export_budgets"), {"monthFrom": "2024-01-15"})
        self.assertEqual(response.status_code, 400)
        self.assertIn("monthFrom", response.json()["errors"])

    def test_database_export(self):
        response = self.client.get(reverse("sugih:export_database"))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response["Content-Type"], "application/json")
        self.assertEqual(len([row for row in json.loads(response.content) if row["model"] == "sugih.transaction"]), 2)

    def test_health(self):
        response = self.client.get(reverse("sugih:health"))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["database"], "connected")
        self.assertEqual(self.client.post(reverse("sugih:health")).status_code, 405)
