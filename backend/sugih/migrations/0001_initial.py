from django.db import migrations, models
import django.db.models.deletion

import sugih.models.base


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Wallet",
            fields=[
                ("id", models.CharField(default=sugih.models.base.new_id, editable=False, max_length=36, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=255, unique=True)),
                (
                    "wallet_type",
                    models.CharField(
                        choices=[("cash", "Cash"), ("bank", "Bank"), ("ewallet", "E-wallet"), ("other", "Other")],
                        default="bank",
                        max_length=10,
                    ),
                ),
                (
                    "archived",
                    models.BooleanField(
                        default=False,
                        help_text="Archive instead of delete. Archived wallets stay in history but reject new activity.",
                    ),
                ),
            ],
            options={
                "db_table": "wallets",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Category",
            fields=[
                ("id", models.CharField(default=sugih.models.base.new_id, editable=False, max_length=36, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=255, unique=True)),
                ("type", models.CharField(choices=[("income", "Income"), ("expense", "Expense")], max_length=7)),
                ("archived", models.BooleanField(default=False)),
            ],
            options={
                "db_table": "categories",
                "ordering": ["type", "name"],
                "verbose_name_plural": "categories",
            },
        ),
        migrations.CreateModel(
            name="SavingsBucket",
            fields=[
                ("id", models.CharField(default=sugih.models.base.new_id, editable=False, max_length=36, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=255, unique=True)),
                ("description", models.TextField(blank=True)),
                ("archived", models.BooleanField(default=False)),
            ],
            options={
                "db_table": "savings_buckets",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Transaction",
            fields=[
                ("id", models.CharField(default=sugih.models.base.new_id, editable=False, max_length=36, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "type",
                    models.CharField(
                        choices=[
                            ("expense", "Expense"),
                            ("income", "Income"),
                            ("transfer", "Transfer"),
                            ("savings_contribution", "Savings contribution"),
                            ("savings_withdrawal", "Savings withdrawal"),
                        ],
                        max_length=20,
                    ),
                ),
                ("occurred_at", models.DateField()),
                ("note", models.TextField(blank=True)),
                ("payee", models.CharField(blank=True, max_length=255)),
                ("idempotency_key", models.CharField(blank=True, max_length=64, null=True, unique=True)),
                ("deleted_at", models.DateTimeField(blank=True, null=True)),
                (
                    "category",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="transactions",
                        to="sugih.category",
                    ),
                ),
            ],
            options={
                "db_table": "transactions",
                "ordering": ["-occurred_at", "-created_at"],
                "indexes": [
                    models.Index(fields=["occurred_at"], name="transactions_occurred_idx"),
                    models.Index(fields=["type", "occurred_at"], name="transactions_type_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("category__isnull", True), ("type__in", ["expense", "income"]), _connector="OR"),
                        name="transaction_category_kind_check",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Posting",
            fields=[
                ("id", models.CharField(default=sugih.models.base.new_id, editable=False, max_length=36, primary_key=True, serialize=False)),
                ("amount_idr", models.BigIntegerField(help_text="Signed whole rupiah.")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="postings",
                        to="sugih.transaction",
                    ),
                ),
                (
                    "savings_bucket",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="postings",
                        to="sugih.savingsbucket",
                    ),
                ),
                (
                    "wallet",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="postings",
                        to="sugih.wallet",
                    ),
                ),
            ],
            options={
                "db_table": "postings",
                "ordering": ["created_at", "id"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("amount_idr", 0), _negated=True),
                        name="posting_amount_nonzero",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(("savings_bucket__isnull", True), ("wallet__isnull", False)),
                            models.Q(("savings_bucket__isnull", False), ("wallet__isnull", True)),
                            _connector="OR",
                        ),
                        name="posting_single_account",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Budget",
            fields=[
                ("id", models.CharField(default=sugih.models.base.new_id, editable=False, max_length=36, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("month", models.DateField(help_text="First day of the budgeted month.")),
                ("amount_idr", models.BigIntegerField()),
                ("note", models.TextField(blank=True, null=True)),
                ("archived", models.BooleanField(default=False)),
                (
                    "category",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="budgets",
                        to="sugih.category",
                    ),
                ),
                (
                    "savings_bucket",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="budgets",
                        to="sugih.savingsbucket",
                    ),
                ),
            ],
            options={
                "db_table": "budgets",
                "ordering": ["-month", "id"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(("category__isnull", False), ("savings_bucket__isnull", True)),
                            models.Q(("category__isnull", True), ("savings_bucket__isnull", False)),
                            _connector="OR",
                        ),
                        name="budget_target_check",
                    ),
                    models.CheckConstraint(condition=models.Q(("amount_idr__gt", 0)), name="budget_amount_positive"),
                    models.UniqueConstraint(
                        condition=models.Q(("archived", False), ("category__isnull", False)),
                        fields=("month", "category"),
                        name="budget_month_category_idx",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(("archived", False), ("savings_bucket__isnull", False)),
                        fields=("month", "savings_bucket"),
                        name="budget_month_savings_bucket_idx",
                    ),
                ],
            },
        ),
    ]
