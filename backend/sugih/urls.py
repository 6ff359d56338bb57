from django.urls import path

from .views.budget_views import (
    budget_archive,
    budget_bulk_archive,
    budget_bulk_delete,
    budget_bulk_restore,
    budget_collection,
    budget_copy,
    budget_detail,
    budget_months,
    budget_restore,
)
from .views.export_views import (
    export_budgets,
    export_categories,
    export_database,
    export_savings_buckets,
    export_transactions,
    export_wallets,
)
from .views.reference_views import (
    category_archive,
    category_collection,
    category_restore,
    savings_bucket_archive,
    savings_bucket_balance,
    savings_bucket_collection,
    savings_bucket_restore,
    wallet_archive,
    wallet_balance,
    wallet_collection,
    wallet_detail,
    wallet_restore,
)
from .views.report_views import (
    dashboard,
    health,
    report_category_breakdown,
    report_money_left,
    report_net_worth_trend,
    report_spending_trend,
)
from .views.transaction_views import (
    transaction_collection,
    transaction_detail,
    transaction_purge,
    transaction_restore,
    transaction_stats,
)

app_name = "sugih"

urlpatterns = [
    path("transactions/", transaction_collection, name="transaction_collection"),
    path("transactions/stats/", transaction_stats, name="transaction_stats"),
    path("transactions/<str:pk>/", transaction_detail, name="transaction_detail"),
    path("transactions/<str:pk>/restore/", transaction_restore, name="transaction_restore"),
    path("transactions/<str:pk>/purge/", transaction_purge, name="transaction_purge"),
    path("wallets/", wallet_collection, name="wallet_collection"),
    path("wallets/<str:pk>/", wallet_detail, name="wallet_detail"),
    path("wallets/<str:pk>/balance/", wallet_balance, name="wallet_balance"),
    path("wallets/<str:pk>/archive/", wallet_archive, name="wallet_archive"),
    path("wallets/<str:pk>/restore/", wallet_restore, name="wallet_restore"),
    path("savings-buckets/", savings_bucket_collection, name="savings_bucket_collection"),
    path("savings-buckets/<str:pk>/balance/", savings_bucket_balance, name="savings_bucket_balance"),
    path("savings-buckets/<str:pk>/archive/", savings_bucket_archive, name="savings_bucket_archive"),
    path("savings-buckets/<str:pk>/restore/", savings_bucket_restore, name="savings_bucket_restore"),
    path("categories/", category_collection, name="category_collection"),
    path("categories/<str:pk>/archive/", category_archive, name="category_archive"),
    path("categories/<str:pk>/restore/", category_restore, name="category_restore"),
    path("budgets/", budget_collection, name="budget_collection"),
    path("budgets/copy/", budget_copy, name="budget_copy"),
    path("budgets/months/", budget_months, name="budget_months"),
    path("budgets/bulk-delete/", budget_bulk_delete, name="budget_bulk_delete"),
    path("budgets/bulk-archive/", budget_bulk_archive, name="budget_bulk_archive"),
    path("budgets/bulk-restore/", budget_bulk_restore, name="budget_bulk_restore"),
    path("budgets/<str:pk>/", budget_detail, name="budget_detail"),
    path("budgets/<str:pk>/archive/", budget_archive, name="budget_archive"),
    path("budgets/<str:pk>/restore/", budget_restore, name="budget_restore"),
    path("reports/spending-trend/", report_spending_trend, name="report_spending_trend"),
    path("reports/category-breakdown/", report_category_breakdown, name="report_category_breakdown"),
    path("reports/net-worth-trend/", report_net_worth_trend, name="report_net_worth_trend"),
    path("reports/money-left-to-spend/", report_money_left, name="report_money_left"),
    path("dashboard/", dashboard, name="dashboard"),
    path("export/transactions/", export_transactions, name="export_transactions"),
    path("export/wallets/", export_wallets, name="export_wallets"),
    path("export/categories/", export_categories, name="export_categories"),
    path("export/savings-buckets/", export_savings_buckets, name="export_savings_buckets"),
    path("export/budgets/", export_budgets, name="export_budgets"),
    path("export/database/", export_database, name="export_database"),
    path("health/", health, name="health"),
]
