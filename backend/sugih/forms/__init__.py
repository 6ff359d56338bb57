from .budget import BudgetCopyForm, BudgetCreateForm, BudgetUpdateForm, BulkIdsForm
from .reference import CategoryForm, SavingsBucketForm, WalletForm
from .report import BudgetExportForm, MoneyLeftQueryForm, ReportQueryForm, TransactionExportForm
from .transaction import StatsQueryForm, TransactionQueryForm, transaction_form

__all__ = [
    "BudgetCopyForm",
    "BudgetCreateForm",
    "BudgetUpdateForm",
    "BulkIdsForm",
    "BudgetExportForm",
    "CategoryForm",
    "MoneyLeftQueryForm",
    "ReportQueryForm",
    "SavingsBucketForm",
    "WalletForm",
    "StatsQueryForm",
    "TransactionExportForm",
    "TransactionQueryForm",
    "transaction_form",
]
