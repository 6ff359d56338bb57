from .wallet import Wallet
from .category import Category
from .savings_bucket import SavingsBucket
from .transaction import Transaction
from .posting import Posting
from .budget import Budget

__all__ = [
    "Wallet",
    "Category",
    "SavingsBucket",
    "Transaction",
    "Posting",
    "Budget",
]
