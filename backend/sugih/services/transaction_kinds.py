"""
Transaction inputs, one class per kind.

Each kind carries only the fields it needs (a transfer has from/to wallets, a
savings movement has a wallet and a bucket) and knows the posting set it
produces. Amounts arrive positive; signs are assigned here.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from sugih.errors import ValidationError
from sugih.models import Transaction


@dataclass(frozen=True)
class PostingLine:
    amount_idr: int
    wallet_id: Optional[str] = None
    savings_bucket_id: Optional[str] = None


@dataclass(frozen=True)
class TransactionInput:
    occurred_at: date
    amount_idr: int
    note: str = field(default="", kw_only=True)
    payee: str = field(default="", kw_only=True)
    idempotency_key: Optional[str] = field(default=None, kw_only=True)

    type = None
    category_id = None

    def validate(self) -> None:
        errors = {}
        if isinstance(self.amount_idr, bool) or not isinstance(self.amount_idr, int) or self.amount_idr <= 0:
            errors["amountIdr"] = ["Amount must be a positive whole number of rupiah."]
        if not isinstance(self.occurred_at, date):
            errors["occurredAt"] = ["A valid date is required."]
        errors.update(self.shape_errors())
        if errors:
            raise ValidationError(f"Invalid {self.type.replace('_', ' ')} data.", errors)

    def shape_errors(self) -> dict:
        return {}

    def wallet_ids(self) -> List[str]:
        return []

    def savings_bucket_ids(self) -> List[str]:
        return []

    def posting_lines(self) -> List[PostingLine]:
        raise NotImplementedError


@dataclass(frozen=True)
class ExpenseInput(TransactionInput):
    wallet_id: str = field(kw_only=True)
    category_id: str = field(kw_only=True)

    type = Transaction.EXPENSE

    def shape_errors(self):
        errors = {}
        if not self.wallet_id:
            errors["walletId"] = ["Wallet is required."]
        if not self.category_id:
            errors["categoryId"] = ["Category is required for expenses."]
        return errors

    def wallet_ids(self):
        return [self.wallet_id]

    def posting_lines(self):
        return [PostingLine(-self.amount_idr, wallet_id=self.wallet_id)]


@dataclass(frozen=True)
class IncomeInput(TransactionInput):
    wallet_id: str = field(kw_only=True)
    category_id: Optional[str] = field(default=None, kw_only=True)

    type = Transaction.INCOME

    def shape_errors(self):
        if not self.wallet_id:
            return {"walletId": ["Wallet is required."]}
        return {}

    def wallet_ids(self):
        return [self.wallet_id]

    def posting_lines(self):
        return [PostingLine(self.amount_idr, wallet_id=self.wallet_id)]


@dataclass(frozen=True)
class TransferInput(TransactionInput):
    from_wallet_id: str = field(kw_only=True)
    to_wallet_id: str = field(kw_only=True)

    type = Transaction.TRANSFER

    def shape_errors(self):
        errors = {}
        if not self.from_wallet_id:
            errors["fromWalletId"] = ["Source wallet is required."]
        if not self.to_wallet_id:
            errors["toWalletId"] = ["Destination wallet is required."]
        if self.from_wallet_id and self.from_wallet_id == self.to_wallet_id:
            errors["toWalletId"] = ["Transfers must be between different wallets."]
        return errors

    def wallet_ids(self):
        return [self.from_wallet_id, self.to_wallet_id]

    def posting_lines(self):
        return [
            PostingLine(-self.amount_idr, wallet_id=self.from_wallet_id),
            PostingLine(self.amount_idr, wallet_id=self.to_wallet_id),
        ]


@dataclass(frozen=True)
class SavingsMovementInput(TransactionInput):
    wallet_id: str = field(kw_only=True)
    bucket_id: str = field(kw_only=True)

    def shape_errors(self):
        errors = {}
        if not self.wallet_id:
            errors["walletId"] = ["Wallet is required."]
        if not self.bucket_id:
            errors["bucketId"] = ["Savings bucket is required."]
        return errors

    def wallet_ids(self):
        return [self.wallet_id]

    def savings_bucket_ids(self):
        return [self.bucket_id]


@dataclass(frozen=True)
class SavingsContributionInput(SavingsMovementInput):
    type = Transaction.SAVINGS_CONTRIBUTION

    def posting_lines(self):
        return [
            PostingLine(-self.amount_idr, wallet_id=self.wallet_id),
            PostingLine(self.amount_idr, savings_bucket_id=self.bucket_id),
        ]


@dataclass(frozen=True)
class SavingsWithdrawalInput(SavingsMovementInput):
    type = Transaction.SAVINGS_WITHDRAWAL

    def posting_lines(self):
        return [
            PostingLine(-self.amount_idr, savings_bucket_id=self.bucket_id),
            PostingLine(self.amount_idr, wallet_id=self.wallet_id),
        ]


INPUT_CLASSES = {
    Transaction.EXPENSE: ExpenseInput,
    Transaction.INCOME: IncomeInput,
    Transaction.TRANSFER: TransferInput,
    Transaction.SAVINGS_CONTRIBUTION: SavingsContributionInput,
    Transaction.SAVINGS_WITHDRAWAL: SavingsWithdrawalInput,
}
