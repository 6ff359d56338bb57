from datetime import date

from sugih.models import Category, SavingsBucket, Wallet
from sugih.services.ledger import LedgerWriter
from sugih.services.transaction_kinds import (
    ExpenseInput,
    IncomeInput,
    SavingsContributionInput,
    SavingsWithdrawalInput,
    TransferInput,
)


class LedgerFixtures:
    """Mixin for TestCase classes that need a few reference records and a writer."""

    def setUp(self):
        super().setUp()
        self.ledger = LedgerWriter()
        self.bca = Wallet.objects.create(name="BCA", wallet_type="bank")
        self.cash = Wallet.objects.create(name="Cash", wallet_type="cash")
        self.food = Category.objects.create(name="Food", type="expense")
        self.transport = Category.objects.create(name="Transport", type="expense")
        self.salary = Category.objects.create(name="Salary", type="income")
        self.emergency = SavingsBucket.objects.create(name="Emergency fund")

    def expense(self, amount, on=date(2024, 1, 15), category=None, wallet=None, **kwargs):
        return self.ledger.create_transaction(
            ExpenseInput(
                on,
                amount,
                wallet_id=(wallet or self.bca).pk,
                category_id=(category or self.food).pk,
                **kwargs,
            )
        )

    def income(self, amount, on=date(2024, 1, 1), wallet=None, **kwargs):
        return self.ledger.create_transaction(IncomeInput(on, amount, wallet_id=(wallet or self.bca).pk, **kwargs))

    def transfer(self, amount, source, destination, on=date(2024, 1, 10)):
        return self.ledger.create_transaction(
            TransferInput(on, amount, from_wallet_id=source.pk, to_wallet_id=destination.pk)
        )

    def contribute(self, amount, on=date(2024, 1, 20), bucket=None):
        return self.ledger.create_transaction(
            SavingsContributionInput(on, amount, wallet_id=self.bca.pk, bucket_id=(bucket or self.emergency).pk)
        )

    def withdraw(self, amount, on=date(2024, 1, 25), bucket=None):
        return self.ledger.create_transaction(
            SavingsWithdrawalInput(on, amount, wallet_id=self.bca.pk, bucket_id=(bucket or self.emergency).pk)
        )
