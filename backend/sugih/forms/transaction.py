from django import forms

from sugih.errors import ValidationError
from sugih.models import Transaction
from sugih.services.ledger import TransactionFilters
from sugih.services.transaction_kinds import (
    ExpenseInput,
    IncomeInput,
    SavingsContributionInput,
    SavingsWithdrawalInput,
    TransferInput,
)

from .base import JsonForm


class TransactionForm(JsonForm):
    input_class = None
    invalid_message = "Invalid transaction data."

    occurred_at = forms.DateField()
    amount_idr = forms.IntegerField(min_value=1)
    note = forms.CharField(required=False, strip=True)
    payee = forms.CharField(required=False, max_length=255)
    idempotency_key = forms.CharField(required=False, max_length=64)

    def input_fields(self, data):
        return {}

    def to_input(self):
        data = self.validated()
        return self.input_class(
            data["occurred_at"],
            data["amount_idr"],
            note=data["note"],
            payee=data["payee"],
            idempotency_key=data["idempotency_key"] or None,
            **self.input_fields(data),
        )


class ExpenseForm(TransactionForm):
    input_class = ExpenseInput

    wallet_id = forms.CharField()
    category_id = forms.CharField()

    def input_fields(self, data):
        return {"wallet_id": data["wallet_id"], "category_id": data["category_id"]}


class IncomeForm(TransactionForm):
    input_class = IncomeInput

    wallet_id = forms.CharField()
    category_id = forms.CharField(required=False)

    def input_fields(self, data):
        return {"wallet_id": data["wallet_id"], "category_id": data["category_id"] or None}


class TransferForm(TransactionForm):
    input_class = TransferInput

    from_wallet_id = forms.CharField()
    to_wallet_id = forms.CharField()

    def clean(self):
        cleaned = super().clean()
        if cleaned.get("from_wallet_id") and cleaned.get("from_wallet_id") == cleaned.get("to_wallet_id"):
            self.add_error("to_wallet_id", "Transfers must be between different wallets.")
        return cleaned

    def input_fields(self, data):
        return {"from_wallet_id": data["from_wallet_id"], "to_wallet_id": data["to_wallet_id"]}


class SavingsMovementForm(TransactionForm):
    wallet_id = forms.CharField()
    bucket_id = forms.CharField()

    def input_fields(self, data):
        return {"wallet_id": data["wallet_id"], "bucket_id": data["bucket_id"]}


class SavingsContributionForm(SavingsMovementForm):
    input_class = SavingsContributionInput


class SavingsWithdrawalForm(SavingsMovementForm):
    input_class = SavingsWithdrawalInput


FORMS_BY_TYPE = {
    Transaction.EXPENSE: ExpenseForm,
    Transaction.INCOME: IncomeForm,
    Transaction.TRANSFER: TransferForm,
    Transaction.SAVINGS_CONTRIBUTION: SavingsContributionForm,
    Transaction.SAVINGS_WITHDRAWAL: SavingsWithdrawalForm,
}


def transaction_form(payload, default_type=None):
    """Pick the form for the `type` in the payload."""
    tx_type = payload.get("type") or default_type
    form_class = FORMS_BY_TYPE.get(tx_type)
    if form_class is None:
        raise ValidationError(
            "Invalid transaction data.",
            {"type": [f"Must be one of: {', '.join(FORMS_BY_TYPE)}."]},
        )
    return form_class({key: value for key, value in payload.items() if key != "type"})


class TransactionQueryForm(JsonForm):
    invalid_message = "Invalid transaction query."

    date_from = forms.DateField(required=False)
    date_to = forms.DateField(required=False)
    type = forms.ChoiceField(required=False, choices=Transaction.TYPE_CHOICES)
    wallet_id = forms.CharField(required=False)
    category_id = forms.CharField(required=False)
    include_deleted = forms.BooleanField(required=False)
    limit = forms.IntegerField(required=False, min_value=1)
    offset = forms.IntegerField(required=False, min_value=0)

    def clean(self):
        cleaned = super().clean()
        start, end = cleaned.get("date_from"), cleaned.get("date_to")
        if start and end and start > end:
            self.add_error("date_to", "End date must be on or after the start date.")
        return cleaned

    def to_filters(self):
        data = self.validated()
        return TransactionFilters(
            date_from=data["date_from"],
            date_to=data["date_to"],
            type=data["type"] or None,
            wallet_id=data["wallet_id"] or None,
            category_id=data["category_id"] or None,
            include_deleted=data["include_deleted"],
            limit=data["limit"] or TransactionFilters.limit,
            offset=data["offset"] or 0,
        )


class StatsQueryForm(JsonForm):
    invalid_message = "Invalid stats query."

    date_from = forms.DateField(required=False)
    date_to = forms.DateField(required=False)
