from django import forms

from sugih.models import Category, Wallet

from .base import JsonForm


class WalletForm(JsonForm):
    invalid_message = "Invalid wallet data."

    name = forms.CharField(max_length=255)
    wallet_type = forms.ChoiceField(choices=Wallet.WALLET_TYPES, required=False)

    def clean_wallet_type(self):
        return self.cleaned_data["wallet_type"] or "bank"


class CategoryForm(JsonForm):
    invalid_message = "Invalid category data."

    name = forms.CharField(max_length=255)
    type = forms.ChoiceField(choices=Category.TYPE_CHOICES)


class SavingsBucketForm(JsonForm):
    invalid_message = "Invalid savings bucket data."

    name = forms.CharField(max_length=255)
    description = forms.CharField(required=False)
