from django import forms

from sugih.errors import ValidationError
from sugih.services.budgets import UNSET
from sugih.services.targets import Target

from .base import IdListField, JsonForm, MonthField


class BudgetCreateForm(JsonForm):
    invalid_message = "Invalid budget data."

    month = MonthField()
    category_id = forms.CharField(required=False)
    savings_bucket_id = forms.CharField(required=False)
    amount_idr = forms.IntegerField(min_value=1)
    note = forms.CharField(required=False)

    def clean(self):
        cleaned = super().clean()
        try:
            cleaned["target"] = Target.from_ids(cleaned.get("category_id"), cleaned.get("savings_bucket_id"))
        except ValidationError as exc:
            self.add_error(None, exc.message)
        return cleaned

    def to_kwargs(self):
        data = self.validated()
        return {
            "month": data["month"],
            "target": data["target"],
            "amount_idr": data["amount_idr"],
            "note": data["note"] or None,
        }


class BudgetUpdateForm(JsonForm):
    """Only amount and note can change; the month and target are fixed."""

    invalid_message = "Invalid budget data."

    amount_idr = forms.IntegerField(required=False, min_value=1)
    note = forms.CharField(required=False)

    def clean(self):
        cleaned = super().clean()
        for fixed in ("month", "categoryId", "savingsBucketId"):
            if fixed in self.payload:
                self.add_error(None, "Budget month and target cannot be changed.")
                break
        if self.sent("amount_idr") and cleaned.get("amount_idr") is None and "amount_idr" not in self.errors:
            self.add_error("amount_idr", "This field cannot be empty.")
        return cleaned

    def to_kwargs(self):
        data = self.validated()
        return {
            "amount_idr": data["amount_idr"] if self.sent("amount_idr") else UNSET,
            "note": (data["note"] or None) if self.sent("note") else UNSET,
        }


class BudgetCopyForm(JsonForm):
    invalid_message = "Invalid copy request."

    from_month = MonthField()
    to_month = MonthField()


class BulkIdsForm(JsonForm):
    invalid_message = "Invalid bulk request."

    ids = IdListField()
