from django import forms

from sugih.services.reports import TRUNC_BY_GRANULARITY

from .base import JsonForm, MonthField


class DateRangeForm(JsonForm):
    date_from = forms.DateField(required=False)
    date_to = forms.DateField(required=False)

    def clean(self):
        cleaned = super().clean()
        start, end = cleaned.get("date_from"), cleaned.get("date_to")
        if start and end and start > end:
            self.add_error("date_to", "End date must be on or after the start date.")
        return cleaned


class ReportQueryForm(DateRangeForm):
    invalid_message = "Invalid report query."

    granularity = forms.ChoiceField(required=False, choices=[(key, key) for key in TRUNC_BY_GRANULARITY])

    def clean_granularity(self):
        return self.cleaned_data["granularity"] or "month"


class MoneyLeftQueryForm(JsonForm):
    invalid_message = "Invalid report query."

    month = MonthField(required=False)


class TransactionExportForm(DateRangeForm):
    invalid_message = "Invalid export parameters."

    include_deleted = forms.BooleanField(required=False)


class BudgetExportForm(JsonForm):
    invalid_message = "Invalid export parameters."

    month_from = MonthField(required=False)
    month_to = MonthField(required=False)

    def clean(self):
        cleaned = super().clean()
        start, end = cleaned.get("month_from"), cleaned.get("month_to")
        if start and end and start > end:
            self.add_error("month_to", "End month must be on or after the start month.")
        return cleaned
