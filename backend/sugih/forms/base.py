import re

from django import forms
from django.core.exceptions import NON_FIELD_ERRORS

from sugih.errors import ValidationError
from sugih.months import parse_month

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def to_snake(name):
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def to_camel(name):
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


class JsonForm(forms.Form):
    """
    A form bound to a decoded JSON object (or query dict) with camelCase keys.
    Field errors come back keyed the same way the client sent them.
    """

    invalid_message = "Invalid request data."

    def __init__(self, payload=None, **kwargs):
        self.payload = dict(payload or {})
        super().__init__(data={to_snake(key): value for key, value in self.payload.items()}, **kwargs)

    def sent(self, field_name):
        return to_camel(field_name) in self.payload

    def error_dict(self):
        errors = {}
        for name, messages in self.errors.items():
            key = "nonFieldErrors" if name == NON_FIELD_ERRORS else to_camel(name)
            errors[key] = [str(message) for message in messages]
        return errors

    def validated(self):
        """Return cleaned_data or raise the ledger ValidationError."""
        if not self.is_valid():
            raise ValidationError(self.invalid_message, self.error_dict())
        return self.cleaned_data


class MonthField(forms.CharField):
    """First-of-month key, "YYYY-MM-01" or "YYYY-MM"."""

    def to_python(self, value):
        value = super().to_python(value)
        if value in self.empty_values:
            return None
        try:
            return parse_month(value)
        except ValidationError as exc:
            raise forms.ValidationError(exc.message) from exc


class IdListField(forms.Field):
    default_error_messages = {
        "invalid": "Provide a list of ids.",
    }

    def to_python(self, value):
        if value in self.empty_values:
            return []
        if not isinstance(value, (list, tuple)) or not all(isinstance(item, str) and item.strip() for item in value):
            raise forms.ValidationError(self.error_messages["invalid"], code="invalid")
        return [item.strip() for item in value]
