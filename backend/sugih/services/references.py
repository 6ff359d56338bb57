"""
Wallets, categories and savings buckets.

These are only referenced by transactions and budgets, never owned, so the
ledger checks existence and archived state at write time.
"""

import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DEFAULT_DB_ALIAS, transaction
from django.db.models import ProtectedError

from sugih.errors import ArchivedReferenceError, ConflictError, NotFoundError, ValidationError, storage_errors
from sugih.models import Category, SavingsBucket, Wallet

logger = logging.getLogger(__name__)

LABELS = {
    Wallet: "Wallet",
    Category: "Category",
    SavingsBucket: "Savings bucket",
}

EDITABLE_FIELDS = {
    Wallet: ["name", "wallet_type"],
    Category: ["name", "type"],
    SavingsBucket: ["name", "description"],
}


def require_active(model, pk, using=DEFAULT_DB_ALIAS, field=None):
    """
    Fetch a referenced record that must exist and must not be archived.
    """
    label = LABELS[model]
    obj = model.objects.using(using).filter(pk=pk).first() if pk else None
    if obj is None:
        errors = {field: [f"{label} not found."]} if field else None
        raise NotFoundError(f"{label} not found.", errors)
    if obj.archived:
        errors = {field: [f"{label} is archived."]} if field else None
        raise ArchivedReferenceError(f"{label} is archived.", errors)
    return obj


class ReferenceBook:
    """Create, rename, archive, restore and delete one kind of reference record."""

    def __init__(self, model, using=DEFAULT_DB_ALIAS):
        self.model = model
        self.label = LABELS[model]
        self.using = using

    def _objects(self):
        return self.model.objects.using(self.using)

    def list(self, include_archived=False):
        qs = self._objects().all()
        if not include_archived:
            qs = qs.filter(archived=False)
        return list(qs)

    def get(self, pk):
        obj = self._objects().filter(pk=pk).first()
        if obj is None:
            raise NotFoundError(f"{self.label} not found.")
        return obj

    def _clean(self, obj):
        try:
            obj.full_clean(validate_unique=False, validate_constraints=False)
        except DjangoValidationError as exc:
            raise ValidationError(f"Invalid {self.label.lower()} data.", exc.message_dict) from exc

    def create(self, **fields):
        unknown = set(fields) - set(EDITABLE_FIELDS[self.model])
        if unknown:
            raise ValidationError(f"Unknown {self.label.lower()} fields.", {name: ["Unknown field."] for name in sorted(unknown)})
        obj = self.model(**{key: (value.strip() if isinstance(value, str) else value) for key, value in fields.items()})
        self._clean(obj)
        with storage_errors(f"create {self.label.lower()}", conflict_message=f"{self.label} name already exists."):
            with transaction.atomic(using=self.using):
                obj.save(using=self.using, force_insert=True)
        logger.info("Created %s %s", self.label.lower(), obj.pk)
        return obj

    def update(self, pk, **fields):
        if not fields:
            raise ValidationError("No updates provided.")
        obj = self.get(pk)
        for key, value in fields.items():
            if key not in EDITABLE_FIELDS[self.model]:
                raise ValidationError(f"Unknown {self.label.lower()} fields.", {key: ["Unknown field."]})
            setattr(obj, key, value.strip() if isinstance(value, str) else value)
        self._clean(obj)
        with storage_errors(f"update {self.label.lower()}", conflict_message=f"{self.label} name already exists."):
            with transaction.atomic(using=self.using):
                obj.save(using=self.using, update_fields=[*fields, "updated_at"])
        return obj

    def archive(self, pk):
        obj = self.get(pk)
        if obj.archived:
            raise ConflictError(f"{self.label} is already archived.")
        obj.archived = True
        with storage_errors(f"archive {self.label.lower()}"):
            obj.save(using=self.using, update_fields=["archived", "updated_at"])
        logger.info("Archived %s %s", self.label.lower(), obj.pk)
        return obj

    def restore(self, pk):
        obj = self.get(pk)
        if not obj.archived:
            raise ConflictError(f"{self.label} is not archived.")
        obj.archived = False
        with storage_errors(f"restore {self.label.lower()}"):
            obj.save(using=self.using, update_fields=["archived", "updated_at"])
        logger.info("Restored %s %s", self.label.lower(), obj.pk)
        return obj

    def delete(self, pk):
        obj = self.get(pk)
        with storage_errors(f"delete {self.label.lower()}"):
            try:
                with transaction.atomic(using=self.using):
                    obj.delete(using=self.using)
            except ProtectedError as exc:
                # ProtectedError is an IntegrityError; it must not reach the classifier.
                raise ConflictError(f"Cannot delete {self.label.lower()} with existing transactions or budgets; archive it instead.") from exc
        logger.info("Deleted %s %s", self.label.lower(), pk)
