from django.db import DatabaseError, IntegrityError, OperationalError
from django.test import SimpleTestCase

from sugih.errors import (
    ConflictError,
    ConstraintViolation,
    NotFoundError,
    StorageError,
    ValidationError,
    classify_storage_error,
    storage_errors,
)


class DriverError(Exception):
    def __init__(self, message, sqlstate=None, pgcode=None):
        super().__init__(message)
        self.sqlstate = sqlstate
        self.pgcode = pgcode


def wrapped(django_class, message, **codes):
    exc = django_class(message)
    exc.__cause__ = DriverError(message, **codes)
    return exc


class ClassifyStorageErrorTests(SimpleTestCase):
    def test_postgres_codes(self):
        cases = [
            (wrapped(IntegrityError, "duplicate key value", sqlstate="23505"), ConflictError),
            (wrapped(IntegrityError, "insert violates foreign key", sqlstate="23503"), ConstraintViolation),
            (wrapped(IntegrityError, "null value in column", pgcode="23502"), ConstraintViolation),
            (wrapped(IntegrityError, "violates check constraint", sqlstate="23514"), ConstraintViolation),
            (wrapped(OperationalError, "connection refused", sqlstate="08006"), StorageError),
            (wrapped(DatabaseError, "deadlock detected", sqlstate="40P01"), StorageError),
        ]
        for exc, expected in cases:
            with self.subTest(code=exc.__cause__.sqlstate or exc.__cause__.pgcode):
                self.assertIsInstance(classify_storage_error(exc), expected)

    def test_sqlite_messages(self):
        cases = [
            ("UNIQUE constraint failed: budgets.month, budgets.category_id", ConflictError),
            ("FOREIGN KEY constraint failed", ConstraintViolation),
            ("NOT NULL constraint failed: postings.amount_idr", ConstraintViolation),
            ("CHECK constraint failed: posting_amount_nonzero", ConstraintViolation),
        ]
        for message, expected in cases:
            with self.subTest(message=message):
                self.assertIsInstance(classify_storage_error(IntegrityError(message)), expected)

    def test_unknown_errors_are_storage_errors(self):
        self.assertIsInstance(classify_storage_error(OperationalError("database is locked")), StorageError)

    def test_driver_text_not_leaked(self):
        error = classify_storage_error(
            wrapped(IntegrityError, 'duplicate key value violates "budget_month_category_idx"', sqlstate="23505"),
            conflict_message="Budget already exists.",
        )
        self.assertEqual(error.message, "Budget already exists.")
        self.assertNotIn("budget_month_category_idx", str(error))

    def test_ledger_errors_pass_through(self):
        original = NotFoundError("Wallet not found.")
        self.assertIs(classify_storage_error(original), original)

    def test_context_manager_translates_and_chains(self):
        raw = IntegrityError("UNIQUE constraint failed: wallets.name")
        with self.assertRaises(ConflictError) as ctx:
            with storage_errors("create wallet", conflict_message="Wallet name already exists."):
                raise raw
        self.assertIs(ctx.exception.__cause__, raw)
        self.assertEqual(ctx.exception.as_dict(), {"error": "conflict", "message": "Wallet name already exists."})

    def test_context_manager_ignores_ledger_errors(self):
        with self.assertRaises(ValidationError):
            with storage_errors("create wallet"):
                raise ValidationError("bad", {"name": ["Required."]})

    def test_as_dict_includes_field_errors(self):
        error = ValidationError("Invalid wallet data.", {"name": ["This field is required."]})
        self.assertEqual(
            error.as_dict(),
            {"error": "validation", "message": "Invalid wallet data.", "errors": {"name": ["This field is required."]}},
        )
