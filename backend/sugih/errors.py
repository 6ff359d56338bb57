"""
Closed error taxonomy for the ledger core.

Everything that leaves a service is one of the LedgerError subclasses below.
Raw database exceptions are classified once, here, so callers only ever match
on these types and never on vendor codes or driver messages.
"""

import logging
from contextlib import contextmanager

from django.db import DatabaseError, IntegrityError

logger = logging.getLogger(__name__)


class LedgerError(Exception):
    kind = "storage"
    default_message = "Unexpected ledger error."

    def __init__(self, message=None, errors=None):
        self.message = message or self.default_message
        self.errors = errors or {}
        super().__init__(self.message)

    def as_dict(self):
        payload = {"error": self.kind, "message": self.message}
        if self.errors:
            payload["errors"] = self.errors
        return payload


class ValidationError(LedgerError):
    kind = "validation"
    default_message = "Invalid input."


class NotFoundError(LedgerError):
    kind = "not_found"
    default_message = "Not found."


class ArchivedReferenceError(LedgerError):
    kind = "archived_reference"
    default_message = "Referenced record is archived."


class ConflictError(LedgerError):
    kind = "conflict"
    default_message = "Record already exists."


class ConstraintViolation(LedgerError):
    kind = "constraint"
    default_message = "The change violates a data constraint."


class StorageError(LedgerError):
    kind = "storage"
    default_message = "Storage is unavailable. Try again later."


# PostgreSQL SQLSTATE codes.
UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
NOT_NULL_VIOLATION = "23502"
CHECK_VIOLATION = "23514"
CONNECTION_EXCEPTION_CLASS = "08"

SQLITE_PREFIXES = [
    ("UNIQUE constraint failed", ConflictError),
    ("FOREIGN KEY constraint failed", ConstraintViolation),
    ("NOT NULL constraint failed", ConstraintViolation),
    ("CHECK constraint failed", ConstraintViolation),
]


def _sqlstate(exc):
    """
    SQLSTATE from the driver exception Django wrapped (psycopg 3 exposes
    `sqlstate`, psycopg2 `pgcode`).
    """
    for candidate in (exc, exc.__cause__):
        if candidate is None:
            continue
        code = getattr(candidate, "sqlstate", None) or getattr(candidate, "pgcode", None)
        if code:
            return str(code)
    return None


def classify_storage_error(exc, conflict_message=None):
    """
    Map a raw database exception to a LedgerError. Never leaks driver text.
    """
    if isinstance(exc, LedgerError):
        return exc

    code = _sqlstate(exc)
    if code == UNIQUE_VIOLATION:
        return ConflictError(conflict_message)
    if code in (FOREIGN_KEY_VIOLATION, NOT_NULL_VIOLATION, CHECK_VIOLATION):
        return ConstraintViolation()
    if code and code.startswith(CONNECTION_EXCEPTION_CLASS):
        return StorageError()

    if code is None and isinstance(exc, IntegrityError):
        text = str(exc)
        for prefix, error_class in SQLITE_PREFIXES:
            if text.startswith(prefix):
                if error_class is ConflictError:
                    return ConflictError(conflict_message)
                return error_class()
    if isinstance(exc, IntegrityError):
        return ConstraintViolation()
    return StorageError()


@contextmanager
def storage_errors(operation, conflict_message=None):
    """
    Translate database failures raised inside the block into the taxonomy.
    """
    try:
        yield
    except DatabaseError as exc:
        error = classify_storage_error(exc, conflict_message=conflict_message)
        if isinstance(error, StorageError):
            logger.exception("%s failed with an unclassified storage error", operation)
        else:
            logger.warning("%s rejected by storage: %s", operation, error.kind)
        raise error from exc
