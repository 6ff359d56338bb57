import functools
import json
import logging

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt

from sugih.errors import LedgerError, ValidationError

logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    "validation": 400,
    "archived_reference": 400,
    "constraint": 400,
    "not_found": 404,
    "conflict": 409,
    "storage": 500,
}

MULTI_STATUS = 207


def error_response(error: LedgerError):
    return JsonResponse(error.as_dict(), status=STATUS_BY_KIND.get(error.kind, 500))


def json_api(view):
    """
    JSON endpoint wrapper: ledger errors become JSON bodies with the matching status.
    """

    @csrf_exempt
    @functools.wraps(view)
    def wrapper(request, *args, **kwargs):
        try:
            return view(request, *args, **kwargs)
        except LedgerError as exc:
            if exc.kind == "storage":
                logger.error("%s %s failed: %s", request.method, request.path, exc.message)
            return error_response(exc)

    return wrapper


def read_json(request):
    if not request.body:
        return {}
    try:
        payload = json.loads(request.body)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ValidationError("Request body must be valid JSON.") from exc
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object.")
    return payload


def query_params(request):
    return request.GET.dict()


def method_not_allowed(request, allowed):
    response = JsonResponse(
        {"error": "method_not_allowed", "message": f"{request.method} is not allowed here."},
        status=405,
    )
    response["Allow"] = ", ".join(allowed)
    return response


def _iso(value):
    return value.isoformat() if value else None


def serialize_posting(posting):
    return {
        "id": posting.pk,
        "walletId": posting.wallet_id,
        "savingsBucketId": posting.savings_bucket_id,
        "amountIdr": posting.amount_idr,
    }


def serialize_transaction(event):
    return {
        "id": event.pk,
        "type": event.type,
        "occurredAt": _iso(event.occurred_at),
        "amountIdr": event.display_amount,
        "note": event.note,
        "payee": event.payee,
        "categoryId": event.category_id,
        "categoryName": event.category.name if event.category_id else None,
        "idempotencyKey": event.idempotency_key,
        "postings": [serialize_posting(p) for p in event.postings.all()],
        "deletedAt": _iso(event.deleted_at),
        "createdAt": _iso(event.created_at),
        "updatedAt": _iso(event.updated_at),
    }


def serialize_budget(budget):
    target = budget.target
    return {
        "id": budget.pk,
        "month": _iso(budget.month),
        "categoryId": budget.category_id,
        "savingsBucketId": budget.savings_bucket_id,
        "targetType": target.kind,
        "targetName": budget.target_name,
        "amountIdr": budget.amount_idr,
        "note": budget.note,
        "archived": budget.archived,
        "createdAt": _iso(budget.created_at),
        "updatedAt": _iso(budget.updated_at),
    }


def serialize_wallet(wallet):
    payload = {
        "id": wallet.pk,
        "name": wallet.name,
        "walletType": wallet.wallet_type,
        "archived": wallet.archived,
    }
    if hasattr(wallet, "balance"):
        payload["balance"] = wallet.balance
    return payload


def serialize_savings_bucket(bucket):
    payload = {
        "id": bucket.pk,
        "name": bucket.name,
        "description": bucket.description,
        "archived": bucket.archived,
    }
    if hasattr(bucket, "balance"):
        payload["balance"] = bucket.balance
    return payload


def serialize_category(category):
    return {
        "id": category.pk,
        "name": category.name,
        "type": category.type,
        "archived": category.archived,
    }
