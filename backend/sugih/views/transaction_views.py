from django.http import HttpResponse, JsonResponse

from sugih.forms import StatsQueryForm, TransactionQueryForm, transaction_form
from sugih.services.ledger import LedgerWriter

from .utils import json_api, method_not_allowed, query_params, read_json, serialize_transaction


@json_api
def transaction_collection(request):
    ledger = LedgerWriter()
    if request.method == "GET":
        filters = TransactionQueryForm(query_params(request)).to_filters()
        events = ledger.list_transactions(filters)
        return JsonResponse(
            {
                "transactions": [serialize_transaction(event) for event in events],
                "limit": filters.limit,
                "offset": filters.offset,
            }
        )
    if request.method == "POST":
        data = transaction_form(read_json(request)).to_input()
        event = ledger.create_transaction(data)
        return JsonResponse(serialize_transaction(event), status=201)
    return method_not_allowed(request, ["GET", "POST"])


@json_api
def transaction_detail(request, pk):
    ledger = LedgerWriter()
    if request.method == "GET":
        include_deleted = request.GET.get("includeDeleted") in ("1", "true")
        return JsonResponse(serialize_transaction(ledger.get_transaction(pk, include_deleted=include_deleted)))
    if request.method in ("PATCH", "PUT"):
        # The type cannot change, so it defaults to the stored one.
        current = ledger.get_transaction(pk)
        data = transaction_form(read_json(request), default_type=current.type).to_input()
        return JsonResponse(serialize_transaction(ledger.update_transaction(pk, data)))
    if request.method == "DELETE":
        ledger.delete_transaction(pk)
        return HttpResponse(status=204)
    return method_not_allowed(request, ["GET", "PATCH", "PUT", "DELETE"])


@json_api
def transaction_restore(request, pk):
    if request.method != "POST":
        return method_not_allowed(request, ["POST"])
    return JsonResponse(serialize_transaction(LedgerWriter().restore_transaction(pk)))


@json_api
def transaction_purge(request, pk):
    if request.method != "DELETE":
        return method_not_allowed(request, ["DELETE"])
    LedgerWriter().purge_transaction(pk)
    return HttpResponse(status=204)


@json_api
def transaction_stats(request):
    if request.method != "GET":
        return method_not_allowed(request, ["GET"])
    data = StatsQueryForm(query_params(request)).validated()
    stats = LedgerWriter().transaction_stats(date_from=data["date_from"], date_to=data["date_to"])
    return JsonResponse(stats.as_dict())
