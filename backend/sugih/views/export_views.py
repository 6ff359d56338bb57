from django.http import HttpResponse
from django.utils import timezone

from sugih.forms import BudgetExportForm, TransactionExportForm
from sugih.services.exports import LedgerExporter

from .utils import json_api, method_not_allowed, query_params


def _download(name, extension, content_type):
    filename = f"sugih-{name}-{timezone.localdate().isoformat()}.{extension}"
    response = HttpResponse(content_type=content_type)
    response["Content-Disposition"] = f'attachment; filename="{filename}"'
    response["Cache-Control"] = "no-cache, no-store, must-revalidate"
    return response


def _csv(name):
    return _download(name, "csv", "text/csv; charset=utf-8")


@json_api
def export_transactions(request):
    if request.method != "GET":
        return method_not_allowed(request, ["GET"])
    data = TransactionExportForm(query_params(request)).validated()
    response = _csv("transactions")
    LedgerExporter().transactions_csv(
        response,
        date_from=data["date_from"],
        date_to=data["date_to"],
        include_deleted=data["include_deleted"],
    )
    return response


@json_api
def export_wallets(request):
    if request.method != "GET":
        return method_not_allowed(request, ["GET"])
    response = _csv("wallets")
    LedgerExporter().wallets_csv(response)
    return response


@json_api
def export_categories(request):
    if request.method != "GET":
        return method_not_allowed(request, ["GET"])
    response = _csv("categories")
    LedgerExporter().categories_csv(response)
    return response


@json_api
def export_savings_buckets(request):
    if request.method != "GET":
        return method_not_allowed(request, ["GET"])
    response = _csv("savings-buckets")
    LedgerExporter().savings_buckets_csv(response)
    return response


@json_api
def export_budgets(request):
    if request.method != "GET":
        return method_not_allowed(request, ["GET"])
    data = BudgetExportForm(query_params(request)).validated()
    response = _csv("budgets")
    LedgerExporter().budgets_csv(response, month_from=data["month_from"], month_to=data["month_to"])
    return response


@json_api
def export_database(request):
    if request.method != "GET":
        return method_not_allowed(request, ["GET"])
    response = _download("database", "json", "application/json")
    LedgerExporter().database_json(response)
    return response
