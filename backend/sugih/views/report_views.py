import logging

from django.db import DEFAULT_DB_ALIAS, DatabaseError, connections
from django.http import JsonResponse
from django.utils import timezone

from sugih.forms import MoneyLeftQueryForm, ReportQueryForm
from sugih.services.reports import ReportService

from .utils import json_api, method_not_allowed, query_params, serialize_transaction

logger = logging.getLogger(__name__)


def _range(request):
    return ReportQueryForm(query_params(request)).validated()


@json_api
def report_spending_trend(request):
    if request.method != "GET":
        return method_not_allowed(request, ["GET"])
    data = _range(request)
    points = ReportService().spending_trend(data["date_from"], data["date_to"], data["granularity"])
    return JsonResponse([point.as_dict() for point in points], safe=False)


@json_api
def report_category_breakdown(request):
    if request.method != "GET":
        return method_not_allowed(request, ["GET"])
    data = _range(request)
    shares = ReportService().category_breakdown(data["date_from"], data["date_to"])
    return JsonResponse([share.as_dict() for share in shares], safe=False)


@json_api
def report_net_worth_trend(request):
    if request.method != "GET":
        return method_not_allowed(request, ["GET"])
    data = _range(request)
    points = ReportService().net_worth_trend(data["date_from"], data["date_to"], data["granularity"])
    return JsonResponse([point.as_dict() for point in points], safe=False)


@json_api
def report_money_left(request):
    if request.method != "GET":
        return method_not_allowed(request, ["GET"])
    month = MoneyLeftQueryForm(query_params(request)).validated()["month"]
    today = timezone.localdate()
    result = ReportService().money_left_to_spend(month or today.replace(day=1), today=today)
    return JsonResponse(result.as_dict())


@json_api
def dashboard(request):
    if request.method != "GET":
        return method_not_allowed(request, ["GET"])
    data = _range(request)
    payload = ReportService().dashboard(data["date_from"], data["date_to"], data["granularity"])
    payload["recentTransactions"] = [serialize_transaction(event) for event in payload["recentTransactions"]]
    return JsonResponse(payload)


def health(request):
    if request.method != "GET":
        return method_not_allowed(request, ["GET"])
    timestamp = timezone.now().isoformat()
    try:
        with connections[DEFAULT_DB_ALIAS].cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
    except DatabaseError:
        logger.exception("Health check could not reach the database")
        return JsonResponse({"status": "error", "database": "disconnected", "timestamp": timestamp}, status=503)
    return JsonResponse({"status": "ok", "database": "connected", "timestamp": timestamp})
