from django.http import HttpResponse, JsonResponse

from sugih.forms import BudgetCopyForm, BudgetCreateForm, BudgetUpdateForm, BulkIdsForm
from sugih.services.budget_copy import BudgetCopier
from sugih.services.budgets import BudgetAggregator, BudgetBook
from sugih.services.bulk import BulkBudgetMutator

from .utils import MULTI_STATUS, json_api, method_not_allowed, read_json, serialize_budget


@json_api
def budget_collection(request):
    book = BudgetBook()
    if request.method == "GET":
        month = request.GET.get("month")
        include_archived = request.GET.get("includeArchived", "true") not in ("0", "false")
        if not month:
            budgets = book.list_budgets(include_archived=include_archived)
            return JsonResponse([serialize_budget(b) for b in budgets], safe=False)
        budgets = book.list_budgets(month=month, include_archived=include_archived)
        summary = BudgetAggregator().summary(month)
        return JsonResponse(
            {
                "budgets": [serialize_budget(b) for b in budgets],
                "summary": summary.as_dict(),
            }
        )
    if request.method == "POST":
        budget = book.create_budget(**BudgetCreateForm(read_json(request)).to_kwargs())
        return JsonResponse(serialize_budget(budget), status=201)
    return method_not_allowed(request, ["GET", "POST"])


@json_api
def budget_detail(request, pk):
    book = BudgetBook()
    if request.method == "GET":
        return JsonResponse(serialize_budget(book.get_budget(pk)))
    if request.method == "PATCH":
        budget = book.update_budget(pk, **BudgetUpdateForm(read_json(request)).to_kwargs())
        return JsonResponse(serialize_budget(budget))
    if request.method == "DELETE":
        book.delete_budget(pk)
        return HttpResponse(status=204)
    return method_not_allowed(request, ["GET", "PATCH", "DELETE"])


@json_api
def budget_archive(request, pk):
    if request.method != "POST":
        return method_not_allowed(request, ["POST"])
    return JsonResponse(serialize_budget(BudgetBook().archive_budget(pk)))


@json_api
def budget_restore(request, pk):
    if request.method != "POST":
        return method_not_allowed(request, ["POST"])
    return JsonResponse(serialize_budget(BudgetBook().restore_budget(pk)))


@json_api
def budget_copy(request):
    if request.method != "POST":
        return method_not_allowed(request, ["POST"])
    data = BudgetCopyForm(read_json(request)).validated()
    result = BudgetCopier().copy(data["from_month"], data["to_month"])
    return JsonResponse(
        {
            "created": [serialize_budget(b) for b in result.created],
            "skipped": result.skipped,
        },
        status=201 if result.created else 200,
    )


def _bulk(request, action):
    if request.method != "POST":
        return method_not_allowed(request, ["POST"])
    ids = BulkIdsForm(read_json(request)).validated()["ids"]
    result = getattr(BulkBudgetMutator(), action)(ids)
    return JsonResponse(result.as_dict(), status=MULTI_STATUS if result.partial else 200)


@json_api
def budget_bulk_delete(request):
    return _bulk(request, "delete")


@json_api
def budget_bulk_archive(request):
    return _bulk(request, "archive")


@json_api
def budget_bulk_restore(request):
    return _bulk(request, "restore")


@json_api
def budget_months(request):
    if request.method != "GET":
        return method_not_allowed(request, ["GET"])
    months = BudgetBook().months_with_budgets()
    return JsonResponse(
        {"months": [{"month": row["month"].isoformat(), "budgetCount": row["budget_count"]} for row in months]}
    )
