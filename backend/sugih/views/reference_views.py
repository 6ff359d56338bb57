"""
Wallets, savings buckets and categories. Wallet and bucket listings carry live balances.
"""

from django.http import HttpResponse, JsonResponse

from sugih.forms import CategoryForm, SavingsBucketForm, WalletForm
from sugih.models import Category, SavingsBucket, Wallet
from sugih.services.balances import BalanceEngine
from sugih.services.references import ReferenceBook

from .utils import (
    json_api,
    method_not_allowed,
    read_json,
    serialize_category,
    serialize_savings_bucket,
    serialize_wallet,
)


def _include_archived(request):
    return request.GET.get("includeArchived") in ("1", "true")


def _changes(form):
    data = form.validated()
    return {name: value for name, value in data.items() if form.sent(name)}


@json_api
def wallet_collection(request):
    if request.method == "GET":
        wallets = BalanceEngine().wallet_balances(include_archived=_include_archived(request))
        return JsonResponse({"wallets": [serialize_wallet(w) for w in wallets]})
    if request.method == "POST":
        data = WalletForm(read_json(request)).validated()
        wallet = ReferenceBook(Wallet).create(**data)
        return JsonResponse(serialize_wallet(wallet), status=201)
    return method_not_allowed(request, ["GET", "POST"])


@json_api
def wallet_detail(request, pk):
    book = ReferenceBook(Wallet)
    if request.method == "GET":
        return JsonResponse(serialize_wallet(book.get(pk)))
    if request.method == "PATCH":
        form = WalletForm(read_json(request))
        form.fields["name"].required = False
        wallet = book.update(pk, **_changes(form))
        return JsonResponse(serialize_wallet(wallet))
    if request.method == "DELETE":
        book.delete(pk)
        return HttpResponse(status=204)
    return method_not_allowed(request, ["GET", "PATCH", "DELETE"])


@json_api
def wallet_balance(request, pk):
    if request.method != "GET":
        return method_not_allowed(request, ["GET"])
    return JsonResponse({"walletId": pk, "balance": BalanceEngine().wallet_balance(pk)})


@json_api
def wallet_archive(request, pk):
    if request.method != "POST":
        return method_not_allowed(request, ["POST"])
    return JsonResponse(serialize_wallet(ReferenceBook(Wallet).archive(pk)))


@json_api
def wallet_restore(request, pk):
    if request.method != "POST":
        return method_not_allowed(request, ["POST"])
    return JsonResponse(serialize_wallet(ReferenceBook(Wallet).restore(pk)))


@json_api
def savings_bucket_collection(request):
    if request.method == "GET":
        buckets = BalanceEngine().savings_bucket_balances(include_archived=_include_archived(request))
        return JsonResponse({"savingsBuckets": [serialize_savings_bucket(b) for b in buckets]})
    if request.method == "POST":
        data = SavingsBucketForm(read_json(request)).validated()
        bucket = ReferenceBook(SavingsBucket).create(**data)
        return JsonResponse(serialize_savings_bucket(bucket), status=201)
    return method_not_allowed(request, ["GET", "POST"])


@json_api
def savings_bucket_balance(request, pk):
    if request.method != "GET":
        return method_not_allowed(request, ["GET"])
    return JsonResponse({"savingsBucketId": pk, "balance": BalanceEngine().savings_bucket_balance(pk)})


@json_api
def savings_bucket_archive(request, pk):
    if request.method != "POST":
        return method_not_allowed(request, ["POST"])
    return JsonResponse(serialize_savings_bucket(ReferenceBook(SavingsBucket).archive(pk)))


@json_api
def savings_bucket_restore(request, pk):
    if request.method != "POST":
        return method_not_allowed(request, ["POST"])
    return JsonResponse(serialize_savings_bucket(ReferenceBook(SavingsBucket).restore(pk)))


@json_api
def category_collection(request):
    book = ReferenceBook(Category)
    if request.method == "GET":
        categories = book.list(include_archived=_include_archived(request))
        category_type = request.GET.get("type")
        if category_type:
            categories = [c for c in categories if c.type == category_type]
        return JsonResponse({"categories": [serialize_category(c) for c in categories]})
    if request.method == "POST":
        data = CategoryForm(read_json(request)).validated()
        return JsonResponse(serialize_category(book.create(**data)), status=201)
    return method_not_allowed(request, ["GET", "POST"])


@json_api
def category_archive(request, pk):
    if request.method != "POST":
        return method_not_allowed(request, ["POST"])
    return JsonResponse(serialize_category(ReferenceBook(Category).archive(pk)))


@json_api
def category_restore(request, pk):
    if request.method != "POST":
        return method_not_allowed(request, ["POST"])
    return JsonResponse(serialize_category(ReferenceBook(Category).restore(pk)))
