from django.contrib import admin

from .models import Budget, Category, Posting, SavingsBucket, Transaction, Wallet
from .templatetags.formatting import idr


@admin.register(Wallet)
class WalletAdmin(admin.ModelAdmin):
    list_display = ("name", "wallet_type", "archived", "created_at")
    list_filter = ("wallet_type", "archived")
    search_fields = ("name",)


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "type", "archived", "created_at")
    list_filter = ("type", "archived")
    search_fields = ("name",)


@admin.register(SavingsBucket)
class SavingsBucketAdmin(admin.ModelAdmin):
    list_display = ("name", "archived", "created_at")
    list_filter = ("archived",)
    search_fields = ("name",)


class PostingInline(admin.TabularInline):
    """Read-only: postings only change through the ledger writer."""

    model = Posting
    extra = 0
    can_delete = False
    fields = ("wallet", "savings_bucket", "amount")
    readonly_fields = fields

    @admin.display(description="Amount")
    def amount(self, obj):
        return idr(obj.amount_idr)

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    """
    Transactions are recorded through the API so every event gets its postings.
    Here only the note and payee can be touched.
    """

    list_display = ("occurred_at", "type", "amount", "category", "payee", "deleted_at")
    list_filter = ("type", "occurred_at")
    search_fields = ("note", "payee")
    readonly_fields = ("type", "occurred_at", "category", "idempotency_key", "deleted_at")
    inlines = [PostingInline]

    def has_add_permission(self, request):
        return False

    def get_queryset(self, request):
        return super().get_queryset(request).select_related("category").prefetch_related("postings")

    @admin.display(description="Amount")
    def amount(self, obj):
        return idr(obj.display_amount)


@admin.register(Budget)
class BudgetAdmin(admin.ModelAdmin):
    list_display = ("month", "target_name", "amount", "archived")
    list_filter = ("month", "archived")
    search_fields = ("category__name", "savings_bucket__name", "note")
    readonly_fields = ("month", "category", "savings_bucket", "archived")

    @admin.display(description="Amount")
    def amount(self, obj):
        return idr(obj.amount_idr)

    def has_add_permission(self, request):
        return False
