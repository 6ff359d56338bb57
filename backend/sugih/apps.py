from django.apps import AppConfig


class SugihConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "sugih"
    verbose_name = "Sugih ledger"
