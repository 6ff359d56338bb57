from django import template

register = template.Library()


@register.filter
def idr(value):
    """
    Format whole rupiah with dot thousands separators, e.g. "Rp 1.250.000".
    """
    if value is None:
        return "Rp 0"
    try:
        amount = int(value)
    except (TypeError, ValueError):
        return "Rp 0"
    sign = "-" if amount < 0 else ""
    grouped = f"{abs(amount):,}".replace(",", ".")
    return f"{sign}Rp {grouped}"
