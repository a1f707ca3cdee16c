from datetime import datetime

import inflect

from .calculations import to_amount

# Helper for amount in words
p = inflect.engine()


def format_inr(amount):
    """Group digits the Indian way: 1234567.5 -> '12,34,567.5'."""
    value = round(to_amount(amount), 2)
    sign = "-" if value < 0 else ""
    whole, _, fraction = f"{abs(value):.2f}".partition(".")
    fraction = fraction.rstrip("0")
    if len(whole) > 3:
        head, tail = whole[:-3], whole[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        whole = ",".join(groups + [tail])
    return f"{sign}{whole}.{fraction}" if fraction else f"{sign}{whole}"


def _words(num):
    return p.number_to_words(num, andword="").replace(",", "")


def amount_to_words(amount):
    """Rupee amount in words using lakhs and crores."""
    n = int(to_amount(amount))
    if n <= 0:
        return "Zero Rupees Only"
    parts = []
    crores, rem = divmod(n, 10000000)
    lakhs, rem = divmod(rem, 100000)
    if crores:
        parts.append(_words(crores) + " Crore")
    if lakhs:
        parts.append(_words(lakhs) + " Lakh")
    if rem:
        parts.append(_words(rem))
    return " ".join(parts).title() + " Rupees Only"


def parse_timestamp(value):
    """
    Parse an ISO-8601 timestamp from the API into a naive local datetime.
    Returns None for missing or malformed values.
    """
    if not value:
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        try:
            dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            return None
    if dt.tzinfo is not None:
        dt = dt.astimezone().replace(tzinfo=None)
    return dt


def format_date(value):
    dt = parse_timestamp(value)
    return dt.strftime("%d/%m/%Y") if dt else ""


def format_time(value):
    dt = parse_timestamp(value)
    return dt.strftime("%I:%M:%S %p").lower() if dt else ""


def short_id(value):
    return str(value or "")[-8:]


def label(value):
    """'bank_transfer' -> 'Bank Transfer'."""
    return str(value or "").replace("_", " ").title()


def register_filters(app):
    currency = app.config.get("CURRENCY", "₹")
    app.jinja_env.filters["inr"] = lambda v: f"{currency}{format_inr(v)}"
    app.jinja_env.filters["in_words"] = amount_to_words
    app.jinja_env.filters["date_in"] = format_date
    app.jinja_env.filters["time_in"] = format_time
    app.jinja_env.filters["short_id"] = short_id
    app.jinja_env.filters["label"] = label
