"""
Display-side loan arithmetic.

These mirror the lending server's own figures so the operator can preview a
collection or a pre-closure before submitting it. The server recomputes and
persists the authoritative values.
"""
import math


def to_amount(value):
    """Parse a form/API value as a float. Blanks and garbage become 0.0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        amount = float(str(value).strip().replace(",", ""))
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(amount):
        return 0.0
    return amount


def monthly_interest(loan_amount, interest_rate):
    """Monthly interest for a rate given as percent per month (3% of 1,00,000 = 3,000)."""
    return round(to_amount(loan_amount) * to_amount(interest_rate) / 100, 2)


def monthly_pending(loan):
    """Amount still due for the month currently being collected on a loan."""
    if loan.get("status") == "closed":
        return 0.0
    interest = to_amount(loan.get("monthlyInterest"))
    if interest <= 0:
        return 0.0
    collected = round(to_amount(loan.get("totalCollected")) % interest, 2)
    if collected == 0 or collected == interest:
        return 0.0
    return round(interest - collected, 2)


def interest_collection_preview(monthly_interest, total_collected, collected_amount):
    """
    Split a proposed interest collection against the current month.

    Returns the current month's pending amount before collecting, what stays
    pending (or spills over to later months) after it, the new cumulative
    total and how many full months that total covers.
    """
    interest = to_amount(monthly_interest)
    previously = to_amount(total_collected)
    amount = to_amount(collected_amount)

    if interest > 0:
        current_month_collected = round(previously % interest, 2)
        if current_month_collected == interest:
            current_month_collected = 0.0
        current_month_pending = round(interest - current_month_collected, 2)
    else:
        current_month_pending = 0.0

    if amount <= current_month_pending:
        pending = round(current_month_pending - amount, 2)
        extra = 0.0
    else:
        pending = 0.0
        extra = round(amount - current_month_pending, 2)

    total = round(previously + amount, 2)
    months = math.floor(total / interest) if interest > 0 else 0

    if pending > 0:
        status = "pending"
    elif extra > 0:
        status = "extra"
    else:
        status = "complete"

    return {
        "monthly_interest": interest,
        "collected_amount": amount,
        "current_month_pending": current_month_pending,
        "pending_amount": pending,
        "extra_amount": extra,
        "total_collected": total,
        "months_collected": months,
        "status": status,
    }


def pre_close_preview(remaining_principal, penalty_amount=0, discount_amount=0):
    """Final settlement for closing a loan early, floored at zero."""
    remaining = to_amount(remaining_principal)
    penalty = to_amount(penalty_amount)
    discount = to_amount(discount_amount)
    total_outstanding = round(remaining + penalty, 2)
    return {
        "remaining_principal": remaining,
        "total_outstanding": total_outstanding,
        "penalty_applied": penalty,
        "discount_applied": discount,
        "final_settlement": max(0.0, round(total_outstanding - discount, 2)),
        "savings": discount,
    }
