"""
Report aggregation over the lists fetched from the lending API.

Every function takes plain lists of API dicts and returns plain dicts/lists,
so pages, exports and tests share the same figures.
"""
import math
from datetime import date, datetime, time

from .calculations import to_amount
from .formatting import parse_timestamp

RECENT_TRANSACTIONS = 5
PAYMENT_METHODS = ("cash", "bank_transfer", "cheque")


def ref_id(value):
    """Reference fields arrive populated ({'_id': ...}) or as a bare id."""
    if isinstance(value, dict):
        value = value.get("_id")
    return str(value) if value not in (None, "") else None


def _interest_only(transactions):
    return [t for t in transactions if t.get("type") == "interest"]


def _total(rows, key):
    return round(sum(to_amount(r.get(key)) for r in rows), 2)


def _in_month(transaction, today):
    dt = parse_timestamp(transaction.get("transactionDate"))
    return dt is not None and dt.year == today.year and dt.month == today.month


def income_summary(transactions, today=None):
    today = today or date.today()
    interest = _interest_only(transactions)
    return {
        "total_income": _total(interest, "amount"),
        "transaction_count": len(interest),
        "monthly_income": _total([t for t in interest if _in_month(t, today)], "amount"),
    }


def dashboard_stats(clients, loans, transactions, today=None):
    return {
        "total_clients": len(clients),
        "active_loans": sum(1 for loan in loans if loan.get("status") == "active"),
        "total_loan_amount": _total(loans, "loanAmount"),
        "monthly_income": income_summary(transactions, today)["monthly_income"],
    }


def recent_transactions(transactions, limit=RECENT_TRANSACTIONS):
    return list(transactions[:limit])


def payment_method_breakdown(transactions, methods=PAYMENT_METHODS):
    """Count and total amount of every transaction type per payment method."""
    breakdown = []
    for method in methods:
        rows = [t for t in transactions if t.get("paymentMethod") == method]
        breakdown.append({"method": method, "count": len(rows), "total": _total(rows, "amount")})
    return breakdown


def loan_summary(loans):
    active = [loan for loan in loans if loan.get("status") == "active"]
    return {
        "total": len(loans),
        "active": len(active),
        "closed": sum(1 for loan in loans if loan.get("status") == "closed"),
        "total_loan_amount": _total(loans, "loanAmount"),
        "total_remaining": _total(loans, "remainingAmount"),
        "active_monthly_interest": _total(active, "monthlyInterest"),
    }


def monthly_income_report(transactions):
    """Interest income grouped by calendar month, newest month first."""
    months = {}
    for t in _interest_only(transactions):
        dt = parse_timestamp(t.get("transactionDate"))
        if dt is None:
            continue
        key = f"{dt.year}-{dt.month:02d}"
        bucket = months.setdefault(key, {
            "key": key,
            "month": dt.strftime("%B %Y"),
            "total_income": 0.0,
            "transaction_count": 0,
            "clients": set(),
        })
        bucket["total_income"] += to_amount(t.get("amount"))
        bucket["transaction_count"] += 1
        bucket["clients"].add(ref_id(t.get("client")))

    report = []
    for key in sorted(months, reverse=True):
        bucket = months[key]
        report.append({
            "key": bucket["key"],
            "month": bucket["month"],
            "total_income": round(bucket["total_income"], 2),
            "transaction_count": bucket["transaction_count"],
            "unique_clients": len(bucket["clients"] - {None}),
        })
    return report


def overview_report(clients, loans, transactions):
    monthly = monthly_income_report(transactions)
    latest = monthly[0] if monthly else None
    previous = monthly[1] if len(monthly) > 1 else None
    growth = 0.0
    if latest and previous and previous["total_income"]:
        growth = round((latest["total_income"] - previous["total_income"]) / previous["total_income"] * 100, 1)
    return {
        "total_clients": len(clients),
        "active_loans": sum(1 for loan in loans if loan.get("status") == "active"),
        "total_loan_amount": _total(loans, "loanAmount"),
        "latest_month": latest,
        "growth": growth,
        "recent_months": monthly[:6],
    }


def client_report(clients, loans, transactions):
    rows = []
    for client in clients:
        cid = ref_id(client)
        client_loans = [loan for loan in loans if ref_id(loan.get("client")) == cid]
        rows.append({
            **client,
            "totalLoanAmount": _total(client_loans, "loanAmount"),
            "totalCollected": _total(client_loans, "totalCollected"),
            "totalPending": _total(client_loans, "remainingAmount"),
            "activeLoans": sum(1 for loan in client_loans if loan.get("status") == "active"),
            "totalLoans": len(client_loans),
            "transactionCount": sum(1 for t in transactions if ref_id(t.get("client")) == cid),
        })
    return rows


def performance_grade(rate):
    if rate >= 100:
        return "good"
    if rate >= 80:
        return "fair"
    return "poor"


def loan_performance_report(loans, transactions, now=None):
    now = now or datetime.now()
    rows = []
    for loan in loans:
        lid = ref_id(loan)
        loan_transactions = [t for t in transactions if ref_id(t.get("loan")) == lid]
        collected = _total(_interest_only(loan_transactions), "amount")
        started = parse_timestamp(loan.get("loanDate"))
        months_active = max(0, math.floor((now - started).days / 30)) if started else 0
        expected = round(months_active * to_amount(loan.get("monthlyInterest")), 2)
        rate = round(collected / expected * 100, 1) if expected > 0 else 0.0
        rows.append({
            **loan,
            "totalInterestCollected": collected,
            "monthsActive": months_active,
            "expectedInterest": expected,
            "performanceRate": rate,
            "performanceGrade": performance_grade(rate),
            "transactionCount": len(loan_transactions),
        })
    return rows


def default_date_range(today=None):
    today = today or date.today()
    return today.replace(day=1), today


def transactions_in_range(transactions, start, end):
    """Transactions dated within [start, end], both whole days included."""
    lower = datetime.combine(start, time.min)
    picked = []
    for t in transactions:
        dt = parse_timestamp(t.get("transactionDate"))
        if dt is not None and lower <= dt and dt.date() <= end:
            picked.append(t)
    return picked


def date_range_report(transactions, start, end):
    in_range = transactions_in_range(transactions, start, end)
    interest = _interest_only(in_range)
    total = _total(interest, "amount")
    return {
        "start": start,
        "end": end,
        "total_income": total,
        "transaction_count": len(in_range),
        "interest_transactions": len(interest),
        "unique_clients": len({ref_id(t.get("client")) for t in interest} - {None}),
        "average_transaction": round(total / len(interest), 2) if interest else 0.0,
        "transactions": in_range,
    }
