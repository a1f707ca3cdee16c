from datetime import date

from flask import render_template, request, flash, jsonify, abort

from . import reports_bp
from ..api_client import fetch_list
from ..auth.decorators import login_required
from ..exports import export_response
from ..reporting import (
    overview_report, client_report, loan_performance_report,
    date_range_report, default_date_range,
)

REPORTS = ("overview", "clients", "loans", "daterange")
EXPORT_FORMATS = ("csv", "xlsx")
EXPORTS = {
    "clients": ("client-report", "Clients"),
    "loans": ("loan-performance", "Loans"),
}


def _date_range():
    start, end = default_date_range()
    try:
        if request.args.get("start"):
            start = date.fromisoformat(request.args["start"])
        if request.args.get("end"):
            end = date.fromisoformat(request.args["end"])
    except ValueError:
        flash("Invalid date; showing the current month instead.", "warning")
        return default_date_range()
    if start > end:
        flash("Start date is after end date; the range was swapped.", "warning")
        start, end = end, start
    return start, end


@reports_bp.route("/")
@login_required
def index():
    selected = request.args.get("report", "overview")
    if selected not in REPORTS:
        selected = "overview"

    clients = fetch_list("clients")
    loans = fetch_list("loans")
    transactions = fetch_list("transactions")

    context = {"selected": selected, "reports": REPORTS}
    if selected == "overview":
        context["overview"] = overview_report(clients, loans, transactions)
    elif selected == "clients":
        context["rows"] = client_report(clients, loans, transactions)
    elif selected == "loans":
        context["rows"] = loan_performance_report(loans, transactions)
    else:
        start, end = _date_range()
        context["date_range"] = date_range_report(transactions, start, end)

    return render_template("reports.html", active_tab="reports", auto_refresh=True, **context)


@reports_bp.route("/export/<report>.<fmt>")
@login_required
def export(report, fmt):
    if report not in EXPORTS or fmt not in EXPORT_FORMATS:
        abort(404)
    clients = fetch_list("clients")
    loans = fetch_list("loans")
    transactions = fetch_list("transactions")
    if report == "clients":
        rows = client_report(clients, loans, transactions)
    else:
        rows = loan_performance_report(loans, transactions)
    if not rows:
        return jsonify({"status": "error", "message": "Nothing to export"}), 404
    filename, sheet_name = EXPORTS[report]
    return export_response(rows, filename, fmt, sheet_name=sheet_name)
