from flask import render_template

from . import dashboard_bp
from ..api_client import fetch_list
from ..auth.decorators import login_required
from ..reporting import dashboard_stats, recent_transactions


@dashboard_bp.route("/")
@login_required
def index():
    clients = fetch_list("clients")
    loans = fetch_list("loans")
    transactions = fetch_list("transactions")
    return render_template(
        "dashboard.html",
        active_tab="dashboard",
        auto_refresh=True,
        stats=dashboard_stats(clients, loans, transactions),
        recent=recent_transactions(transactions),
    )
