from flask import render_template

from . import transactions_bp
from ..api_client import fetch_list
from ..auth.decorators import login_required
from ..reporting import income_summary, payment_method_breakdown, recent_transactions

TYPE_BADGES = {
    "interest": "success",
    "principal": "info",
    "pre_close": "danger",
    "renewal": "warning",
}


@transactions_bp.route("/")
@login_required
def index():
    transactions = fetch_list("transactions")
    return render_template(
        "transactions.html",
        active_tab="transactions",
        auto_refresh=True,
        transactions=transactions,
        summary=income_summary(transactions),
        recent=recent_transactions(transactions),
        by_method=payment_method_breakdown(transactions),
        type_badges=TYPE_BADGES,
    )
