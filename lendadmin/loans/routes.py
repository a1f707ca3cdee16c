from datetime import date

import httpx
from flask import render_template, request, redirect, url_for, flash, jsonify, current_app

from . import loans_bp
from ..api_client import ApiError, fetch_list, get_api
from ..auth.decorators import login_required
from ..calculations import (
    to_amount, monthly_interest, monthly_pending,
    interest_collection_preview, pre_close_preview,
)
from ..formatting import format_inr
from ..refresh import refresh_all
from ..reporting import PAYMENT_METHODS, loan_summary, ref_id

LOAN_FIELDS = ("clientId", "loanAmount", "interestRate", "notes")


def _payment_method():
    method = request.form.get("paymentMethod", "cash")
    return method if method in PAYMENT_METHODS else "cash"


def _find_active_loan(loan_id):
    """Loan lookup for the per-loan pages. Returns (loan, error_message, http_status)."""
    try:
        loan = get_api().get_loan(loan_id)
    except (ApiError, httpx.HTTPError) as e:
        current_app.logger.error(f"Error fetching loan {loan_id}: {e}")
        return None, "Could not load the loan from the lending service.", 502
    if loan is None:
        return None, "Loan not found.", 404
    if loan.get("status") != "active":
        return None, f"Loan is {loan.get('status') or 'not active'}; only active loans accept payments.", 409
    return loan, None, 200


def _active_loan_or_redirect(loan_id):
    loan, error, _ = _find_active_loan(loan_id)
    if error:
        flash(error, "danger")
        return None, redirect(url_for("loans.index"))
    return loan, None


def _active_loan_or_json(loan_id):
    loan, error, status = _find_active_loan(loan_id)
    if error:
        return None, (jsonify({"status": "error", "message": error}), status)
    return loan, None


# --- list / create ---

def read_loan_form(clients):
    data = {field: request.form.get(field, "").strip() for field in LOAN_FIELDS}
    errors = []
    if not data["clientId"]:
        errors.append("Please choose a client")
    elif clients and data["clientId"] not in {ref_id(c) for c in clients}:
        errors.append("Unknown client")
    if to_amount(data["loanAmount"]) <= 0:
        errors.append("Loan amount must be greater than zero")
    if to_amount(data["interestRate"]) <= 0:
        errors.append("Interest rate must be greater than zero")
    return data, errors


def _render_index(loans, clients, form=None, show_form=False, status=200):
    form = form or {f: "" for f in LOAN_FIELDS}
    return render_template(
        "loans.html",
        active_tab="loans",
        loans=loans,
        clients=clients,
        pending={ref_id(loan): monthly_pending(loan) for loan in loans},
        summary=loan_summary(loans),
        form=form,
        form_monthly_interest=monthly_interest(form["loanAmount"], form["interestRate"]),
        show_form=show_form,
    ), status


@loans_bp.route("/", methods=["GET", "POST"])
@login_required
def index():
    loans = fetch_list("loans")
    clients = fetch_list("clients")
    if request.method == "GET":
        return _render_index(loans, clients, show_form=request.args.get("new") == "1")

    data, errors = read_loan_form(clients)
    if errors:
        for e in errors:
            flash(e, "danger")
        return _render_index(loans, clients, form=data, show_form=True, status=400)

    payload = {
        "clientId": data["clientId"],
        "loanAmount": to_amount(data["loanAmount"]),
        "interestRate": to_amount(data["interestRate"]),
        "notes": data["notes"],
    }
    try:
        get_api().create_loan(payload)
    except (ApiError, httpx.HTTPError) as e:
        current_app.logger.error(f"Error creating loan: {e}")
        flash("Error creating loan. Please try again.", "danger")
        return _render_index(loans, clients, form=data, show_form=True, status=502)
    refresh_all()
    flash("Loan created.", "success")
    return redirect(url_for("loans.index"))


# --- interest collection ---

@loans_bp.route("/<loan_id>/collect-interest", methods=["GET", "POST"])
@login_required
def collect_interest(loan_id):
    loan, response = _active_loan_or_redirect(loan_id)
    if response:
        return response

    if request.method == "GET":
        form = {
            "collectionDate": date.today().isoformat(),
            "collectedAmount": loan.get("monthlyInterest") or 0,
            "paymentMethod": "cash",
            "notes": "",
        }
        return _render_collect(loan, form)

    form = {
        "collectionDate": request.form.get("collectionDate", "").strip() or date.today().isoformat(),
        "collectedAmount": request.form.get("collectedAmount", "").strip(),
        "paymentMethod": _payment_method(),
        "notes": request.form.get("notes", "").strip(),
    }
    amount = to_amount(form["collectedAmount"])
    if amount <= 0:
        flash("Please enter a valid collection amount", "danger")
        return _render_collect(loan, form, status=400)
    try:
        date.fromisoformat(form["collectionDate"])
    except ValueError:
        flash("Please enter a valid collection date", "danger")
        return _render_collect(loan, form, status=400)

    try:
        get_api().collect_interest(loan_id, {
            "paymentMethod": form["paymentMethod"],
            "collectedAmount": amount,
            "collectionDate": form["collectionDate"],
            "notes": form["notes"],
        })
    except (ApiError, httpx.HTTPError) as e:
        current_app.logger.error(f"Error collecting interest on loan {loan_id}: {e}")
        flash("Error collecting interest. Please try again.", "danger")
        return _render_collect(loan, form, status=502)

    refresh_all()
    flash(f"Interest of ₹{format_inr(amount)} collected.", "success")
    return redirect(url_for("loans.index"))


def _render_collect(loan, form, status=200):
    preview = interest_collection_preview(
        loan.get("monthlyInterest"), loan.get("totalCollected"), form["collectedAmount"]
    )
    return render_template(
        "collect_interest.html",
        active_tab="loans",
        loan=loan,
        form=form,
        preview=preview,
        payment_methods=PAYMENT_METHODS,
    ), status


@loans_bp.route("/<loan_id>/collect-interest/preview")
@login_required
def collect_interest_preview(loan_id):
    loan, response = _active_loan_or_json(loan_id)
    if response:
        return response
    preview = interest_collection_preview(
        loan.get("monthlyInterest"), loan.get("totalCollected"), request.args.get("amount")
    )
    return jsonify({"status": "success", "preview": preview})


# --- pre-close ---

def _read_settlement_form():
    form = {
        "penaltyAmount": request.form.get("penaltyAmount", "").strip() or "0",
        "discountAmount": request.form.get("discountAmount", "").strip() or "0",
        "paymentMethod": _payment_method(),
        "notes": request.form.get("notes", "").strip(),
    }
    errors = []
    if to_amount(form["penaltyAmount"]) < 0:
        errors.append("Penalty cannot be negative")
    if to_amount(form["discountAmount"]) < 0:
        errors.append("Discount cannot be negative")
    return form, errors


def _render_pre_close(template, loan, form, status=200):
    preview = pre_close_preview(loan.get("remainingAmount"), form["penaltyAmount"], form["discountAmount"])
    return render_template(
        template,
        active_tab="loans",
        loan=loan,
        form=form,
        preview=preview,
        payment_methods=PAYMENT_METHODS,
    ), status


@loans_bp.route("/<loan_id>/pre-close", methods=["GET", "POST"])
@login_required
def pre_close(loan_id):
    """Settlement form; a POST shows the confirmation step, nothing is sent yet."""
    loan, response = _active_loan_or_redirect(loan_id)
    if response:
        return response

    if request.method == "GET":
        form = {"penaltyAmount": "0", "discountAmount": "0", "paymentMethod": "cash", "notes": ""}
        return _render_pre_close("pre_close.html", loan, form)

    form, errors = _read_settlement_form()
    if errors:
        for e in errors:
            flash(e, "danger")
        return _render_pre_close("pre_close.html", loan, form, status=400)
    return _render_pre_close("pre_close_confirm.html", loan, form)


@loans_bp.route("/<loan_id>/pre-close/confirm", methods=["POST"])
@login_required
def confirm_pre_close(loan_id):
    loan, response = _active_loan_or_redirect(loan_id)
    if response:
        return response

    form, errors = _read_settlement_form()
    if errors:
        for e in errors:
            flash(e, "danger")
        return _render_pre_close("pre_close.html", loan, form, status=400)

    # Recomputed from the freshly fetched loan, never taken from the page
    preview = pre_close_preview(loan.get("remainingAmount"), form["penaltyAmount"], form["discountAmount"])
    try:
        get_api().pre_close(loan_id, {
            "paymentMethod": form["paymentMethod"],
            "finalAmount": preview["final_settlement"],
            "penaltyAmount": preview["penalty_applied"],
            "discountAmount": preview["discount_applied"],
            "notes": form["notes"],
        })
    except (ApiError, httpx.HTTPError) as e:
        current_app.logger.error(f"Error pre-closing loan {loan_id}: {e}")
        flash("Error pre-closing loan. Please try again.", "danger")
        return _render_pre_close("pre_close.html", loan, form, status=502)

    refresh_all()
    flash(f"Loan pre-closed with a final settlement of ₹{format_inr(preview['final_settlement'])}.", "success")
    return redirect(url_for("loans.index"))


@loans_bp.route("/<loan_id>/pre-close/preview")
@login_required
def pre_close_preview_json(loan_id):
    loan, response = _active_loan_or_json(loan_id)
    if response:
        return response
    preview = pre_close_preview(
        loan.get("remainingAmount"), request.args.get("penalty"), request.args.get("discount")
    )
    return jsonify({"status": "success", "preview": preview})
