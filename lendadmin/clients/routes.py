import re

import httpx
from flask import render_template, request, redirect, url_for, flash, current_app

from . import clients_bp
from ..api_client import ApiError, fetch_list, get_api
from ..auth.decorators import login_required
from ..refresh import refresh_all

CLIENT_FIELDS = ("name", "email", "phone", "address")
EMAIL_RE = re.compile(r"[^@]+@[^@]+\.[^@]+")


def read_client_form():
    data = {field: request.form.get(field, "").strip() for field in CLIENT_FIELDS}
    missing = [f for f, v in data.items() if not v]
    errors = []
    if missing:
        errors.append(f'Missing fields: {", ".join(missing)}')
    if data["email"] and not EMAIL_RE.match(data["email"]):
        errors.append("Invalid email format")
    return data, errors


def _render(clients, form=None, editing=None, show_form=False, status=200):
    return render_template(
        "clients.html",
        active_tab="clients",
        clients=clients,
        form=form or {f: "" for f in CLIENT_FIELDS},
        editing=editing,
        show_form=show_form or editing is not None,
    ), status


@clients_bp.route("/", methods=["GET", "POST"])
@login_required
def index():
    if request.method == "GET":
        return _render(fetch_list("clients"), show_form=request.args.get("new") == "1")

    data, errors = read_client_form()
    if errors:
        for e in errors:
            flash(e, "danger")
        return _render(fetch_list("clients"), form=data, show_form=True, status=400)
    try:
        get_api().create_client(data)
    except (ApiError, httpx.HTTPError) as e:
        current_app.logger.error(f"Error saving client: {e}")
        flash("Error saving client. Please try again.", "danger")
        return _render(fetch_list("clients"), form=data, show_form=True, status=502)
    refresh_all()
    flash(f"Client {data['name']} added.", "success")
    return redirect(url_for("clients.index"))


@clients_bp.route("/<client_id>/edit", methods=["GET", "POST"])
@login_required
def edit(client_id):
    clients = fetch_list("clients")
    client = next((c for c in clients if str(c.get("_id")) == str(client_id)), None)
    if client is None:
        flash("Client not found.", "danger")
        return redirect(url_for("clients.index"))

    if request.method == "GET":
        form = {f: client.get(f) or "" for f in CLIENT_FIELDS}
        return _render(clients, form=form, editing=client)

    data, errors = read_client_form()
    if errors:
        for e in errors:
            flash(e, "danger")
        return _render(clients, form=data, editing=client, status=400)
    try:
        get_api().update_client(client_id, data)
    except (ApiError, httpx.HTTPError) as e:
        current_app.logger.error(f"Error updating client {client_id}: {e}")
        flash("Error saving client. Please try again.", "danger")
        return _render(clients, form=data, editing=client, status=502)
    refresh_all()
    flash(f"Client {data['name']} updated.", "success")
    return redirect(url_for("clients.index"))
