from datetime import datetime, timedelta

from flask import request, jsonify, session, render_template, redirect, url_for, current_app
from werkzeug.security import check_password_hash

from . import auth_bp
from .decorators import wants_json

SESSION_KEYS = ("is_logged_in", "user_email", "login_time")
INVALID_CREDENTIALS = "Invalid email or password. Please try again."


def check_credentials(email, password):
    """Single hard-wired admin account; a werkzeug hash overrides the plain password."""
    config = current_app.config
    if (email or "").strip().lower() != (config["ADMIN_EMAIL"] or "").lower():
        return False
    password_hash = config.get("ADMIN_PASSWORD_HASH")
    if password_hash:
        return check_password_hash(password_hash, password or "")
    return password == config["ADMIN_PASSWORD"]


@auth_bp.route("/login", methods=["GET", "POST"])
def login():
    if request.method == "GET":
        if session.get("is_logged_in"):
            return redirect(url_for("dashboard.index"))
        return render_template("login.html")

    email = request.form.get("email", "").strip()
    password = request.form.get("password", "")
    if not check_credentials(email, password):
        current_app.logger.warning(f"Failed admin login for {email!r}")
        if wants_json():
            return jsonify({"status": "error", "message": INVALID_CREDENTIALS}), 401
        return render_template("login.html", error=INVALID_CREDENTIALS, email=email), 401

    session.permanent = True
    current_app.permanent_session_lifetime = timedelta(
        seconds=current_app.config["SESSION_LIFETIME_SECONDS"]
    )
    session["is_logged_in"] = True
    session["user_email"] = email
    session["login_time"] = datetime.now().isoformat(timespec="seconds")
    current_app.logger.info(f"Admin {email} logged in")

    if wants_json():
        return jsonify({"status": "success", "redirect": url_for("dashboard.index")}), 200
    return redirect(url_for("dashboard.index"))


@auth_bp.route("/logout", methods=["GET", "POST"])
def logout():
    for key in SESSION_KEYS:
        session.pop(key, None)
    return redirect(url_for("auth.login"))
