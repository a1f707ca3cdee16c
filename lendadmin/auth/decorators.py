from functools import wraps
from flask import session, redirect, url_for, request, current_app, jsonify


def wants_json():
    return request.headers.get("Accept", "").find("application/json") >= 0


def login_required(view_func):
    """Redirect to auth.login unless the admin session flag is set."""
    @wraps(view_func)
    def wrapper(*args, **kwargs):
        if not session.get("is_logged_in"):
            current_app.logger.debug(f"Unauthenticated request to {request.path}")
            if wants_json():
                return jsonify({"status": "error", "message": "Login required"}), 401
            return redirect(url_for("auth.login"))
        return view_func(*args, **kwargs)
    return wrapper
