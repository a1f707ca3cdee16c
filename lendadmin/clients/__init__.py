from flask import Blueprint

clients_bp = Blueprint("clients", __name__, url_prefix="/clients")

from . import routes  # noqa: E402,F401
