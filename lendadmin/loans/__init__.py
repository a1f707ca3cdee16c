from flask import Blueprint

# Loan list/create plus the collect-interest and pre-close flows
loans_bp = Blueprint("loans", __name__, url_prefix="/loans")

from . import routes  # noqa: E402,F401
