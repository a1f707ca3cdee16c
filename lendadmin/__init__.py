import os
from datetime import timedelta

from flask import Flask, jsonify, redirect, url_for

from .config import Config


def create_app(overrides=None):
    # Templates and static resolve from project root (one level up from this package)
    root_dir = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
    static_dir = os.path.join(root_dir, "static")
    templates_dir = os.path.join(root_dir, "templates")
    app = Flask(__name__, static_folder=static_dir, static_url_path="/static", template_folder=templates_dir)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    app.logger.setLevel(app.config["LOG_LEVEL"])
    app.permanent_session_lifetime = timedelta(seconds=app.config["SESSION_LIFETIME_SECONDS"])

    from .api_client import init_api
    from .refresh import init_refresh
    from .formatting import register_filters
    from .cli import register_cli

    init_api(app)
    init_refresh(app)
    register_filters(app)
    register_cli(app)

    from .auth import auth_bp
    from .dashboard import dashboard_bp
    from .clients import clients_bp
    from .loans import loans_bp
    from .transactions import transactions_bp
    from .reports import reports_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(clients_bp)
    app.register_blueprint(loans_bp)
    app.register_blueprint(transactions_bp)
    app.register_blueprint(reports_bp)

    @app.route("/")
    def home():
        return redirect(url_for("dashboard.index"))

    @app.route("/refresh/version")
    def refresh_version():
        return jsonify(app.extensions["refresh_tracker"].as_dict())

    @app.context_processor
    def inject_settings():
        return {"refresh_poll_seconds": app.config["REFRESH_POLL_SECONDS"]}

    app.logger.info(f"Lending console using API at {app.config['LENDING_API_URL']}")
    return app
