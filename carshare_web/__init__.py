import logging
from functools import partial

from flask import Flask, flash, g, redirect, session, url_for

from .config import Settings
from .controllers.auth import bp as auth_bp
from .controllers.rentals import bp as rentals_bp
from .controllers.trips import bp as trips_bp
from .controllers.views import bp as views_bp
from .exceptions import SessionExpiredError
from .services.session import SessionContext
from .services.submissions import IN_FLIGHT
from .utils.filters import fmt_epoch_local, fmt_hours, fmt_km, fmt_price
from .utils.locations import location_label


def create_app(overrides=None):
    app = Flask(__name__, static_folder="static", template_folder="templates")
    app.config.update(Settings().to_flask_config())
    if overrides:
        app.config.update(overrides)

    logging.basicConfig(
        level=getattr(logging, app.config["LOG_LEVEL"], logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    app.register_blueprint(auth_bp)
    app.register_blueprint(views_bp)
    app.register_blueprint(rentals_bp)
    app.register_blueprint(trips_bp)

    app.jinja_env.filters["fmt_epoch_local"] = partial(fmt_epoch_local, tz_name=app.config["DISPLAY_TIMEZONE"])
    app.jinja_env.filters["fmt_price"] = partial(fmt_price, currency=app.config["CURRENCY_LABEL"])
    app.jinja_env.filters["fmt_km"] = fmt_km
    app.jinja_env.filters["fmt_hours"] = fmt_hours
    app.jinja_env.filters["location_label"] = location_label

    @app.before_request
    def load_identity():
        g.identity = SessionContext(session)

    @app.context_processor
    def inject_identity():
        return {"identity": g.get("identity")}

    @app.template_global()
    def form_busy(form_key):
        identity = g.get("identity")
        return identity is not None and IN_FLIGHT.is_busy(identity.submitter_key, form_key)

    @app.errorhandler(SessionExpiredError)
    def session_expired(err):
        g.identity.clear()
        flash(err.message, "warning")
        return redirect(url_for("auth.login_form"))

    return app
