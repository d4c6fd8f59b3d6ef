from flask import Blueprint, flash, g, redirect, render_template, request, url_for

from ..services.common import is_checked
from ..services.dashboard_service import DashboardService
from ..services.forms import BookingForm
from ..services.trip_service import TripService
from ..services.vehicle_service import VehicleService
from ..utils.decorators import login_required
from ..utils.locations import location_names

bp = Blueprint("views", __name__)


@bp.get("/")
def home():
    """Vehicle directory. Open to everyone; booking controls depend on who is looking."""
    identity = g.identity
    pickup = (request.args.get("pickup") or "").strip()
    drop = (request.args.get("drop") or "").strip()

    vehicles, error = VehicleService.search(identity, pickup or None, drop or None)
    if error:
        flash(error, "danger")

    form = BookingForm(pickup_location=pickup, drop_location=drop)
    blocked = {v.license_plate: VehicleService.booking_block_reason(identity, v) for v in vehicles}

    active_trip = None
    if identity.is_authenticated and identity.is_renter:
        active_trip = TripService.active_trip(identity)

    return render_template(
        "home.html",
        vehicles=vehicles,
        blocked=blocked,
        form=form,
        locations=location_names(),
        active_trip=active_trip,
    )


@bp.get("/dashboard")
@login_required
def dashboard(identity):
    board = DashboardService.build(identity)
    if board.error:
        flash(board.error, "danger")
    return render_template("dashboard.html", board=board)


@bp.get("/become-host")
def become_host():
    return render_template("become_host.html")


@bp.post("/become-host")
@login_required
def become_host_submit(identity):
    if identity.is_host:
        flash("You're already a host")
        return redirect(url_for("views.dashboard"))
    if not is_checked(request.form.get("agreed")):
        flash("Please accept the Terms of Service and Host Agreement to continue.", "danger")
        return render_template("become_host.html"), 400
    flash("Thanks for your interest in hosting! Our team will be in touch.", "success")
    return redirect(url_for("views.dashboard"))
