from flask import Blueprint, flash, redirect, render_template, request, url_for

from ..exceptions import FormValidationError, PermissionDeniedError, SubmissionInProgressError
from ..services.forms import BookingForm, VehicleForm
from ..services.vehicle_service import VehicleService
from ..utils.constants import SEATING_CAPACITIES, TRANSMISSIONS, VEHICLE_TYPES, Role
from ..utils.decorators import login_required, role_required

bp = Blueprint("rentals", __name__, url_prefix="/")


@bp.post("/rent")
@login_required
def rent_vehicle(identity):
    """Book a vehicle for the signed-in renter between two named locations."""
    form = BookingForm.from_form(request.form)
    try:
        ok, msg = VehicleService.rent(identity, form)
    except (FormValidationError, PermissionDeniedError, SubmissionInProgressError) as e:
        ok, msg = False, e.message

    if not ok:
        flash(msg, "danger")
        # keep the chosen locations on the directory page
        return redirect(url_for("views.home", pickup=form.pickup_location or None,
                                drop=form.drop_location or None))
    flash(msg, "success")
    return redirect(url_for("views.dashboard"))


def _render_add_vehicle(form, identity, status=200):
    return render_template(
        "vehicles/add_vehicle.html",
        form=form,
        needs_verification=not identity.is_verified,
        vehicle_types=VEHICLE_TYPES,
        transmissions=TRANSMISSIONS,
        seating_capacities=SEATING_CAPACITIES,
        max_year=VehicleForm.max_year(),
    ), status


hosts_only = role_required(
    Role.HOST,
    message="Only hosts can add vehicles. Please register as a host first.",
    endpoint="views.become_host",
)


@bp.get("/add-vehicle")
@login_required
@hosts_only
def add_vehicle_form(identity):
    return _render_add_vehicle(VehicleForm(), identity)


@bp.post("/add-vehicle")
@login_required
@hosts_only
def add_vehicle_submit(identity):
    form = VehicleForm.from_form(request.form)
    try:
        ok, msg = VehicleService.register_vehicle(identity, form)
        problems = [msg]
    except PermissionDeniedError as e:
        # unverified host
        flash(e.message, "warning")
        return _render_add_vehicle(form, identity, 403)
    except FormValidationError as e:
        ok, problems = False, e.errors
    except SubmissionInProgressError as e:
        ok, problems = False, [e.message]

    if not ok:
        for problem in problems:
            flash(problem, "danger")
        return _render_add_vehicle(form, identity, 400)

    flash(msg, "success")
    return redirect(url_for("views.dashboard"))
