"""
Trip lifecycle pages: start, complete, cancel and rate.

Each page loads the trip fresh from the backend, asks the lifecycle state
machine whether the viewer may act on it, and only then shows the form.
A failed submission re-renders the same form with what the user typed.
"""

from flask import Blueprint, flash, redirect, render_template, request, url_for

from ..exceptions import (
    FormValidationError,
    InvalidTransitionError,
    PermissionDeniedError,
    SubmissionInProgressError,
)
from ..models.lifecycle import TripAction, check_action
from ..services.forms import CancelTripForm, CompleteTripForm, RatingForm, StartTripForm
from ..services.trip_service import TripService
from ..utils.constants import CANCELLATION_REASONS, FUEL_LEVELS, MAX_RATING, MIN_RATING
from ..utils.decorators import login_required

bp = Blueprint("trips", __name__, url_prefix="/trip")


def _load_for(identity, trip_id, action):
    """(trip, None) when the viewer may take *action* on the trip, else (None, redirect)."""
    trip, error = TripService.get_trip(identity, trip_id)
    if trip is None:
        flash(error, "danger")
        return None, redirect(url_for("views.dashboard"))
    try:
        check_action(trip.status, identity.role, action)
    except (PermissionDeniedError, InvalidTransitionError) as e:
        flash(e.message, "warning")
        return None, redirect(url_for("views.dashboard"))
    if action is TripAction.RATE and identity.user_id not in (trip.renter_id, trip.owner_id):
        if trip.renter_id or trip.owner_id:
            flash("You can only rate trips you took part in.", "warning")
            return None, redirect(url_for("views.dashboard"))
    return trip, None


def _submit(identity, trip, submit, form, render):
    """Run one transition; redirect to the dashboard on success, re-render the form otherwise."""
    try:
        ok, msg = submit(identity, trip, form)
        problems = [msg]
    except (PermissionDeniedError, InvalidTransitionError) as e:
        flash(e.message, "warning")
        return redirect(url_for("views.dashboard"))
    except FormValidationError as e:
        ok, problems = False, e.errors
    except SubmissionInProgressError as e:
        ok, problems = False, [e.message]

    if not ok:
        for problem in problems:
            flash(problem, "danger")
        return render(trip, form), 400

    flash(msg, "success")
    return redirect(url_for("views.dashboard"))


# ---------- Start ----------
def _render_start(trip, form):
    return render_template("trips/start.html", trip=trip, form=form)


@bp.get("/<trip_id>/start")
@login_required
def start_form(trip_id, identity):
    trip, bounce = _load_for(identity, trip_id, TripAction.START)
    if bounce:
        return bounce
    return _render_start(trip, StartTripForm())


@bp.post("/<trip_id>/start")
@login_required
def start_submit(trip_id, identity):
    trip, bounce = _load_for(identity, trip_id, TripAction.START)
    if bounce:
        return bounce
    form = StartTripForm.from_form(request.form)
    return _submit(identity, trip, TripService.start_trip, form, _render_start)


# ---------- Complete ----------
def _render_complete(trip, form):
    return render_template(
        "trips/complete.html", trip=trip, form=form,
        fuel_levels=FUEL_LEVELS, distance=form.distance(),
    )


@bp.get("/<trip_id>/complete")
@login_required
def complete_form(trip_id, identity):
    trip, bounce = _load_for(identity, trip_id, TripAction.COMPLETE)
    if bounce:
        return bounce
    return _render_complete(trip, CompleteTripForm(min_reading=trip.start_odometer_reading or 0))


@bp.post("/<trip_id>/complete")
@login_required
def complete_submit(trip_id, identity):
    trip, bounce = _load_for(identity, trip_id, TripAction.COMPLETE)
    if bounce:
        return bounce
    form = CompleteTripForm.from_form(request.form, trip.start_odometer_reading)
    return _submit(identity, trip, TripService.complete_trip, form, _render_complete)


# ---------- Cancel ----------
def _render_cancel(trip, form):
    return render_template(
        "trips/cancel.html", trip=trip, form=form,
        reasons=CANCELLATION_REASONS, refund=TripService.refund_estimate(trip),
    )


@bp.get("/<trip_id>/cancel")
@login_required
def cancel_form(trip_id, identity):
    trip, bounce = _load_for(identity, trip_id, TripAction.CANCEL)
    if bounce:
        return bounce
    return _render_cancel(trip, CancelTripForm())


@bp.post("/<trip_id>/cancel")
@login_required
def cancel_submit(trip_id, identity):
    trip, bounce = _load_for(identity, trip_id, TripAction.CANCEL)
    if bounce:
        return bounce
    form = CancelTripForm.from_form(request.form)
    return _submit(identity, trip, TripService.cancel_trip, form, _render_cancel)


# ---------- Rating ----------
@bp.get("/<trip_id>/rating")
@login_required
def rating_form(trip_id, identity):
    trip, bounce = _load_for(identity, trip_id, TripAction.RATE)
    if bounce:
        return bounce
    existing = TripService.existing_rating(identity, trip)
    return render_template(
        "trips/rating.html", trip=trip, form=RatingForm(), existing=existing,
        min_rating=MIN_RATING, max_rating=MAX_RATING,
    )


@bp.post("/<trip_id>/rating")
@login_required
def rating_submit(trip_id, identity):
    trip, bounce = _load_for(identity, trip_id, TripAction.RATE)
    if bounce:
        return bounce
    if TripService.existing_rating(identity, trip):
        flash("You have already rated this trip.", "warning")
        return redirect(url_for("trips.rating_form", trip_id=trip.id))

    def render(t, f):
        return render_template(
            "trips/rating.html", trip=t, form=f, existing=None,
            min_rating=MIN_RATING, max_rating=MAX_RATING,
        )

    form = RatingForm.from_form(request.form)
    return _submit(identity, trip, TripService.submit_rating, form, render)
