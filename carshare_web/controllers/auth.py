from flask import Blueprint, flash, g, redirect, render_template, request, url_for

from ..exceptions import FormValidationError, SubmissionInProgressError
from ..services.auth_service import AuthService
from ..services.forms import LoginForm, RegisterForm
from ..utils.constants import Role

bp = Blueprint("auth", __name__, url_prefix="/auth")


@bp.get("register")
def register_form():
    return render_template("auth/register.html", form=RegisterForm(), roles=(Role.RENTER, Role.HOST))


@bp.post("register")
def register_submit():
    form = RegisterForm.from_form(request.form)
    try:
        ok, msg = AuthService.register(g.identity, form)
        problems = [msg]
    except FormValidationError as e:
        ok, problems = False, e.errors
    except SubmissionInProgressError as e:
        ok, problems = False, [e.message]

    if not ok:
        for problem in problems:
            flash(problem, "danger")
        return render_template("auth/register.html", form=form, roles=(Role.RENTER, Role.HOST)), 400

    flash(msg, "success")
    if g.identity.is_authenticated:
        return redirect(url_for("views.dashboard"))
    return redirect(url_for("auth.login_form"))


@bp.get("login")
def login_form():
    return render_template("auth/login.html", form=LoginForm())


@bp.post("login")
def login_submit():
    form = LoginForm.from_form(request.form)
    try:
        ok, msg = AuthService.login(g.identity, form)
    except (FormValidationError, SubmissionInProgressError) as e:
        ok, msg = False, e.message

    if not ok:
        flash(msg, "danger")
        # never echo the password back
        form.password = ""
        return render_template("auth/login.html", form=form), 400

    flash(msg, "success")
    return redirect(url_for("views.dashboard"))


@bp.get("logout")
def logout():
    AuthService.logout(g.identity)
    flash("Logged out")
    return redirect(url_for("auth.login_form"))
