from __future__ import annotations

import logging
from datetime import timedelta

from flask import Flask, flash, redirect, render_template, request, session, url_for

from ..common.web import login_required, roles_required, session_actor
from ..container import Container
from ..core.constants import DEFAULT_SESSION_DAYS
from ..core.enums import LeaveStatus, Role, StaffType
from ..core.exceptions import AuthenticationError, AuthorizationError, NotFoundError, StoreError, ValidationError

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/", methods=["GET", "POST"], endpoint="login")
    def login():
        if "user_id" in session:
            return redirect(url_for("dashboard"))

        if request.method == "POST":
            email = request.form.get("email", "")
            password = request.form.get("password", "")
            remember = request.form.get("remember_me")

            try:
                s_user = container.auth_service.authenticate(email, password)

                session.permanent = bool(remember)
                app.permanent_session_lifetime = timedelta(days=DEFAULT_SESSION_DAYS)

                session["user_id"] = s_user.user_id
                session["name"] = s_user.full_name
                session["role"] = s_user.role.value
                session["division"] = s_user.division

                flash("Signed in successfully.", "success")
                return redirect(url_for("dashboard"))
            except AuthenticationError as e:
                flash(str(e), "danger")
            except StoreError:
                logger.exception("Login failed")
                flash("System error while signing in", "danger")

        return render_template("login.html")

    @app.route("/logout", endpoint="logout")
    def logout():
        session.clear()
        flash("You have been signed out.", "info")
        return redirect(url_for("login"))

    @app.route("/dashboard", endpoint="dashboard")
    @login_required
    def dashboard():
        actor = session_actor()
        summary = {"my_leaves": [], "to_recommend": [], "to_approve": []}
        try:
            summary["my_leaves"] = container.leave_service.list_my_applications(actor=actor)[:5]
            if actor.role == Role.DIVISION_CC:
                summary["to_recommend"] = container.leave_service.list_pending_recommendations(actor=actor)
            if actor.role in {Role.DIVISIONAL_HEAD, Role.HOD}:
                summary["to_approve"] = container.leave_service.list_for_approver(
                    actor=actor, status=LeaveStatus.RECOMMENDED
                )
        except StoreError:
            logger.exception("Loading dashboard for user %s failed", actor.user_id)
            flash("Some information could not be loaded", "warning")
        return render_template("dashboard.html", active_page="dashboard", **summary)

    @app.route("/directory", methods=["GET"], endpoint="directory")
    @roles_required(Role.DIVISION_CC, Role.DIVISIONAL_HEAD, Role.HOD, Role.ADMIN)
    def directory():
        actor = session_actor()
        role_s = request.args.get("role", "all")
        try:
            role = None if role_s == "all" else Role(role_s)
        except ValueError:
            role = None

        users, divisions = [], []
        try:
            users = container.user_service.staff_directory(
                actor=actor,
                division=request.args.get("division"),
                role=role,
                search=request.args.get("q"),
            )
            if actor.role in {Role.ADMIN, Role.HOD}:
                divisions = container.user_service.list_divisions()
        except ValidationError as e:
            flash(str(e), "warning")
        except StoreError:
            logger.exception("Loading directory for user %s failed", actor.user_id)
            flash("Staff directory could not be loaded", "warning")

        return render_template(
            "directory.html",
            users=users,
            divisions=divisions,
            roles=list(Role),
            current_role=role_s,
            current_division=request.args.get("division", ""),
            search=request.args.get("q", ""),
            active_page="directory",
        )

    @app.route("/admin/users", endpoint="admin_users")
    @roles_required(Role.ADMIN, Role.HOD)
    def admin_users():
        users = container.user_service.list_admin_view()
        return render_template("admin/users.html", users=users, active_page="admin_users")

    @app.route("/admin/users/add", methods=["GET", "POST"], endpoint="add_user")
    @roles_required(Role.ADMIN, Role.HOD)
    def add_user():
        if request.method == "POST":
            try:
                try:
                    role = Role(request.form.get("role", Role.STAFF.value))
                    staff_type_s = request.form.get("staff_type") or ""
                    staff_type = StaffType(staff_type_s) if staff_type_s else None
                except ValueError:
                    raise ValidationError("Invalid role or staff type")

                container.user_service.create_account(
                    actor=session_actor(),
                    full_name=request.form.get("full_name", ""),
                    email=request.form.get("email", ""),
                    password=request.form.get("password", ""),
                    role=role,
                    division=request.form.get("division"),
                    staff_type=staff_type,
                    designation=request.form.get("designation"),
                )

                flash("Account created.", "success")
                return redirect(url_for("admin_users"))
            except (ValidationError, AuthorizationError) as e:
                flash(str(e), "danger")
            except StoreError:
                logger.exception("Creating account failed")
                flash("System error while creating the account", "danger")

        return render_template(
            "admin/add_user.html",
            divisions=container.user_service.list_divisions(),
            roles=list(Role),
            staff_types=list(StaffType),
            active_page="add_user",
        )

    @app.route("/admin/users/<int:user_id>/edit", methods=["GET", "POST"], endpoint="edit_user")
    @roles_required(Role.ADMIN, Role.HOD)
    def edit_user(user_id: int):
        actor = session_actor()
        try:
            user = container.user_service.get_user(actor=actor, user_id=user_id)
        except NotFoundError as e:
            flash(str(e), "warning")
            return redirect(url_for("admin_users"))
        except StoreError:
            logger.exception("Loading user %s failed", user_id)
            flash("User could not be loaded", "warning")
            return redirect(url_for("admin_users"))

        if request.method == "POST":
            try:
                try:
                    role = Role(request.form.get("role", ""))
                    staff_type_s = request.form.get("staff_type") or ""
                    staff_type = StaffType(staff_type_s) if staff_type_s else None
                except ValueError:
                    raise ValidationError("Invalid role or staff type")

                container.user_service.update_user(
                    actor=actor,
                    user_id=user_id,
                    full_name=request.form.get("full_name", ""),
                    role=role,
                    division=request.form.get("division"),
                    staff_type=staff_type,
                    designation=request.form.get("designation"),
                )
                flash("Account updated.", "success")
                return redirect(url_for("admin_users"))
            except (ValidationError, AuthorizationError) as e:
                flash(str(e), "danger")
            except StoreError:
                logger.exception("Updating user %s failed", user_id)
                flash("System error while updating the account", "danger")

        return render_template(
            "admin/edit_user.html",
            user=user,
            divisions=container.user_service.list_divisions(),
            roles=list(Role),
            staff_types=list(StaffType),
            active_page="admin_users",
        )

    @app.route("/admin/users/<int:user_id>/delete", methods=["POST"], endpoint="delete_user")
    @roles_required(Role.ADMIN, Role.HOD)
    def delete_user(user_id: int):
        try:
            container.user_service.delete_user(actor=session_actor(), user_id=user_id)
            flash("User deleted.", "success")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except StoreError:
            logger.exception("Deleting user %s failed", user_id)
            flash("System error while deleting the user", "danger")

        return redirect(url_for("admin_users"))

    @app.route("/admin/divisions", methods=["GET", "POST"], endpoint="admin_divisions")
    @roles_required(Role.ADMIN)
    def admin_divisions():
        if request.method == "POST":
            try:
                container.user_service.create_division(
                    actor=session_actor(),
                    name=request.form.get("name", ""),
                    description=request.form.get("description", ""),
                )
                flash("Division created.", "success")
                return redirect(url_for("admin_divisions"))
            except (ValidationError, AuthorizationError) as e:
                flash(str(e), "danger")
            except StoreError:
                logger.exception("Creating division failed")
                flash("System error while creating the division", "danger")

        return render_template(
            "admin/divisions.html",
            divisions=container.user_service.list_divisions(),
            active_page="admin_divisions",
        )
