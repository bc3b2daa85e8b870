from __future__ import annotations

import logging

from flask import Flask, flash, redirect, render_template, request, url_for

from ..common.datetime_utils import parse_iso_date
from ..common.web import login_required, roles_required, session_actor
from ..container import Container
from ..core.enums import LeaveStatus, LeaveType, Role
from ..core.exceptions import AuthorizationError, InvalidStateError, StoreError, ValidationError

logger = logging.getLogger(__name__)

WORKFLOW_ERRORS = (ValidationError, AuthorizationError, InvalidStateError)


def register(app: Flask, container: Container) -> None:
    def _int_or_none(value: str | None) -> int | None:
        value = (value or "").strip()
        return int(value) if value.isdigit() else None

    @app.route("/leaves", methods=["GET"], endpoint="my_leaves")
    @login_required
    def my_leaves():
        actor = session_actor()
        try:
            leaves = container.leave_service.list_my_applications(actor=actor)
        except StoreError:
            logger.exception("Loading leaves of user %s failed", actor.user_id)
            flash("Your leave applications could not be loaded", "warning")
            leaves = []
        leave_type = request.args.get("type", "all")
        status = request.args.get("status", "all")
        if leave_type != "all":
            leaves = [lv for lv in leaves if lv.leave_type.value == leave_type]
        if status != "all":
            leaves = [lv for lv in leaves if lv.status.value == status]
        return render_template(
            "leaves/index.html",
            leaves=leaves,
            leave_types=list(LeaveType),
            statuses=list(LeaveStatus),
            active_page="my_leaves",
        )

    @app.route("/leaves/apply", methods=["GET", "POST"], endpoint="apply_leave")
    @roles_required(Role.STAFF, Role.DIVISION_CC, Role.DIVISIONAL_HEAD)
    def apply_leave():
        actor = session_actor()

        if request.method == "POST":
            try:
                try:
                    leave_type = LeaveType(request.form.get("leave_type", ""))
                    start_date = parse_iso_date(request.form.get("start_date") or "")
                    resume_date = parse_iso_date(request.form.get("resume_date") or "")
                except ValueError:
                    raise ValidationError("Please choose a leave type and valid dates")

                container.leave_service.submit(
                    actor=actor,
                    leave_type=leave_type,
                    start_date=start_date,
                    resume_date=resume_date,
                    reason=request.form.get("reason", ""),
                    recommender_id=_int_or_none(request.form.get("recommender_id")) or 0,
                    approver_id=_int_or_none(request.form.get("approver_id")) or 0,
                    acting_officer_id=_int_or_none(request.form.get("acting_officer_id")),
                )
                flash("Your leave application has been submitted successfully.", "success")
                return redirect(url_for("my_leaves"))
            except WORKFLOW_ERRORS as e:
                flash(str(e), "danger")
            except StoreError:
                logger.exception("Submitting leave for user %s failed", actor.user_id)
                flash("Failed to submit leave application. Please try again.", "danger")

        try:
            personnel = container.user_service.division_personnel(applicant_id=actor.user_id)
        except ValidationError as e:
            flash(str(e), "warning")
            return redirect(url_for("dashboard"))
        except StoreError:
            logger.exception("Loading division personnel for user %s failed", actor.user_id)
            flash("Recommenders and approvers could not be loaded", "warning")
            return redirect(url_for("dashboard"))

        return render_template(
            "leaves/apply.html",
            personnel=personnel,
            leave_types=list(LeaveType),
            active_page="apply_leave",
        )

    @app.route("/leaves/recommendations", methods=["GET"], endpoint="leave_recommendations")
    @roles_required(Role.DIVISION_CC)
    def leave_recommendations():
        actor = session_actor()
        try:
            leaves = container.leave_service.list_pending_recommendations(actor=actor)
        except StoreError:
            logger.exception("Loading recommendations for user %s failed", actor.user_id)
            flash("Pending recommendations could not be loaded", "warning")
            leaves = []
        return render_template("leaves/recommendations.html", leaves=leaves, active_page="leave_recommendations")

    @app.route("/leaves/<int:leave_id>/recommend", methods=["POST"], endpoint="recommend_leave")
    @login_required
    def recommend_leave(leave_id: int):
        decision = request.form.get("recommendation", "")
        try:
            if decision not in {"recommended", "not_recommended"}:
                raise ValidationError("Please select a recommendation")
            container.leave_service.recommend(
                actor=session_actor(),
                leave_id=leave_id,
                recommended=decision == "recommended",
                remarks=request.form.get("remarks", ""),
            )
            flash(
                "Leave application has been "
                f"{'recommended' if decision == 'recommended' else 'rejected'} successfully.",
                "success",
            )
        except WORKFLOW_ERRORS as e:
            flash(str(e), "danger")
        except StoreError:
            logger.exception("Recommending leave %s failed", leave_id)
            flash("Failed to process recommendation. Please try again.", "danger")
        return redirect(url_for("leave_recommendations"))

    @app.route("/leaves/approvals", methods=["GET"], endpoint="leave_approvals")
    @roles_required(Role.DIVISIONAL_HEAD, Role.HOD)
    def leave_approvals():
        status_s = request.args.get("status", LeaveStatus.RECOMMENDED.value)
        try:
            status = None if status_s == "all" else LeaveStatus(status_s)
        except ValueError:
            status = LeaveStatus.RECOMMENDED
        actor = session_actor()
        try:
            leaves = container.leave_service.list_for_approver(actor=actor, status=status)
        except StoreError:
            logger.exception("Loading approvals for user %s failed", actor.user_id)
            flash("Applications awaiting approval could not be loaded", "warning")
            leaves = []
        return render_template(
            "leaves/approvals.html",
            leaves=leaves,
            statuses=list(LeaveStatus),
            current_status=status_s,
            active_page="leave_approvals",
        )

    @app.route("/leaves/<int:leave_id>/decide", methods=["POST"], endpoint="decide_leave")
    @login_required
    def decide_leave(leave_id: int):
        decision = request.form.get("approval", "")
        try:
            if decision not in {"approved", "rejected"}:
                raise ValidationError("Please select an approval decision")
            container.leave_service.decide(
                actor=session_actor(),
                leave_id=leave_id,
                approved=decision == "approved",
                remarks=request.form.get("remarks", ""),
            )
            flash(f"Leave application {decision} successfully", "success")
        except WORKFLOW_ERRORS as e:
            flash(str(e), "danger")
        except StoreError:
            logger.exception("Deciding leave %s failed", leave_id)
            flash("Failed to process the decision. Please try again.", "danger")
        return redirect(url_for("leave_approvals"))

    @app.route("/leaves/<int:leave_id>", methods=["GET"], endpoint="leave_detail")
    @login_required
    def leave_detail(leave_id: int):
        try:
            leave = container.leave_service.get_application(actor=session_actor(), leave_id=leave_id)
        except AuthorizationError as e:
            flash(str(e), "danger")
            return redirect(url_for("my_leaves"))
        except ValidationError as e:
            flash(str(e), "warning")
            return redirect(url_for("my_leaves"))
        except StoreError:
            logger.exception("Loading leave %s failed", leave_id)
            flash("Leave application could not be loaded", "warning")
            return redirect(url_for("my_leaves"))
        return render_template("leaves/detail.html", leave=leave, active_page="my_leaves")

    @app.route("/leaves/<int:leave_id>/print", methods=["GET"], endpoint="print_leave")
    @login_required
    def print_leave(leave_id: int):
        try:
            slip = container.leave_service.get_printable(actor=session_actor(), leave_id=leave_id)
        except AuthorizationError as e:
            flash(str(e), "danger")
            return redirect(url_for("my_leaves"))
        except (ValidationError, InvalidStateError) as e:
            flash(str(e), "warning")
            return redirect(url_for("leave_detail", leave_id=leave_id))
        except StoreError:
            logger.exception("Loading leave %s for printing failed", leave_id)
            flash("Leave application could not be loaded", "warning")
            return redirect(url_for("my_leaves"))
        return render_template("leaves/print.html", slip=slip, leave=slip.leave)
