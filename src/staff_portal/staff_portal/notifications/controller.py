from __future__ import annotations

import logging

from flask import Flask, jsonify, redirect, render_template, request, session, url_for

from ..common.datetime_utils import format_short
from ..common.web import login_required, session_actor
from ..container import Container
from ..core.exceptions import StoreError
from .model import Notification, NotificationSnapshot, payload_to_dict

logger = logging.getLogger(__name__)

NOTIFICATION_ICONS = {
    "leave_application": "📋",
    "leave_recommendation": "👍",
    "leave_approval": "✅",
    "leave_rejection": "❌",
}


def notification_json(n: Notification) -> dict:
    return {
        "id": n.notification_id,
        "type": n.type.value,
        "icon": NOTIFICATION_ICONS.get(n.type.value, "📢"),
        "title": n.title,
        "message": n.message,
        "data": payload_to_dict(n.payload),
        "read": n.read,
        "created_at": n.created_at.isoformat() if n.created_at else None,
        "created_label": format_short(n.created_at),
    }


def snapshot_json(snapshot: NotificationSnapshot) -> dict:
    return {
        "unread_count": snapshot.unread_count,
        "badge": snapshot.badge,
        "items": [notification_json(n) for n in snapshot.items],
    }


def register(app: Flask, container: Container) -> None:
    store = container.notification_store

    @app.context_processor
    def inject_unread_count():
        if "user_id" not in session:
            return {}
        return {"unread_notifications": store.unread_count(int(session["user_id"]))}

    @app.route("/notifications", methods=["GET"], endpoint="notifications")
    @login_required
    def notifications():
        items = store.list_for_user(session_actor().user_id)
        return render_template(
            "notifications/index.html",
            notifications=items,
            icons=NOTIFICATION_ICONS,
            active_page="notifications",
        )

    @app.route("/notifications/feed", methods=["GET"], endpoint="notifications_feed")
    @login_required
    def notifications_feed():
        actor = session_actor()
        try:
            snapshot = store.snapshot(actor.user_id)
        except StoreError:
            logger.warning("Notification feed unavailable for user %s", actor.user_id, exc_info=True)
            return jsonify({"error": "Notifications are temporarily unavailable"}), 503
        return jsonify(snapshot_json(snapshot))

    @app.route("/notifications/<int:notification_id>/read", methods=["POST"], endpoint="mark_notification_read")
    @login_required
    def mark_notification_read(notification_id: int):
        actor = session_actor()
        try:
            owner = store.owner_of(notification_id)
        except StoreError:
            logger.warning("Could not load notification %s", notification_id, exc_info=True)
            owner = None
        if owner == actor.user_id:
            store.mark_read(notification_id)
        elif owner is not None:
            return jsonify({"error": "Not your notification"}), 403

        if request.accept_mimetypes.best == "application/json":
            return jsonify({"ok": True})
        return redirect(request.referrer or url_for("notifications"))

    @app.route("/notifications/read-all", methods=["POST"], endpoint="mark_all_notifications_read")
    @login_required
    def mark_all_notifications_read():
        store.mark_all_read_for_user(session_actor().user_id)
        if request.accept_mimetypes.best == "application/json":
            return jsonify({"ok": True})
        return redirect(request.referrer or url_for("notifications"))
