from datetime import datetime

from flask import Response, current_app, jsonify, request
from flask_jwt_extended import get_jwt_identity, jwt_required
from sqlalchemy import and_, or_

from storefront.application.layout.controller import LayoutAuthoringController
from storefront.application.layout.render import build_render_plan, render_css
from storefront.application.layout.sql_document_store import SqlDocumentStore
from storefront.application.layout.store import LayoutStore
from storefront.domain.invariants.exceptions import InvariantViolation
from storefront.domain.registry import decode_layout
from storefront.domain.style import format_css
from storefront.models.audit_log import AuditLog
from storefront.normalizers.audit import normalize_audit_log
from storefront.normalizers.layout import normalize_layout
from storefront.normalizers.section import normalize_section
from storefront.utils.decorators import roles_required
from . import v1_bp

TRUE_VALUES = {"1", "true", "yes"}


def _store(actor_id=None):
    return LayoutStore(SqlDocumentStore(actor_id=actor_id))


def _inherit_from():
    if request.args.get("inherit", "").lower() not in TRUE_VALUES:
        return None
    return current_app.config["LAYOUT_TEMPLATE_SCOPE"]


# ------------------------
# Layout documents
# ------------------------

@v1_bp.route("/layouts/<scope_id>", methods=["GET"])
def get_layout(scope_id):
    layout = _store().load(scope_id, inherit_from=_inherit_from())
    return jsonify(normalize_layout(layout))


@v1_bp.route("/layouts/<scope_id>", methods=["PUT"])
@jwt_required()
@roles_required("admin")
def replace_layout(scope_id):
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvariantViolation("Request body must be a JSON object")

    layout = decode_layout(data, scope_id)

    store = _store(actor_id=get_jwt_identity())
    store.save(layout)

    return jsonify(normalize_layout(layout)), 200


@v1_bp.route("/layouts/<scope_id>/operations", methods=["POST"])
@jwt_required()
@roles_required("admin")
def apply_layout_operations(scope_id):
    data = request.get_json(silent=True) or {}
    operations = data.get("operations") if isinstance(data, dict) else data

    if not isinstance(operations, list):
        raise InvariantViolation("'operations' must be a list")

    store = _store(actor_id=get_jwt_identity())
    controller = LayoutAuthoringController(
        store.load(scope_id, inherit_from=_inherit_from())
    )
    controller.apply(operations)

    layout = controller.publish(store)

    return jsonify(normalize_layout(layout)), 200


# ------------------------
# Rendering
# ------------------------

@v1_bp.route("/layouts/<scope_id>/render", methods=["GET"])
def render_layout(scope_id):
    layout = _store().load(scope_id, inherit_from=_inherit_from())
    items = build_render_plan(layout, current_app.config["CUSTOM_CODE_POLICY"])

    return jsonify({
        "scopeId": layout.scope_id,
        "sections": [
            {
                **normalize_section(item.section, resolved=True),
                "markup": item.markup,
                "css": format_css(item.rules),
            }
            for item in items
        ],
        "css": render_css(layout),
    })


@v1_bp.route("/layouts/<scope_id>/styles.css", methods=["GET"])
def layout_styles(scope_id):
    layout = _store().load(scope_id, inherit_from=_inherit_from())
    return Response(render_css(layout), mimetype="text/css")


# ------------------------
# Audit trail
# ------------------------

@v1_bp.route("/layouts/<scope_id>/audit", methods=["GET"])
@jwt_required()
@roles_required("admin")
def list_layout_audit(scope_id):
    max_limit = current_app.config["AUDIT_PAGE_LIMIT"]
    try:
        limit = max(1, min(int(request.args.get("limit", 20)), max_limit))
    except ValueError:
        return jsonify({"error": "Invalid limit"}), 400

    cursor = request.args.get("cursor")

    query = AuditLog.query.filter(
        AuditLog.entity_type == "layout",
        AuditLog.entity_id == scope_id,
    )

    if cursor:
        try:
            ts_str, last_id = cursor.split("|")
            cursor_ts = datetime.fromisoformat(ts_str)
        except ValueError:
            return jsonify({"error": "Invalid cursor format"}), 400

        query = query.filter(
            or_(
                AuditLog.created_at < cursor_ts,
                and_(
                    AuditLog.created_at == cursor_ts,
                    AuditLog.id < last_id
                )
            )
        )

    logs = (
        query.order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
        .limit(limit + 1)   # one extra row tells us there is a next page
        .all()
    )

    has_more = len(logs) > limit
    logs = logs[:limit]

    next_cursor = None
    if has_more:
        last = logs[-1]
        next_cursor = f"{last.created_at.isoformat()}|{last.id}"

    return jsonify({
        "data": [normalize_audit_log(log) for log in logs],
        "meta": {
            "nextCursor": next_cursor,
            "hasMore": has_more,
        }
    }), 200
