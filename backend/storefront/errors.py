from flask import current_app, jsonify

from storefront.domain.exceptions import PersistenceFailure, UnknownSectionKind
from storefront.domain.invariants.exceptions import InvariantViolation


def register_error_handlers(app):
    @app.errorhandler(InvariantViolation)
    def handle_invariant_violation(error):
        response = jsonify({
            "error": "InvariantViolation",
            "message": str(error)
        })
        response.status_code = 400
        return response

    @app.errorhandler(UnknownSectionKind)
    def handle_unknown_section_kind(error):
        response = jsonify({
            "error": "UnknownSectionKind",
            "message": str(error),
            "kind": error.kind if isinstance(error.kind, str) else None,
        })
        response.status_code = 400
        return response

    @app.errorhandler(PersistenceFailure)
    def handle_persistence_failure(error):
        current_app.logger.error("Persistence failure: %s", error)
        response = jsonify({
            "error": "PersistenceFailure",
            "message": str(error),
            "operation": error.operation,
            "scopeId": error.scope_id,
        })
        response.status_code = 503
        return response
