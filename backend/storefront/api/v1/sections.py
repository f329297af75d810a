from flask import jsonify

from storefront.domain.registry import catalog, create_default_section
from storefront.normalizers.section import normalize_section
from . import v1_bp


@v1_bp.route("/sections/kinds", methods=["GET"])
def list_section_kinds():
    return jsonify({"data": catalog()})


@v1_bp.route("/sections/kinds/<kind>/defaults", methods=["GET"])
def section_defaults(kind):
    # UnknownSectionKind is turned into a 400 by the app error handlers
    return jsonify(normalize_section(create_default_section(kind)))
