from .section import normalize_section


def normalize_layout(layout):
    """Wire/storage form of a layout document (whole-document, order preserved)."""
    return {
        "scopeId": layout.scope_id,
        "sections": [normalize_section(s) for s in layout.sections],
    }
