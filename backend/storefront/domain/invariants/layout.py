from .exceptions import InvariantViolation


def assert_scope_id(scope_id):
    if not isinstance(scope_id, str) or not scope_id.strip():
        raise InvariantViolation("Layout scope id must be a non-empty string.")


def assert_layout(layout):
    assert_scope_id(layout.scope_id)

    seen = set()
    for section in layout.sections:
        if not section.id:
            raise InvariantViolation("Every section must have an id.")
        if section.id in seen:
            raise InvariantViolation(
                f"Section ids must be unique within a layout: {section.id!r} repeats"
            )
        seen.add(section.id)
