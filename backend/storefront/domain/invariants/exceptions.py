class InvariantViolation(Exception):
    """Raised when a layout document or an authoring request breaks a domain rule."""
