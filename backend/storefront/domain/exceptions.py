class UnknownSectionKind(ValueError):
    """Requested section kind is not part of the registry."""

    def __init__(self, kind):
        self.kind = kind
        super().__init__(f"Unknown section kind: {kind!r}")


class PersistenceFailure(Exception):
    """
    The persistence collaborator failed to load or save a layout document.

    Carries enough context for the caller to retry; the in-memory
    document is never touched when this is raised.
    """

    def __init__(self, operation: str, scope_id: str, reason: str | None = None):
        self.operation = operation
        self.scope_id = scope_id
        self.reason = reason
        message = f"Failed to {operation} layout '{scope_id}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
