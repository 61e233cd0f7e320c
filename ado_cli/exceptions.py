"""
ado-cli exception hierarchy.

All custom exceptions live here to avoid circular imports.
"""


class CliError(Exception):
    """Exit code 1 — validation, not-found, network, parse errors."""

    exit_code = 1
    tag = "[ERROR]"
    error_type = "error"

    def __init__(self, message):
        super().__init__(message)
        self.message = message
        self.context = []

    def add_context(self, context):
        """Prefix *context* to the message and return the same error."""
        self.context.insert(0, context)
        return self

    def __str__(self):
        return f"{self.tag} " + ": ".join([*self.context, self.message])


class SetupError(CliError):
    """Exit code 2 — missing organization, project, or credential."""

    exit_code = 2
    tag = "[SETUP_NEEDED]"
    error_type = "setup_needed"


class ValidationError(CliError):
    """Required input missing or nothing to send. Raised before any request."""

    error_type = "validation"


class ApiError(CliError):
    """The service answered with HTTP status >= 400."""

    tag = "[API_ERROR]"
    error_type = "api_error"

    def __init__(self, status, body, reason=None):
        super().__init__(f"Azure DevOps API error (HTTP {status}): {body}")
        self.status = status
        self.body = body
        self.reason = reason


class NotFoundError(CliError):
    """A human-supplied name did not match anything in scope."""

    tag = "[NOT_FOUND]"
    error_type = "not_found"

    def __init__(self, kind, name, scope, available=None):
        message = f"{kind} '{name}' not found in project '{scope}'"
        if available:
            message += f". Available: {', '.join(available)}"
        super().__init__(message)
        self.kind = kind
        self.name = name
        self.scope = scope
