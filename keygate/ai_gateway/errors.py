class ConsentError(Exception):
    """A consent outcome that is reported to the caller as `{"error": message}`."""

    status_code: int = 500
    message: str = "Internal error"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class FeatureDisabled(ConsentError):
    status_code = 403
    message = "Feature not enabled"


class NotAuthenticated(ConsentError):
    status_code = 401
    message = "Not authenticated"


class NoLinkedAccount(ConsentError):
    status_code = 400
    message = "No Vercel account linked"


class MissingIntegrationId(ConsentError):
    status_code = 400
    message = "integrationId query parameter is required"


class IntegrationNotFound(ConsentError):
    status_code = 404
    message = "Integration not found"


class TeamUndetermined(ConsentError):
    status_code = 500
    message = "Could not determine user's team"


class KeyCreationFailed(ConsentError):
    status_code = 500
    message = "Failed to create API key"
