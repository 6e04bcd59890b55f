"""Service-level errors carrying a user-facing message."""

class ServiceError(Exception):
    """Error whose message may be shown to the caller as is."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
