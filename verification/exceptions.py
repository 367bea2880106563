"""Guest verification exceptions."""


class VerificationException(Exception):
    """Base verification exception with HTTP status and a machine-readable reason."""

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        reason: str = "invalid_input",
        data: dict | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.reason = reason
        self.data = data or {}


class InvalidEmailException(VerificationException):
    def __init__(self, message: str = "Enter a valid email address."):
        super().__init__(message, status_code=400, reason="invalid_email")


class DomainBlockedException(VerificationException):
    def __init__(self, message: str, domain: str):
        super().__init__(
            message,
            status_code=409,
            reason="domain_blocked",
            data={"blockedDomain": domain},
        )
        self.domain = domain


class RateLimitedException(VerificationException):
    def __init__(self, retry_after: int):
        super().__init__(
            f"Too many requests. Try again in ~{retry_after}s.",
            status_code=429,
            reason="rate_limited",
            data={"retryAfter": retry_after},
        )
        self.retry_after = retry_after
