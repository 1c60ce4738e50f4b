from typing import Any

class GatewayError(Exception):
    """
    Base for every classifiable lookup failure.
    Each subclass carries the HTTP status and the client-facing error line.
    """
    status_code: int = 500
    error: str = "Internal server error"
    outcome: str = "unknown_error"

    def payload(self) -> dict[str, Any]:
        return {"error": self.error}

class ValidationError(GatewayError):
    status_code = 400
    error = "Invalid request parameters"
    outcome = "invalid"

    def __init__(self, errors: list[dict[str, Any]]):
        super().__init__(f"{len(errors)} invalid field(s)")
        self.errors = errors

    def payload(self) -> dict[str, Any]:
        return {"error": self.error, "details": self.errors}

class RateLimitExceeded(GatewayError):
    status_code = 429
    error = "Rate limit exceeded. Please try again later."
    outcome = "rate_limited"

class UpstreamTimeout(GatewayError):
    status_code = 408
    error = "Request timeout - PropertyData API is slow"
    outcome = "upstream_timeout"

class UpstreamError(GatewayError):
    error = "Failed to fetch property data"
    outcome = "upstream_error"

    def __init__(self, status: int | None, body: str):
        super().__init__(f"PropertyData API error: {status} - {body}")
        self.status = status
        self.body = body

    def payload(self) -> dict[str, Any]:
        return {"error": self.error, "message": str(self)}

class ConfigurationError(GatewayError):
    error = "Failed to fetch property data"
    outcome = "configuration_error"

    def payload(self) -> dict[str, Any]:
        # Operator detail stays in the logs.
        return {"error": self.error, "message": "Property data service is not configured"}

class UnknownError(GatewayError):
    outcome = "unknown_error"
