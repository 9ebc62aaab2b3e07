from typing import Optional, Dict, Any


class NewsAPIError(Exception):
    status_code: int = 500

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None,
    ):
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details
        }


class ValidationError(NewsAPIError):
    status_code = 400

    def __init__(self, message: str, errors: Optional[list] = None):
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            details={"errors": errors or []}
        )


class NotFoundError(NewsAPIError):
    status_code = 404

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, error_code="NOT_FOUND", details=details)


class NotConfiguredError(NewsAPIError):
    status_code = 503

    def __init__(self, message: str = "News service is not configured. Please contact administrator."):
        super().__init__(message=message, error_code="NOT_CONFIGURED")


class UpstreamError(NewsAPIError):
    """Failure talking to the news provider. ``kind`` names the failure class."""

    kind: str = "server-error"

    def __init__(self, message: str, status_code: int, kind: Optional[str] = None):
        if kind:
            self.kind = kind
        super().__init__(
            message=message,
            error_code=self.kind.upper().replace("-", "_"),
            details={"kind": self.kind},
            status_code=status_code,
        )


class UpstreamUnavailableError(UpstreamError):
    kind = "unreachable"

    def __init__(self, message: str = "Unable to reach news API. Please try again later."):
        super().__init__(message=message, status_code=503)


class UpstreamRejectedError(UpstreamError):
    pass
