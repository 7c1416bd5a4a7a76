"""
Exception classes for Chef API Python SDK
"""

from typing import Optional, Dict, Any


class ChefSDKError(Exception):
    """Base exception for all Chef API SDK errors"""

    def __init__(self, message: str, error_code: str = "UNKNOWN_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class ValidationError(ChefSDKError):
    """Exception raised for validation failures"""
    pass


class ConfigNotFoundError(ChefSDKError):
    """Exception raised when a knife/client configuration file does not exist"""

    def __init__(self, message: str, error_code: str = "CONFIG_NOT_FOUND", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)


class KeyParseError(ChefSDKError):
    """Exception raised when RSA private key material cannot be loaded"""

    def __init__(self, message: str, error_code: str = "INVALID_PRIVATE_KEY", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)


class InvalidUrlError(ChefSDKError):
    """Exception raised for an unparseable server URL or unsupported scheme"""

    def __init__(self, message: str, error_code: str = "INVALID_URL", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)


class InvalidHostFormatError(InvalidUrlError):
    """Exception raised when the host part of a server URL is malformed"""

    def __init__(self, message: str, error_code: str = "INVALID_HOST_FORMAT", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)


class SigningError(ChefSDKError):
    """Exception raised when request authorization cannot be produced"""

    def __init__(self, message: str, error_code: str = "SIGNING_FAILED", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (code: {self.error_code}, details: {self.details})"
        return f"{self.message} (code: {self.error_code})"


class ContentTooLongError(SigningError):
    """Exception raised when content does not fit in the RSA modulus"""

    def __init__(self, message: str, error_code: str = "CONTENT_TOO_LONG", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)


class TransportError(ChefSDKError):
    """Exception raised for network errors surfaced by the HTTP layer"""

    def __init__(self, message: str, error_code: str = "TRANSPORT_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)


class HttpStatusError(ChefSDKError):
    """Exception raised for non-2xx responses from the Chef server"""

    def __init__(self, message: str, error_code: str = "HTTP_ERROR",
                 http_status: int = 0, status_text: str = "",
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)
        self.http_status = http_status
        self.status_text = status_text
