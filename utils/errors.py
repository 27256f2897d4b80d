"""
Custom exception classes and error handling utilities.
Provides standardized error responses for the application.
"""
from typing import Optional, Dict, Any
from flask import jsonify, render_template, request


class AppError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, code: str = "APP_ERROR", details: Optional[Dict] = None, status_code: int = 500):
        self.message = message
        self.code = code
        self.details = details or {}
        self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON responses."""
        return {
            "success": False,
            "error": {
                "message": self.message,
                "code": self.code,
                "details": self.details
            }
        }

    def to_response(self):
        """Convert exception to Flask JSON response."""
        return jsonify(self.to_dict()), self.status_code


class ValidationError(AppError):
    """Input validation error."""

    def __init__(self, message: str, field: Optional[str] = None, details: Optional[Dict] = None):
        error_details = details or {}
        if field:
            error_details['field'] = field
        super().__init__(message, "VALIDATION_ERROR", error_details, 400)


class ConfigurationError(AppError):
    """Configuration error."""

    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message, "CONFIGURATION_ERROR", details, 500)


class LibraryFetchError(AppError):
    """A storefront library could not be fetched or read."""

    def __init__(self, message: str, platform: Optional[str] = None, details: Optional[Dict] = None,
                 code: str = "LIBRARY_FETCH_ERROR", status_code: int = 502):
        error_details = details or {}
        if platform:
            error_details['platform'] = platform
        super().__init__(message, code, error_details, status_code)


class PrivateProfileError(LibraryFetchError):
    """Steam profile is private or does not exist."""

    def __init__(self, steam_id: str):
        super().__init__(
            "Steam profile is private or does not exist. "
            "Please make your Steam profile public and try again.",
            platform="steam",
            details={'steam_id': steam_id},
            code="PRIVATE_PROFILE",
            status_code=403,
        )


class EmptyLibraryError(LibraryFetchError):
    """No game titles could be read from the user's input."""

    def __init__(self, platform: str):
        super().__init__(
            "No games found in the provided list. Please check the format and try again.",
            platform=platform,
            code="EMPTY_LIBRARY",
            status_code=400,
        )


class CatalogUnavailableError(AppError):
    """The PortMaster catalog could not be fetched from any source."""

    def __init__(self, message: Optional[str] = None, details: Optional[Dict] = None):
        super().__init__(
            message or ("Unable to fetch Portmaster games list. This might be due to GitHub "
                        "being temporarily unavailable. Please try again later."),
            "CATALOG_UNAVAILABLE",
            details,
            503,
        )


class CatalogRateLimitError(CatalogUnavailableError):
    """GitHub refused the catalog request because of rate limiting."""

    def __init__(self, details: Optional[Dict] = None):
        super().__init__(
            "GitHub API rate limit exceeded. Please wait about an hour before trying again, "
            "or try again later when fewer people are using the service.",
            details,
        )
        self.code = "CATALOG_RATE_LIMITED"
        self.status_code = 429


def error_response(message: str, code: str = "ERROR", status_code: int = 500, details: Optional[Dict] = None):
    """
    Create a standardized error response.

    Args:
        message: Error message
        code: Error code (e.g., "CATALOG_UNAVAILABLE")
        status_code: HTTP status code
        details: Additional error details

    Returns:
        Tuple of (jsonify response, status_code)
    """
    return jsonify({
        "success": False,
        "error": {
            "message": message,
            "code": code,
            "details": details or {}
        }
    }), status_code


def success_response(data: Optional[Dict] = None, message: Optional[str] = None, status_code: int = 200):
    """
    Create a standardized success response.

    Args:
        data: Response data
        message: Optional success message
        status_code: HTTP status code

    Returns:
        Tuple of (jsonify response, status_code)
    """
    response = {
        "success": True
    }

    if message:
        response['message'] = message

    if data:
        response.update(data)

    return jsonify(response), status_code


def error_page(message: str, status_code: int = 200):
    """Render the HTML error page with a user-facing message."""
    return render_template('error.html', message=message), status_code


def _wants_json() -> bool:
    return request.path.startswith('/api/')


def register_error_handlers(app):
    """
    Register Flask error handlers for custom exceptions.

    API routes get JSON bodies, page routes get the error template.

    Args:
        app: Flask application instance
    """

    @app.errorhandler(AppError)
    def handle_app_error(error):
        """Handle all custom application errors."""
        if _wants_json():
            return error.to_response()
        return error_page(error.message, error.status_code)

    @app.errorhandler(404)
    def handle_404(error):
        """Handle 404 Not Found errors."""
        if _wants_json():
            return error_response(
                message="The requested resource was not found",
                code="NOT_FOUND",
                status_code=404
            )
        return render_template('errors/404.html'), 404

    @app.errorhandler(500)
    def handle_500(error):
        """Handle 500 Internal Server Error."""
        if _wants_json():
            return error_response(
                message="An internal server error occurred",
                code="INTERNAL_SERVER_ERROR",
                status_code=500
            )
        return render_template('errors/500.html'), 500
