"""Custom exceptions for the Comandas application."""

class AppError(Exception):
    """Base exception for all application errors."""
    def __init__(self, message="An internal error occurred", status_code=500, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def to_dict(self):
        rv = dict(self.payload or ())
        rv['message'] = self.message
        rv['status'] = 'error'
        return rv

class ValidationError(AppError):
    """Raised for malformed or missing input."""
    def __init__(self, message, payload=None):
        super().__init__(message, 400, payload)

class AuthenticationError(AppError):
    """Missing credential (401) or invalid credential (403)."""
    def __init__(self, message="No autorizado", status_code=401):
        super().__init__(message, status_code)

class AuthorizationError(AppError):
    """Raised when the caller's role is not allowed to perform an action."""
    def __init__(self, message="Acceso denegado. No tienes los permisos necesarios."):
        super().__init__(message, 403)

class NotFoundError(AppError):
    """Exception raised when a resource is not found."""
    def __init__(self, message="Resource not found", payload=None):
        super().__init__(message, 404, payload)

class ConflictError(AppError):
    """Raised on uniqueness violations."""
    def __init__(self, message, payload=None):
        super().__init__(message, 409, payload)

class UpstreamError(AppError):
    """Persistence or transport failure; carries the upstream message."""
    def __init__(self, message, payload=None):
        super().__init__(message, 500, payload)

class PushDeliveryError(UpstreamError):
    """A push message could not be delivered to one endpoint."""
    def __init__(self, message, endpoint=None, upstream_status=None):
        super().__init__(message)
        self.endpoint = endpoint
        self.upstream_status = upstream_status

class PushSubscriptionGoneError(PushDeliveryError):
    """The push service reports the subscription as permanently gone (HTTP 410)."""
    def __init__(self, endpoint, upstream_status=410):
        super().__init__(
            f"La suscripción {endpoint} ya no es válida",
            endpoint=endpoint,
            upstream_status=upstream_status
        )
