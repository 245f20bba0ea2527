"""
Domain errors raised by the store and service layers.

Each error carries a stable ``code`` and the HTTP status the API maps it to.
Routes let them propagate; ``main.py`` renders them as
``{"detail": ..., "code": ...}``.
"""


class RecyclingError(Exception):
    status_code = 400
    code = "recycling_error"
    message = "Request could not be processed"

    def __init__(self, message: str = None):
        super().__init__(message or self.message)
        self.detail = message or self.message


class RecyclerNotFound(RecyclingError):
    status_code = 404
    code = "recycler_not_found"
    message = "Recycler not found"


class EventNotFound(RecyclingError):
    status_code = 404
    code = "event_not_found"
    message = "Event not found"


class NotVerified(RecyclingError):
    status_code = 403
    code = "not_verified"
    message = "Account is not verified"


class AlreadyJoined(RecyclingError):
    status_code = 409
    code = "already_joined"
    message = "Recycler already joined this event"


class CapacityExceeded(RecyclingError):
    status_code = 409
    code = "capacity_exceeded"
    message = "Event weight capacity exceeded"


class InvalidWeight(RecyclingError):
    status_code = 422
    code = "invalid_weight"
    message = "Weight must be greater than zero"


class EventNotAttended(RecyclingError):
    status_code = 409
    code = "event_not_attended"
    message = "Recycler has not joined or attended this event"


class InvalidRange(RecyclingError):
    status_code = 422
    code = "invalid_range"
    message = "'from' date must not be after 'to' date"


class InvalidTransition(RecyclingError):
    status_code = 409
    code = "invalid_transition"
    message = "Participation transition not allowed"


class StoreUnavailable(RecyclingError):
    status_code = 503
    code = "store_unavailable"
    message = "Storage is temporarily unavailable"
