"""Errors raised while generating a schedule.

Each error carries the HTTP status the API answers with. Windows that cannot
be staffed are not errors: the selector returns None for them.
"""


class ScheduleGenerationError(Exception):
    """Base class for generation failures reported to the caller."""
    status_code = 500

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict:
        return {'error': self.message}


class InvalidRequestError(ScheduleGenerationError, ValueError):
    """The request body is malformed or violates a field constraint."""
    status_code = 400


class SiteNotFoundError(ScheduleGenerationError):
    """The site does not exist or does not belong to the caller."""
    status_code = 404


class DataLoadError(ScheduleGenerationError):
    """One of the bulk reads (employees, hours, preferences, relationships) failed."""
    status_code = 500


class PersistenceError(ScheduleGenerationError):
    """Writing the generated shifts or assignments failed."""
    status_code = 500
