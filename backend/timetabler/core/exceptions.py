class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class SchedulerError(AppError):
    """Raised when the scheduler encounters a logical error or invalid state."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=400, details=details)

class ScopeResolutionError(SchedulerError):
    """Raised when the requested scope lacks sections, subjects, staff or rooms."""
    def __init__(self, category: str, message: str):
        super().__init__(message, details={"missing": category})
        self.status_code = 422
        self.category = category

class ExtractionError(AppError):
    """Raised when oracle text holds no parseable structured data."""
    def __init__(self, message: str, snippet: str = ""):
        super().__init__(message, status_code=502, details={"snippet": snippet} if snippet else None)

class OracleError(AppError):
    """Raised when the generative oracle cannot be reached or returns nothing."""
    def __init__(self, message: str):
        super().__init__(message, status_code=502)

class PersistenceError(AppError):
    """Raised when no timetable entry could be written, even one by one."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=500, details=details)

class InternalInvariantError(AppError):
    """Raised when an accepted assignment set still holds a duplicate key."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=500, details=details)

class GenerationCancelledError(AppError):
    """Raised when a caller cancels a generation run before it is written."""
    def __init__(self, message: str = "Timetable generation was cancelled"):
        super().__init__(message, status_code=409)

class ResourceNotFoundError(AppError):
    """Raised when a requested resource is not found."""
    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(f"{resource_type} with id {resource_id} not found", status_code=404)
