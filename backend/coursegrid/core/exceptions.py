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

class InputUnavailableError(AppError):
    """Raised when courses, faculty or rooms cannot be loaded for a generation run."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=503, details=details)

class PersistenceFailureError(AppError):
    """Raised when writing or committing a generated timetable fails. Nothing is kept."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=500, details=details)

class TermLockedError(AppError):
    """Raised when another generation run already holds the term."""
    def __init__(self, semester: str, year: int):
        super().__init__(
            f"A timetable generation for {semester} {year} is already running",
            status_code=409,
            details={"semester": semester, "year": year},
        )

class ResourceNotFoundError(AppError):
    """Raised when a requested resource is not found."""
    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(f"{resource_type} with id {resource_id} not found", status_code=404)

class ConfigurationError(AppError):
    """Raised when system configuration is invalid."""
    def __init__(self, message: str):
        super().__init__(message, status_code=500)
