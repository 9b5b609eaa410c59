class CarbonlyException(Exception):
    """Base exception for Carbonly"""

    pass


class UnauthorizedException(CarbonlyException):
    """Raised when credentials are missing, invalid or expired"""

    pass


class NotFoundException(CarbonlyException):
    """Raised when resource not found"""

    pass


class ForbiddenException(CarbonlyException):
    """Raised when the permission evaluator denies an action"""

    pass


class ValidationException(CarbonlyException):
    """Raised for business logic validation errors"""

    pass
