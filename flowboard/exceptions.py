class AppError(Exception):
    def __init__(self, message: str, code: str = "INTERNAL_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class NotFoundError(AppError):
    def __init__(self, resource: str, resource_id: str):
        super().__init__(f"{resource} '{resource_id}' not found", code="NOT_FOUND")


class ValidationError(AppError):
    def __init__(self, message: str, code: str = "VALIDATION_ERROR"):
        super().__init__(message, code=code)


class ConflictError(AppError):
    def __init__(self, message: str):
        super().__init__(message, code="CONFLICT")


class UnauthorizedError(AppError):
    def __init__(self, message: str):
        super().__init__(message, code="UNAUTHORIZED")


class ForbiddenError(AppError):
    def __init__(self, message: str):
        super().__init__(message, code="FORBIDDEN")


class InvalidTransitionError(ValidationError):
    def __init__(self, message: str):
        super().__init__(message, code="INVALID_TRANSITION")


class InvalidAmountError(ValidationError):
    def __init__(self, message: str):
        super().__init__(message, code="INVALID_AMOUNT")


class MissingNodeError(ValidationError):
    def __init__(self, message: str):
        super().__init__(message, code="MISSING_NODE")
