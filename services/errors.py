"""Domain exceptions raised by the service layer and mapped to HTTP responses in app.py."""


class QuizAppError(Exception):
    status_code = 500

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message or self.__class__.__name__


class ValidationError(QuizAppError):
    status_code = 400


class AuthenticationError(QuizAppError):
    status_code = 401


class PermissionDenied(QuizAppError):
    status_code = 403


class EntityNotFound(QuizAppError):
    status_code = 404

    def __init__(self, entity: str, entity_id: str = ""):
        message = f"{entity.capitalize()} not found"
        if entity_id:
            message = f"{message}: {entity_id}"
        super().__init__(message)
        self.entity = entity
        self.entity_id = entity_id


class ConflictError(QuizAppError):
    status_code = 409
