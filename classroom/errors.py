class ClassroomError(Exception):
    """Base for failures surfaced to the user at the initiating action."""

    default_message = "Something went wrong. Please try again."

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class AuthenticationError(ClassroomError):
    default_message = "Incorrect email or password"


class ValidationError(ClassroomError):
    default_message = "Invalid input"


class NotFoundError(ClassroomError):
    default_message = "Record does not exist"


class ConflictError(ClassroomError):
    default_message = "Record already exists"


class OperationError(ClassroomError):
    default_message = "Operation failed. Please try again."
