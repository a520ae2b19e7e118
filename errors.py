# errors.py: error types raised by request handlers, rendered as {"error": message}


class ApiError(Exception):
    status_code = 400
    message = "Bad Request"

    def __init__(self, message=None, status_code=None):
        super().__init__(message or self.message)
        if message is not None:
            self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self):
        return {"error": self.message}


class BadRequest(ApiError):
    status_code = 400
    message = "Bad Request"


class AuthenticationRequired(ApiError):
    status_code = 401
    message = "Unauthorized"


class Forbidden(ApiError):
    status_code = 403
    message = "Forbidden"


class NotFound(ApiError):
    status_code = 404
    message = "Not Found"


class Conflict(ApiError):
    status_code = 409
    message = "Conflict"
