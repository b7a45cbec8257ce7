"""Typed request errors.

Every error a handler can answer with is one of these classes. The HTTP
status travels with the type, so handlers never inspect messages.
"""


class ItemError(Exception):
    status_code = 500
    code = "InternalError"
    default_message = "Internal Server Error: An unexpected error occurred."

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self):
        return {"error": self.message, "code": self.code}


class MissingField(ItemError):
    status_code = 400
    code = "MissingField"
    default_message = "Bad Request: Missing required fields."


class MalformedBody(ItemError):
    status_code = 400
    code = "MalformedBody"
    default_message = "Bad Request: Request body is not valid JSON."


class Unauthenticated(ItemError):
    status_code = 401
    code = "Unauthenticated"
    default_message = "Unauthorized: Missing user authentication data."


class MalformedIdentity(Unauthenticated):
    code = "MalformedIdentity"
    default_message = "Unauthorized: Error parsing authentication data."


class Forbidden(ItemError):
    status_code = 403
    code = "Forbidden"
    default_message = "Forbidden: You do not have access to this document."


class NotFound(ItemError):
    status_code = 404
    code = "NotFound"
    default_message = "Item not found"


class UpstreamFailure(ItemError):
    status_code = 500
    code = "UpstreamFailure"
