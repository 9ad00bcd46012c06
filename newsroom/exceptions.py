"""
Error taxonomy for the access-control core.

Every rejection a gate, policy or service can produce is one of the
``NewsroomError`` subclasses below.  Each carries a machine-readable
``kind`` (returned to the client as ``{"error": kind}``) and the HTTP
status it maps to; the handlers registered in ``newsroom.main`` do the
rendering, so services never build responses themselves.

    NewsroomError
    ├── MissingTokenError       401  no usable ``Authorization: Bearer``
    ├── InvalidSignatureError   401  altered, foreign-key or malformed token
    ├── ExpiredTokenError       401  correctly signed, past ``exp``
    ├── InsufficientRoleError   403  role not in the route's allow-set
    ├── ForbiddenError          403  resource exists but is not the caller's
    ├── NotFoundError           404  resource absent
    └── ConflictError           409  unique field already taken

Malformed request bodies and parameters are rendered in the same shape
with kind ``ValidationError`` and status 422.

``ToggleConflictError`` is deliberately outside the hierarchy: it is an
internal fault (a bookmark insert collided twice) and is rendered as a
generic 500.
"""


class NewsroomError(Exception):
    """Base class for client-visible rejections."""

    kind = "Error"
    status_code = 400
    default_message = "Request rejected"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class MissingTokenError(NewsroomError):
    kind = "MissingToken"
    status_code = 401
    default_message = "Missing or malformed bearer token"


class InvalidSignatureError(NewsroomError):
    kind = "InvalidSignature"
    status_code = 401
    default_message = "Bearer token signature is invalid"


class ExpiredTokenError(NewsroomError):
    kind = "Expired"
    status_code = 401
    default_message = "Bearer token has expired"


class InsufficientRoleError(NewsroomError):
    kind = "InsufficientRole"
    status_code = 403
    default_message = "Your role does not allow this action"


class ForbiddenError(NewsroomError):
    kind = "Forbidden"
    status_code = 403
    default_message = "Not authorized to modify this resource"


class NotFoundError(NewsroomError):
    kind = "NotFound"
    status_code = 404

    def __init__(self, resource: str = "resource", resource_id=None):
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource.capitalize()} not found")


class ConflictError(NewsroomError):
    kind = "Conflict"
    status_code = 409
    default_message = "Resource already exists"


class ToggleConflictError(Exception):
    """A bookmark insert hit the uniqueness constraint and the re-read found no row."""

    def __init__(self, user_id: int, article_id: int):
        self.user_id = user_id
        self.article_id = article_id
        super().__init__(
            f"Bookmark toggle for article {article_id} collided and could not be resolved"
        )
