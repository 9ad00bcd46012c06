"""
Request gates, expressed as FastAPI dependencies.

``get_current_principal`` is the authenticated gate: it reads the
``Authorization: Bearer <token>`` header, verifies the token and attaches
the resulting ``Principal`` to ``request.state``.  ``require_role`` builds
a role gate on top of it.  Both raise before the handler runs, and
neither touches the database.

Usage in a router::

    @router.post("")
    async def create_article(
        principal: Principal = Depends(require_role(Role.PUBLISHER)),
        db: AsyncSession = Depends(get_db),
    ):
        ...
"""
import hashlib
import logging

from fastapi import Depends, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from newsroom.auth.tokens import Principal, Role, TokenCodec, get_token_codec
from newsroom.exceptions import InsufficientRoleError, MissingTokenError, NewsroomError

logger = logging.getLogger(__name__)

# auto_error=False so a missing header reaches our own MissingToken handling
# instead of FastAPI's generic 403.
bearer_scheme = HTTPBearer(auto_error=False, scheme_name="bearerAuth")


def safe_log_identifier(value, prefix: str) -> str:
    """Return a short non-reversible token for log correlation fields."""
    text = str(value or "").strip()
    if not text:
        return f"{prefix}-missing"
    return f"{prefix}-{hashlib.sha256(text.encode('utf-8')).hexdigest()[:12]}"


async def get_current_principal(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Security(bearer_scheme),
    codec: TokenCodec = Depends(get_token_codec),
) -> Principal:
    """Resolve the bearer token to a Principal or reject the request."""
    if credentials is None or not credentials.credentials:
        logger.warning(
            "auth.rejected method=%s path=%s reason=MissingToken",
            request.method,
            request.url.path,
        )
        raise MissingTokenError()

    try:
        principal = codec.verify(credentials.credentials)
    except NewsroomError as exc:
        logger.warning(
            "auth.rejected method=%s path=%s reason=%s",
            request.method,
            request.url.path,
            exc.kind,
        )
        raise

    logger.debug(
        "auth.accepted method=%s path=%s principal=%s role=%s",
        request.method,
        request.url.path,
        safe_log_identifier(principal.id, prefix="pid"),
        principal.role.value,
    )
    request.state.principal = principal
    return principal


def require_role(*roles: Role):
    """
    Build a dependency that admits only principals whose role is in *roles*.

    Runs after ``get_current_principal`` (FastAPI caches that dependency
    per request, so the token is verified once even when both are used).
    """
    allowed = frozenset(roles)

    async def role_gate(
        request: Request,
        principal: Principal = Depends(get_current_principal),
    ) -> Principal:
        if principal.role not in allowed:
            logger.warning(
                "auth.rejected method=%s path=%s principal=%s reason=InsufficientRole",
                request.method,
                request.url.path,
                safe_log_identifier(principal.id, prefix="pid"),
            )
            raise InsufficientRoleError()
        return principal

    return role_gate
