"""Shared FastAPI dependencies."""

from fastapi import Depends, Header, status
from sqlalchemy.orm import Session

from buildops.services import get_db
from buildops.services.auth_service import Principal, load_principal
from buildops.services.errors import AuthError


def get_current_principal(
    x_user_id: str | None = Header(None, alias="X-User-Id"),  # noqa: B008
    db: Session = Depends(get_db),  # noqa: B008
) -> Principal:
    """Resolve the acting user from the ``X-User-Id`` header.

    Token verification happens upstream of this service; the header carries
    the already authenticated user id.
    """
    if x_user_id is None or not x_user_id.strip():
        return load_principal(db, None)
    try:
        user_id = int(x_user_id)
    except ValueError as e:
        raise AuthError("Invalid X-User-Id header", status.HTTP_401_UNAUTHORIZED) from e
    return load_principal(db, user_id)
