"""Shared API dependencies for authentication and service wiring."""

from collections.abc import Callable
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session
from starlette.requests import HTTPConnection

from fiction_chat.core.errors import AuthError
from fiction_chat.core.security import verify_token
from fiction_chat.db.session import SessionLocal, get_db
from fiction_chat.services.delivery import DeliveryDispatcher
from fiction_chat.services.message_store import MessageStore
from fiction_chat.services.session_registry import SessionRegistry

# HTTP Bearer scheme; a missing or non-bearer header yields None so the
# failure surfaces as AuthError with the service's error shape.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]

# Type alias for optional bearer credentials
CredentialsDep = Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)]


def authenticate(credentials: HTTPAuthorizationCredentials | None) -> str:
    """Return the caller's user id from bearer credentials.

    Raises:
        AuthError: If no bearer token was sent or the token fails verification.
    """
    if credentials is None:
        raise AuthError("No auth token provided")
    return verify_token(credentials.credentials)


def get_current_user_id(credentials: CredentialsDep) -> str:
    """Get the authenticated caller's user id from the bearer token."""
    return authenticate(credentials)

# Type alias for current user dependency
CurrentUserIdDep = Annotated[str, Depends(get_current_user_id)]


def get_message_store(db: SessionDep) -> MessageStore:
    """Return a message store bound to the request's session."""
    return MessageStore(db)


def get_session_registry(connection: HTTPConnection) -> SessionRegistry:
    """Return the process-wide session registry installed on the application."""
    return connection.app.state.session_registry


def get_dispatcher(
    registry: Annotated[SessionRegistry, Depends(get_session_registry)],
) -> DeliveryDispatcher:
    """Return a delivery dispatcher over the application's registry."""
    return DeliveryDispatcher(registry)


def get_session_factory() -> Callable[[], Session]:
    """Return the session factory used by long-lived socket connections."""
    return SessionLocal


MessageStoreDep = Annotated[MessageStore, Depends(get_message_store)]
RegistryDep = Annotated[SessionRegistry, Depends(get_session_registry)]
DispatcherDep = Annotated[DeliveryDispatcher, Depends(get_dispatcher)]
SessionFactoryDep = Annotated[Callable[[], Session], Depends(get_session_factory)]
