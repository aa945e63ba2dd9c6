"""
SyncMe - Auth Service
=====================

What:  Signup, login, and resolution of the X-User-Email session identifier.
How:   Works against the UserRepository interface.
Who:   Called by the auth routes and by the notes routes' owner dependency.

Behavior:
    - signup: existence check on email, then the user is stored verbatim
    - login:  exact match on email AND password; the email is returned as the
              session identifier (there is no token and no session store)
    - failures never reveal whether the email or the password was wrong

Credentials are kept in plain text and compared by equality. Hardening them
is outside this service's scope.
"""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from syncme.exceptions import ConflictError, DatabaseError, UnauthorizedError
from syncme.models.user import User
from syncme.repositories.base import UserRepository

logger = logging.getLogger(__name__)


class AuthService:

    async def signup(self, repo: UserRepository, email: str, password: str) -> User:
        """
        Register a user.

        Raises:
            ConflictError: A user with this email already exists (→ 400)
        """
        try:
            existing = await repo.get_by_email(email)
            if existing is not None:
                logger.info("Signup rejected: email already registered")
                raise ConflictError(context={"email": email})

            user = await repo.insert(User(email=email, password=password))
        except SQLAlchemyError as e:
            logger.error("Database error during signup: %s", str(e), exc_info=True)
            raise DatabaseError(context={"error_type": type(e).__name__})

        logger.info("User %s registered", user.id)
        return user

    async def login(self, repo: UserRepository, email: str, password: str) -> str:
        """
        Check credentials and return the session identifier (the email).

        Raises:
            UnauthorizedError: No stored user matches both fields (→ 401)
        """
        try:
            user = await repo.find_by_credentials(email, password)
        except SQLAlchemyError as e:
            logger.error("Database error during login: %s", str(e), exc_info=True)
            raise DatabaseError(context={"error_type": type(e).__name__})

        if user is None:
            logger.info("Login failed")
            raise UnauthorizedError()
        logger.info("User %s logged in", user.id)
        return user.email

    async def resolve_session(
        self,
        repo: UserRepository,
        session_email: Optional[str],
    ) -> Optional[User]:
        """
        Map an X-User-Email value to its user.

        Returns None when no identifier was sent (unscoped request).

        Raises:
            UnauthorizedError: An identifier was sent but names no user (→ 401)
        """
        if session_email is None:
            return None
        try:
            user = await repo.get_by_email(session_email)
        except SQLAlchemyError as e:
            logger.error("Database error resolving session: %s", str(e), exc_info=True)
            raise DatabaseError(context={"error_type": type(e).__name__})
        if user is None:
            raise UnauthorizedError(message="Unknown session user.")
        return user


auth_service = AuthService()
