"""
SyncMe - User SQLAlchemy Model
==============================

What:  ORM model representing the `users` table.
Who:   Used by SqlUserRepository for signup, login and owner lookups.

Notes:
    - email is indexed but NOT unique at the database level; uniqueness is
      the AuthService's existence check at signup.
    - password is stored exactly as submitted and compared by string equality.
      Credential hardening is out of scope for this service.
"""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from syncme.database import Base


class User(Base):
    """A registered user. Created on signup, never updated or removed."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
    )

    password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"
