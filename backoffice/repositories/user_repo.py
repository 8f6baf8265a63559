# backoffice/repositories/user_repo.py
import uuid

from sqlalchemy import func
from sqlmodel import Session, select

from backoffice.models.user import User


class UserRepository:
    """
    Data access layer for User.

    Responsibilities:
      - Pure DB reads used by the order workflow
      - No FastAPI, no HTTP, no business logic
    """

    def get_by_id(self, session: Session, user_id: uuid.UUID) -> User | None:
        """Return a User by primary key, or None if not found."""
        return session.get(User, user_id)

    def get_by_email(self, session: Session, email: str) -> User | None:
        """Return a User by unique email, or None if not found."""
        stmt = select(User).where(User.email == email)
        return session.exec(stmt).first()

    def exists_by_id(self, session: Session, user_id: uuid.UUID) -> bool:
        stmt = select(func.count()).select_from(User).where(User.id == user_id)
        return session.exec(stmt).one() > 0
