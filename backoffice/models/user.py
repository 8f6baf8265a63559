# backoffice/models/user.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field

from backoffice.models.enums import UserRole


class User(SQLModel, table=True):
    """
    Registered customer or administrator.

    Registration, credentials and profile editing are handled elsewhere;
    the order workflow only reads this table to resolve the acting user
    (by email) and to check that a user id exists.
    """

    __tablename__ = "users"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    email: str = Field(
        unique=True,
        index=True,
        description="Login email, also the ownership key for orders",
    )

    first_name: str | None = Field(default=None, max_length=30)
    last_name: str | None = Field(default=None, max_length=30)

    role: UserRole = Field(
        default=UserRole.CLIENT,
        index=True,
        description="Application role: CLIENT | ADMINISTRATOR",
    )

    registered_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_type=DateTime(timezone=True),
        description="Creation timestamp (UTC)",
    )
