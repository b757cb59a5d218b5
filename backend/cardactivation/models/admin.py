"""
Card Activation Backend — Admin Principal Model
=================================================

What:  ORM model for the `admins` table.
Who:   Seeded by AdminCredentialService at startup (or `cardactivation seed-admin`);
       read by the login route. Only ip_address changes after creation.
"""

import uuid
from typing import Optional

from sqlalchemy import String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from cardactivation.database import Base


class AdminPrincipal(Base):
    __tablename__ = "admins"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    username: Mapped[str] = mapped_column(String(150), nullable=False, unique=True)

    # argon2 hash, see cardactivation.security
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    # Last address a successful login came from
    ip_address: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    def __repr__(self) -> str:
        return f"<AdminPrincipal(id={self.id}, username='{self.username}')>"
