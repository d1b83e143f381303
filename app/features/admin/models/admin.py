import enum

from sqlalchemy import Boolean, Column, DateTime, Index, Integer, String, Text, text

from app.platform.db.base import BaseModel


class AdminRole(str, enum.Enum):
    admin = "admin"
    super_admin = "super_admin"


class Admin(BaseModel):
    __tablename__ = "admins"

    name = Column(String(50), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    username = Column(String(30), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), default=AdminRole.admin.value, nullable=False, index=True)

    # The only refresh token currently honoured for this admin; rotated on
    # every refresh and cleared on logout.
    refresh_token = Column(Text, nullable=True)

    login_attempts = Column(Integer, default=0, nullable=False)
    lock_until = Column(DateTime, nullable=True)
    last_login = Column(DateTime, nullable=True)

    is_active = Column(Boolean, default=True, nullable=False)
    email_verified = Column(Boolean, default=False, nullable=False)
    created_by = Column(String, nullable=True)

    # At most one super_admin row, enforced by the store
    __table_args__ = (
        Index(
            "uq_admins_single_super_admin",
            "role",
            unique=True,
            postgresql_where=text("role = 'super_admin'"),
            sqlite_where=text("role = 'super_admin'"),
        ),
    )

    @property
    def is_super_admin(self) -> bool:
        return self.role == AdminRole.super_admin.value

    def __repr__(self):
        return f"<Admin(id={self.id}, username={self.username}, role={self.role})>"
