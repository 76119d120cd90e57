"""User model definition using SQLAlchemy Core."""

import uuid

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    MetaData,
    String,
    Table,
    Text,
    Uuid,
    func,
    text,
)

metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid.uuid4),
    # Credentials
    Column("username", String(30), nullable=False, unique=True, index=True),
    Column("email", Text, nullable=False, unique=True, index=True),
    Column("hashed_password", Text, nullable=False),
    # Profile
    Column("first_name", Text, nullable=False),
    Column("last_name", Text, nullable=False),
    Column("phone", String(20)),
    # Role and placement
    Column("role", String(30), nullable=False, server_default=text("'user'"), index=True),
    Column("department", String(50)),
    Column("specialization", Text),
    Column("employee_id", String(50), unique=True),
    # Account state
    Column("is_active", Boolean, nullable=False, server_default=text("true")),
    # Audit
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("last_login_at", DateTime(timezone=True)),
)
