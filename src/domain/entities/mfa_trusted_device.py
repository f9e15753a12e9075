"""
MfaTrustedDevice Entity

"Remember this device" exemption from the MFA step.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import UniqueConstraint
from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow


class MfaTrustedDevice(SQLModel, table=True):
    """
    MfaTrustedDevice entity - device fingerprint exempt from MFA.

    Business Rules:
    - device_identifier is sha256(user_agent + "-" + ip)
    - 30-day expiry, extended every time the device is trusted again
    """

    __tablename__ = "mfa_trusted_devices"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(foreign_key="users.id", nullable=False, index=True)
    device_identifier: str = Field(max_length=64, index=True)
    user_agent: Optional[str] = Field(default=None, max_length=1024)

    # Timestamps
    expires_at: datetime = Field(sa_column=Column(DateTime))
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        UniqueConstraint("user_id", "device_identifier", name="uq_trusted_device"),
        Index("idx_trusted_device_expires_at", "expires_at"),
    )
