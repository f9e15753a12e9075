"""
MFA Engine

TOTP enrolment and verification, single-use backup codes and trusted devices.

Enrolment states: unenrolled (no secret) -> pending verification (secret
stored, mfa_enabled false) -> enrolled (mfa_enabled true).

There is no failed-attempt counter or lockout.
"""

import hashlib
import hmac
import secrets
from datetime import timedelta
from typing import List

from pydantic import BaseModel

from libs.result import Error, Result, Return
from src.api.utils import totp
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import MfaTrustedDevice, User

BACKUP_CODE_COUNT = 10
TOTP_WINDOW = 1
TRUSTED_DEVICE_DAYS = 30


class MfaSetupData(BaseModel):
    secret: str
    otpauth_uri: str
    qr_code: str
    backup_codes: List[str]


def generate_backup_codes(count: int = BACKUP_CODE_COUNT) -> List[str]:
    """Backup codes: 8 uppercase hex characters each"""
    return [secrets.token_hex(4).upper() for _ in range(count)]


def device_identifier(user_agent: str, ip: str) -> str:
    """Stable fingerprint of a browser: sha256(user_agent + "-" + ip)"""
    return hashlib.sha256(f"{user_agent}-{ip}".encode()).hexdigest()


class MfaService:
    """
    MFA operations on a user row.

    Must be used inside an entered UnitOfWork; the caller commits.
    """

    def __init__(self, uow: UnitOfWork, issuer: str = "PrismAuth"):
        self.uow = uow
        self.issuer = issuer

    async def begin_setup(self, user: User) -> Result[MfaSetupData]:
        """
        Start enrolment: new secret and backup codes, MFA not yet enabled.

        Calling it again before completion replaces the pending secret.
        """
        if user.mfa_enabled:
            return Return.err(Error("ALREADY_ENABLED", "MFA is already enabled"))

        secret = totp.generate_secret()
        backup_codes = generate_backup_codes()
        otpauth_uri = totp.build_otpauth_uri(secret, label=user.email, issuer=self.issuer)

        user.mfa_secret = secret
        user.mfa_backup_codes = backup_codes
        await self.uow.users.update(user)

        return Return.ok(
            MfaSetupData(
                secret=secret,
                otpauth_uri=otpauth_uri,
                qr_code=totp.render_qr_data_url(otpauth_uri),
                backup_codes=backup_codes,
            )
        )

    async def complete_setup(self, user: User, code: str) -> Result[User]:
        """Enable MFA once the user proves possession of the pending secret"""
        if user.mfa_enabled:
            return Return.err(Error("ALREADY_ENABLED", "MFA is already enabled"))
        if not user.mfa_secret:
            return Return.err(Error("MFA_NOT_INITIATED", "MFA setup not initiated"))
        if not totp.verify_totp(user.mfa_secret, code, window=TOTP_WINDOW):
            return Return.err(Error("INVALID_CODE", "Invalid verification code"))

        user.mfa_enabled = True
        user.require_mfa_setup = False
        await self.uow.users.update(user)
        return Return.ok(user)

    async def verify_login(self, user: User, code: str) -> Result[None]:
        """
        Check a backup code first, then a TOTP code.

        A matching backup code is removed from the user's set.
        """
        if not user.mfa_enabled or not user.mfa_secret:
            return Return.err(Error("MFA_NOT_ENABLED", "MFA is not enabled for this account"))

        normalized = (code or "").strip().upper()
        matched = next(
            (
                backup
                for backup in user.mfa_backup_codes or []
                if hmac.compare_digest(backup.encode(), normalized.encode())
            ),
            None,
        )
        if matched is not None:
            if await self.uow.users.consume_backup_code(user, matched):
                return Return.ok(None)
            return Return.err(Error("INVALID_CODE", "Invalid verification code"))

        if totp.verify_totp(user.mfa_secret, normalized, window=TOTP_WINDOW):
            return Return.ok(None)
        return Return.err(Error("INVALID_CODE", "Invalid verification code"))

    async def disable(self, user: User, code: str) -> Result[None]:
        """Disable MFA after a valid TOTP or backup code"""
        verified = await self.verify_login(user, code)
        if verified.is_err():
            return verified

        user.mfa_enabled = False
        user.mfa_secret = None
        user.mfa_backup_codes = []
        await self.uow.users.update(user)
        await self.uow.trusted_devices.delete_all_by_user_id(user.id)
        return Return.ok(None)

    async def trust_device(self, user: User, user_agent: str, ip: str) -> MfaTrustedDevice:
        """Create or extend a 30-day trusted device record"""
        identifier = device_identifier(user_agent, ip)
        expires_at = utcnow() + timedelta(days=TRUSTED_DEVICE_DAYS)

        device = await self.uow.trusted_devices.get_by_user_and_device(user.id, identifier)
        if device is None:
            device = MfaTrustedDevice(
                user_id=user.id,
                device_identifier=identifier,
                user_agent=user_agent[:1024],
                expires_at=expires_at,
            )
            return await self.uow.trusted_devices.create(device)

        device.expires_at = expires_at
        return await self.uow.trusted_devices.update(device)

    async def is_trusted_device(self, user: User, user_agent: str, ip: str) -> bool:
        device = await self.uow.trusted_devices.get_by_user_and_device(
            user.id, device_identifier(user_agent, ip)
        )
        return device is not None and device.expires_at > utcnow()
