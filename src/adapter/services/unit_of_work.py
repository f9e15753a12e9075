from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories.access_token_repository import AccessTokenRepository
from src.adapter.repositories.authorization_code_repository import AuthorizationCodeRepository
from src.adapter.repositories.custom_role_repository import CustomRoleRepository
from src.adapter.repositories.login_challenge_repository import LoginChallengeRepository
from src.adapter.repositories.mfa_trusted_device_repository import MfaTrustedDeviceRepository
from src.adapter.repositories.oauth_client_repository import OAuthClientRepository
from src.adapter.repositories.password_reset_token_repository import PasswordResetTokenRepository
from src.adapter.repositories.refresh_token_repository import RefreshTokenRepository
from src.adapter.repositories.session_repository import SessionRepository
from src.adapter.repositories.tenant_repository import TenantRepository
from src.adapter.repositories.user_consent_repository import UserConsentRepository
from src.adapter.repositories.user_repository import UserRepository
from src.app.services.unit_of_work import UnitOfWork


class SqlAlchemyUnitOfWork(UnitOfWork):
    """SQLAlchemy implementation of UnitOfWork pattern"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def __aenter__(self):
        # Initialize all repositories with the session
        self.tenants = TenantRepository(self.session)
        self.users = UserRepository(self.session)
        self.custom_roles = CustomRoleRepository(self.session)
        self.oauth_clients = OAuthClientRepository(self.session)
        self.authorization_codes = AuthorizationCodeRepository(self.session)
        self.access_tokens = AccessTokenRepository(self.session)
        self.refresh_tokens = RefreshTokenRepository(self.session)
        self.sessions = SessionRepository(self.session)
        self.login_challenges = LoginChallengeRepository(self.session)
        self.trusted_devices = MfaTrustedDeviceRepository(self.session)
        self.user_consents = UserConsentRepository(self.session)
        self.password_reset_tokens = PasswordResetTokenRepository(self.session)
        return self

    async def __aexit__(self, *args):
        await self.rollback()

    async def commit(self):
        await self.session.commit()

    async def rollback(self):
        await self.session.rollback()
