from abc import ABC, abstractmethod

from src.app.repositories.access_token_repository import IAccessTokenRepository
from src.app.repositories.authorization_code_repository import IAuthorizationCodeRepository
from src.app.repositories.custom_role_repository import ICustomRoleRepository
from src.app.repositories.login_challenge_repository import ILoginChallengeRepository
from src.app.repositories.mfa_trusted_device_repository import IMfaTrustedDeviceRepository
from src.app.repositories.oauth_client_repository import IOAuthClientRepository
from src.app.repositories.password_reset_token_repository import IPasswordResetTokenRepository
from src.app.repositories.refresh_token_repository import IRefreshTokenRepository
from src.app.repositories.session_repository import ISessionRepository
from src.app.repositories.tenant_repository import ITenantRepository
from src.app.repositories.user_consent_repository import IUserConsentRepository
from src.app.repositories.user_repository import IUserRepository


class UnitOfWork(ABC):
    """Abstract UnitOfWork - defines repository access and transaction management"""

    # Repository properties (initialized in __aenter__)
    tenants: ITenantRepository
    users: IUserRepository
    custom_roles: ICustomRoleRepository
    oauth_clients: IOAuthClientRepository
    authorization_codes: IAuthorizationCodeRepository
    access_tokens: IAccessTokenRepository
    refresh_tokens: IRefreshTokenRepository
    sessions: ISessionRepository
    login_challenges: ILoginChallengeRepository
    trusted_devices: IMfaTrustedDeviceRepository
    user_consents: IUserConsentRepository
    password_reset_tokens: IPasswordResetTokenRepository

    @abstractmethod
    async def __aenter__(self):
        pass

    @abstractmethod
    async def __aexit__(self, *args):
        pass

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass
