from typing import Optional

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, EmailStr, Field

from libs.result import Error
from src.api.error import ClientError, ServerError
from src.api.utils.session import SessionCodec, clear_session_cookie, set_session_cookie
from src.app.services.cache import ICache
from src.app.services.email_notifier import IEmailNotifier
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import (
    BeginMfaSetupUseCase,
    ChangePasswordUseCase,
    CompleteMfaSetupUseCase,
    ConfirmPasswordResetUseCase,
    DisableMfaUseCase,
    GetMeUseCase,
    LoginOutcome,
    LoginStepResponse,
    LoginUseCase,
    MeResponse,
    MessageResponse,
    MfaSetupResponse,
    RegisterCommand,
    RegisterUseCase,
    RequestPasswordResetUseCase,
    VerifyMfaLoginUseCase,
)
from src.app.use_cases.session import LogoutUseCase, Principal
from src.depends import (
    get_cache,
    get_config,
    get_current_user,
    get_email_notifier,
    get_session_codec,
    get_unit_of_work,
    require_current_user,
)

router = APIRouter(prefix="/auth", tags=["Authentication"])

ERROR_STATUS = {
    "INVALID_CREDENTIALS": status.HTTP_401_UNAUTHORIZED,
    "INVALID_LOGIN_TOKEN": status.HTTP_401_UNAUTHORIZED,
    "UNAUTHORIZED": status.HTTP_401_UNAUTHORIZED,
    "ACCOUNT_INACTIVE": status.HTTP_403_FORBIDDEN,
    "TENANT_INACTIVE": status.HTTP_403_FORBIDDEN,
    "TENANT_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "USER_ALREADY_EXISTS": status.HTTP_409_CONFLICT,
    "INVALID_CODE": status.HTTP_400_BAD_REQUEST,
    "PASSWORD_POLICY_VIOLATION": status.HTTP_400_BAD_REQUEST,
    "ALREADY_ENABLED": status.HTTP_400_BAD_REQUEST,
    "MFA_NOT_INITIATED": status.HTTP_400_BAD_REQUEST,
    "MFA_NOT_ENABLED": status.HTTP_400_BAD_REQUEST,
    "INVALID_TOKEN": status.HTTP_400_BAD_REQUEST,
    "TOKEN_EXPIRED": status.HTTP_400_BAD_REQUEST,
    "TOKEN_ALREADY_USED": status.HTTP_400_BAD_REQUEST,
}


def raise_for_error(error: Error):
    """Map a use case error to ClientError, or ServerError when unexpected"""
    status_code = ERROR_STATUS.get(error.code)
    if status_code is None:
        raise ServerError(error)
    raise ClientError(error, status_code=status_code)


def client_context(request: Request):
    user_agent = request.headers.get("user-agent", "")
    ip = request.client.host if request.client else ""
    return user_agent, ip


def login_step_response(
    outcome: LoginOutcome, response: Response, codec: SessionCodec, config
) -> LoginStepResponse:
    """Sets the session cookie when the flow reached authenticated"""
    user = None
    if outcome.session is not None:
        set_session_cookie(response, codec, config, outcome.session)
        user = outcome.session.user
    return LoginStepResponse(status=outcome.status, login_token=outcome.login_token, user=user)


class LoginRequest(BaseModel):
    """
    Login HTTP request payload

    tenant_domain defaults to the domain part of the email.
    """

    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=1, description="User password")
    tenant_domain: Optional[str] = Field(None, description="Tenant domain")


@router.post("/login", status_code=status.HTTP_200_OK, response_model=LoginStepResponse)
async def login(
    body: LoginRequest,
    request: Request,
    response: Response,
    uow: UnitOfWork = Depends(get_unit_of_work),
    codec: SessionCodec = Depends(get_session_codec),
    config=Depends(get_config),
):
    """
    Password login - first step of the login flow

    Returns status authenticated (and sets the session cookie) or the next
    step with a login_token: password_change, mfa_setup or mfa.

    Raises:
        - 401 Unauthorized: INVALID_CREDENTIALS
        - 403 Forbidden: ACCOUNT_INACTIVE, TENANT_INACTIVE
    """
    user_agent, ip = client_context(request)
    use_case = LoginUseCase(uow, config.LOGIN_CHALLENGE_EXPIRY, config.SESSION_MAX_AGE)
    result = await use_case.execute(body.email, body.password, body.tenant_domain, user_agent, ip)

    if result.is_err():
        raise_for_error(result.error)

    return login_step_response(result.value, response, codec, config)


class ChangePasswordRequest(BaseModel):
    login_token: str = Field(..., min_length=1)
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=1)


@router.post("/change-password", status_code=status.HTTP_200_OK, response_model=LoginStepResponse)
async def change_password(
    body: ChangePasswordRequest,
    request: Request,
    response: Response,
    uow: UnitOfWork = Depends(get_unit_of_work),
    codec: SessionCodec = Depends(get_session_codec),
    config=Depends(get_config),
):
    """
    Forced password change step

    Raises:
        - 400 Bad Request: PASSWORD_POLICY_VIOLATION
        - 401 Unauthorized: INVALID_LOGIN_TOKEN, INVALID_CREDENTIALS
    """
    user_agent, ip = client_context(request)
    use_case = ChangePasswordUseCase(uow, config.LOGIN_CHALLENGE_EXPIRY, config.SESSION_MAX_AGE)
    result = await use_case.execute(
        body.login_token, body.current_password, body.new_password, user_agent, ip
    )

    if result.is_err():
        raise_for_error(result.error)

    return login_step_response(result.value, response, codec, config)


class BeginMfaSetupRequest(BaseModel):
    login_token: Optional[str] = None


class CompleteMfaSetupRequest(BaseModel):
    code: str = Field(..., min_length=1)
    login_token: Optional[str] = None


class DisableMfaRequest(BaseModel):
    code: str = Field(..., min_length=1)


@router.post("/mfa/setup", status_code=status.HTTP_200_OK, response_model=MfaSetupResponse)
async def begin_mfa_setup(
    body: Optional[BeginMfaSetupRequest] = None,
    principal: Optional[Principal] = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    config=Depends(get_config),
):
    """
    Start MFA enrolment

    Works with a login_token in the mfa_setup step or with a session.
    Returns the secret, otpauth URI, QR code and backup codes.
    """
    login_token = body.login_token if body else None
    use_case = BeginMfaSetupUseCase(uow, config.MFA_ISSUER)
    result = await use_case.execute(
        login_token=login_token, user_id=principal.user_id if principal else None
    )

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.patch("/mfa/setup", status_code=status.HTTP_200_OK, response_model=LoginStepResponse)
async def complete_mfa_setup(
    body: CompleteMfaSetupRequest,
    response: Response,
    principal: Optional[Principal] = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    codec: SessionCodec = Depends(get_session_codec),
    notifier: IEmailNotifier = Depends(get_email_notifier),
    config=Depends(get_config),
):
    """
    Confirm MFA enrolment with the first TOTP code

    In the login flow this sets the session cookie.
    """
    use_case = CompleteMfaSetupUseCase(
        uow, config.LOGIN_CHALLENGE_EXPIRY, config.SESSION_MAX_AGE, notifier
    )
    result = await use_case.execute(
        body.code,
        login_token=body.login_token,
        user_id=principal.user_id if principal else None,
    )

    if result.is_err():
        raise_for_error(result.error)

    return login_step_response(result.value, response, codec, config)


@router.delete("/mfa/setup", status_code=status.HTTP_200_OK, response_model=MessageResponse)
async def disable_mfa(
    body: DisableMfaRequest,
    principal: Principal = Depends(require_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """Disable MFA after a valid TOTP or backup code"""
    result = await DisableMfaUseCase(uow).execute(principal.user_id, body.code)

    if result.is_err():
        raise_for_error(result.error)

    return MessageResponse(status="success", message="MFA has been disabled")


class VerifyMfaLoginRequest(BaseModel):
    login_token: str = Field(..., min_length=1)
    code: str = Field(..., min_length=1)
    trust_device: bool = False


@router.post("/mfa/verify-login", status_code=status.HTTP_200_OK, response_model=LoginStepResponse)
async def verify_mfa_login(
    body: VerifyMfaLoginRequest,
    request: Request,
    response: Response,
    uow: UnitOfWork = Depends(get_unit_of_work),
    codec: SessionCodec = Depends(get_session_codec),
    config=Depends(get_config),
):
    """
    MFA step of the login flow

    Raises:
        - 400 Bad Request: INVALID_CODE
        - 401 Unauthorized: INVALID_LOGIN_TOKEN
    """
    user_agent, ip = client_context(request)
    use_case = VerifyMfaLoginUseCase(uow, config.LOGIN_CHALLENGE_EXPIRY, config.SESSION_MAX_AGE)
    result = await use_case.execute(body.login_token, body.code, body.trust_device, user_agent, ip)

    if result.is_err():
        raise_for_error(result.error)

    return login_step_response(result.value, response, codec, config)


@router.post("/logout", status_code=status.HTTP_200_OK, response_model=MessageResponse)
async def logout(
    principal: Optional[Principal] = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    cache: ICache = Depends(get_cache),
    config=Depends(get_config),
):
    """
    Logout

    Destroys the session and revokes the user's OAuth tokens. The cookie is
    cleared even when token revocation fails (500).
    """
    if principal is not None:
        result = await LogoutUseCase(uow, cache).execute(principal.session_token, principal.user_id)
        if result.is_err():
            failed = JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"error": {"code": result.error.code, "message": "Internal server error"}},
            )
            clear_session_cookie(failed, config)
            return failed

    done = JSONResponse(
        content=MessageResponse(status="success", message="Logged out").model_dump()
    )
    clear_session_cookie(done, config)
    return done


class RegisterRequest(BaseModel):
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=1, description="User password")
    name: Optional[str] = Field(None, max_length=255)
    tenant_domain: str = Field(..., min_length=1, max_length=255)


@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=LoginStepResponse)
async def register(
    body: RegisterRequest,
    response: Response,
    uow: UnitOfWork = Depends(get_unit_of_work),
    codec: SessionCodec = Depends(get_session_codec),
    notifier: IEmailNotifier = Depends(get_email_notifier),
    config=Depends(get_config),
):
    """
    Create an account in an existing tenant and sign it in

    Raises:
        - 400 Bad Request: PASSWORD_POLICY_VIOLATION
        - 403 Forbidden: TENANT_INACTIVE
        - 404 Not Found: TENANT_NOT_FOUND
        - 409 Conflict: USER_ALREADY_EXISTS
    """
    command = RegisterCommand(
        email=body.email, password=body.password, name=body.name, tenant_domain=body.tenant_domain
    )
    result = await RegisterUseCase(uow, config.SESSION_MAX_AGE, notifier).execute(command)

    if result.is_err():
        raise_for_error(result.error)

    outcome = LoginOutcome(status="authenticated", session=result.value)
    return login_step_response(outcome, response, codec, config)


class ForgotPasswordRequest(BaseModel):
    email: EmailStr
    tenant_domain: Optional[str] = None


@router.post("/forgot-password", status_code=status.HTTP_200_OK, response_model=MessageResponse)
async def forgot_password(
    body: ForgotPasswordRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    notifier: IEmailNotifier = Depends(get_email_notifier),
    config=Depends(get_config),
):
    """
    Request a password reset email

    Always returns the same response, whether or not the account exists.
    """
    use_case = RequestPasswordResetUseCase(
        uow, config.BASE_URL, config.PASSWORD_RESET_EXPIRY, notifier
    )
    result = await use_case.execute(body.email, body.tenant_domain)

    if result.is_err():
        raise ServerError(result.error)

    return result.value


class ResetPasswordRequest(BaseModel):
    token: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


@router.post("/reset-password", status_code=status.HTTP_200_OK, response_model=MessageResponse)
async def reset_password(
    body: ResetPasswordRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    cache: ICache = Depends(get_cache),
):
    """
    Set a new password with a reset token

    Ends every session of the user and revokes their OAuth tokens.

    Raises:
        - 400 Bad Request: PASSWORD_POLICY_VIOLATION, INVALID_TOKEN,
          TOKEN_EXPIRED, TOKEN_ALREADY_USED
    """
    result = await ConfirmPasswordResetUseCase(uow, cache).execute(body.token, body.password)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get("/me", status_code=status.HTTP_200_OK, response_model=MeResponse)
async def me(
    principal: Principal = Depends(require_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """Current user profile"""
    result = await GetMeUseCase(uow).execute(principal.user_id)

    if result.is_err():
        raise_for_error(result.error)

    return result.value
