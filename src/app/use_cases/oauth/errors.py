"""OAuth 2.0 error vocabulary (RFC 6749 section 5.2)"""

INVALID_REQUEST = "invalid_request"
INVALID_CLIENT = "invalid_client"
INVALID_GRANT = "invalid_grant"
INVALID_SCOPE = "invalid_scope"
UNAUTHORIZED_CLIENT = "unauthorized_client"
UNSUPPORTED_GRANT_TYPE = "unsupported_grant_type"
ACCESS_DENIED = "access_denied"
INVALID_TOKEN = "invalid_token"
SERVER_ERROR = "server_error"

