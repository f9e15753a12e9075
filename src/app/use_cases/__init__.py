"""
Use Cases

Organized into domain folders:
- auth/: Login state machine, MFA, registration, password reset
- session/: Browser session creation and logout
- oauth/: Authorization, consent, token, userinfo and revocation
- applications/: Client-authenticated user lookups, client provisioning
- maintenance/: Expired-row cleanup
"""
