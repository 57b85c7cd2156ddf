"""Password gate over Supabase auth.

There is a single admin identity; the password is the only secret. The first
successful attempt registers the account (sign-up), later ones sign in.
"""
from typing import Any, Optional

from wpbot.constants import ADMIN_EMAIL, MIN_PASSWORD_LENGTH
from wpbot.core.base import AuthResult
from wpbot.infra.logging import log_event, log_warning

INVALID_CREDENTIALS = "Invalid login credentials"


class AuthSession:
    def __init__(self, client: Any, admin_email: str = ADMIN_EMAIL, min_password_length: int = MIN_PASSWORD_LENGTH):
        self.client = client
        self.admin_email = admin_email
        self.min_password_length = min_password_length

    def validate_secret(self, secret: str) -> Optional[str]:
        if not secret or len(secret) < self.min_password_length:
            return f"비밀번호는 최소 {self.min_password_length}자 이상이어야 합니다."
        return None

    def _credentials(self, secret: str):
        return {"email": self.admin_email, "password": secret}

    def authenticate(self, secret: str) -> AuthResult:
        invalid = self.validate_secret(secret)
        if invalid:
            return AuthResult(ok=False, error_message=invalid)
        try:
            resp = self.client.auth.sign_in_with_password(self._credentials(secret))
            if getattr(resp, "user", None):
                log_event("auth_login", email=self.admin_email)
                return AuthResult(ok=True)
            return AuthResult(ok=False, error_message="로그인 실패")
        except Exception as e:
            if INVALID_CREDENTIALS not in str(e):
                log_warning("auth_login_failed", error=str(e)[:200])
                return AuthResult(ok=False, error_message=str(e) or "로그인 실패")
        # first run: the account does not exist yet
        return self._register(secret)

    def _register(self, secret: str) -> AuthResult:
        try:
            resp = self.client.auth.sign_up(self._credentials(secret))
        except Exception as e:
            log_warning("auth_signup_failed", error=str(e)[:200])
            return AuthResult(ok=False, error_message=str(e) or "회원가입 실패")
        if getattr(resp, "user", None):
            log_event("auth_signup", email=self.admin_email)
            return AuthResult(ok=True)
        return AuthResult(ok=False, error_message="회원가입 실패")

    def end_session(self) -> None:
        self.client.auth.sign_out()
        log_event("auth_logout", email=self.admin_email)

    def current_user(self) -> Optional[Any]:
        session = self.client.auth.get_session()
        if session is None:
            return None
        return getattr(session, "user", None)
