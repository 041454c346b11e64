# raqam/auth.py
"""Interface to the external authentication backend.

The store never talks to the backend itself. Whatever client the app wires
in (a hosted auth service SDK, a fake in tests) implements `AuthProvider`;
the resulting `AuthIdentity` is handed to
`raqam.services.sync_user_from_identity`.
"""
from pydantic import BaseModel
from typing import Optional, Protocol


class AuthIdentity(BaseModel):
    id: str
    email: Optional[str] = None
    phone: Optional[str] = None
    full_name: Optional[str] = None


class AuthSession(BaseModel):
    access_token: str
    identity: AuthIdentity


class AuthResult(BaseModel):
    error: Optional[str] = None
    session: Optional[AuthSession] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def has_session(self) -> bool:
        return self.session is not None


class AuthProvider(Protocol):
    async def get_session(self) -> Optional[AuthSession]: ...

    async def sign_in(self, email: str, password: str) -> AuthResult: ...

    async def sign_up(self, email: str, password: str, full_name: Optional[str] = None) -> AuthResult: ...

    async def sign_out(self) -> None: ...

    async def reset_password(self, email: str) -> AuthResult: ...

    async def resend_verification(self, email: str) -> AuthResult: ...
