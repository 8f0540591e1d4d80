"""Request/response schemas for auth endpoints and the identity carried in tokens."""

from pydantic import BaseModel, ConfigDict, EmailStr, Field

# Min/max lengths for username and password validation.
USERNAME_MIN_LEN = 1
USERNAME_MAX_LEN = 255
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128


class AccountSnapshot(BaseModel):
    """
    Account data embedded in a token and returned on login. Never holds a password.

    Two snapshots are equal when their emails match (case-insensitive).
    """

    model_config = ConfigDict(from_attributes=True, extra="ignore")

    id: int
    username: str
    email: str
    roles: list[str] = Field(default_factory=list)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AccountSnapshot):
            return NotImplemented
        return self.email.lower() == other.email.lower()

    def __hash__(self) -> int:
        return hash(self.email.lower())


class Identity(BaseModel):
    """Authenticated principal attached to the request after token verification."""

    model_config = ConfigDict(frozen=True)

    id: int
    username: str
    email: str
    authorities: frozenset[str] = frozenset()

    @classmethod
    def from_snapshot(cls, snapshot: AccountSnapshot) -> "Identity":
        return cls(
            id=snapshot.id,
            username=snapshot.username,
            email=snapshot.email,
            authorities=frozenset(snapshot.roles),
        )

    def has_authority(self, authority: str) -> bool:
        return authority in self.authorities


class RegisterRequest(BaseModel):
    """Account candidate for registration."""

    username: str = Field(
        ..., min_length=USERNAME_MIN_LEN, max_length=USERNAME_MAX_LEN, description="Username"
    )
    email: EmailStr = Field(..., description="Email address (unique, case-insensitive)")
    password: str = Field(
        ..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN, description="Password"
    )


class LoginRequest(BaseModel):
    """Credentials for login. The username field also accepts an email."""

    username: str = Field(
        ..., min_length=USERNAME_MIN_LEN, max_length=USERNAME_MAX_LEN, description="Username or email"
    )
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN, description="Password")


class ActivateRequest(BaseModel):
    """Activation token from the activation email link."""

    uuid: str = Field(..., min_length=1, max_length=64, description="Activation token")


class ResendActivationRequest(BaseModel):
    username_or_email: str = Field(..., min_length=1, max_length=USERNAME_MAX_LEN)


class ResetPasswordRequest(BaseModel):
    email: str = Field(..., min_length=1, max_length=USERNAME_MAX_LEN)


class UpdatePasswordRequest(BaseModel):
    """New password; the account comes from the authenticated identity."""

    password: str = Field(
        ..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN, description="New password"
    )


class ErrorResponse(BaseModel):
    """Uniform error envelope: the symbolic error kind."""

    exception: str
