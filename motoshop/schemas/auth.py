from typing import Any, Dict, Optional
from pydantic import BaseModel, Field

LOGIN_FORM_DEFAULTS: Dict[str, Any] = {"email": "", "password": "", "remember_me": False}
LEGACY_LOGIN_FORM_DEFAULTS: Dict[str, Any] = {"username": "", "password": "", "remember_me": False}
REGISTER_FORM_DEFAULTS: Dict[str, Any] = {
    "full_name": "",
    "email": "",
    "password": "",
    "confirm_password": "",
}


class LoginForm(BaseModel):
    """Schema for e-mail sign in."""
    email: str = ""
    password: str = ""
    remember_me: bool = False


class LegacyLoginForm(BaseModel):
    """Schema for the username sign in kept from the first version of the site."""
    username: str = ""
    password: str = ""
    remember_me: bool = False


class RegisterForm(BaseModel):
    """Schema for account creation."""
    full_name: str = ""
    email: str = ""
    password: str = ""
    confirm_password: str = ""


class SessionInfo(BaseModel):
    """The signed-in rider as the screens see them."""
    user_id: str = Field(..., description="Platform user ID")
    email: Optional[str] = Field(None, description="E-mail address")
    full_name: Optional[str] = Field(None, description="Full name from sign-up metadata")


class LegacyLoginResponse(BaseModel):
    success: bool
    message: str
    token: Optional[str] = None


class LegacySessionInfo(BaseModel):
    """The account signed in through the username login."""
    username: str = Field(..., description="Configured legacy username")
    expires_at: Optional[int] = Field(None, description="Token expiry as a Unix timestamp")
