"""Service-role user provisioning schemas."""


from pydantic import EmailStr, Field

from partners_hub.schemas.common import CamelModel


class UserCreateRequest(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    company_id: str
    enabled: bool = True


class UserCreateResponse(CamelModel):
    success: bool = True
    user_id: str
    message: str
    warning: str | None = None


class SendResetLinkRequest(CamelModel):
    user_id: str | None = None
    user_email: EmailStr
    user_name: str | None = None


class ResetPasswordRequest(CamelModel):
    email: EmailStr
