"""Identity of the caller as established from the access token."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from src.auth.permissions import Capability, UserRole, has_capability


class Identity(BaseModel):
    """Authenticated caller."""

    model_config = ConfigDict(frozen=True)

    user_id: UUID = Field(description="User ID (token subject)")
    role: UserRole = Field(description="Organisation role")
    email: EmailStr | None = Field(default=None, description="User email")
    name: str | None = Field(default=None, description="Display name")

    def can(self, capability: Capability) -> bool:
        return has_capability(self.role, capability)
