"""Request/response schemas for login and the authenticated principal."""

from pydantic import BaseModel, ConfigDict, Field


class LoginRequest(BaseModel):
    """Credentials for login."""

    username: str = Field(..., min_length=1, max_length=255, description="Username")
    password: str = Field(..., min_length=8, max_length=128, description="Password")


class TokenResponse(BaseModel):
    """Bearer token returned after successful login."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: int = Field(..., ge=1, description="Token lifetime in seconds")


class CurrentUser(BaseModel):
    """Authenticated principal resolved from the bearer token; owns projects by id."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
