from pydantic import BaseModel, Field


class ExchangeRequest(BaseModel):
    api_key: str
    api_secret: str
    request_token: str


class SessionData(BaseModel):
    access_token: str = ""
    user_id: str = ""


class SessionResponse(BaseModel):
    """Body of the Kite /session/token response."""
    status: str | None = None
    data: SessionData | None = None
    error: str | None = None
    # The live API reports failures in message/error_type
    message: str | None = None
    error_type: str | None = None


class SessionResult(BaseModel):
    status: str
    access_token: str
    user_id: str
    error_message: str | None = None


class LoginURLResponse(BaseModel):
    login_url: str = Field(..., description="Kite login URL")


class ExchangeTokenRequest(BaseModel):
    request_token: str = Field(..., description="Request token returned by Kite after login")


class ExchangeTokenResponse(BaseModel):
    status: str = Field(..., description="Session status reported by Kite")
    access_token: str = Field(..., description="Access token")
    user_id: str = Field(..., description="Kite user ID")
