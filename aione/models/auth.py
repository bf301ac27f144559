from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field

ModuleTag = Literal["scraper", "chatbot"]


class Credentials(BaseModel):
    email: str = Field(min_length=3)
    password: str = Field(min_length=6)


class UserInfo(BaseModel):
    user_id: str
    email: Optional[str] = None


class AuthSession(BaseModel):
    user_id: str
    email: Optional[str] = None
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    expires_at: Optional[int] = None
    """``None`` together with empty tokens when sign-up still awaits e-mail confirmation."""


class SignOutRequest(BaseModel):
    access_token: str
    refresh_token: str


class HistoryRequest(BaseModel):
    module: ModuleTag
    action: str = Field(min_length=1)
    details: Dict[str, Any] = Field(default_factory=dict)


class HistoryRecord(BaseModel):
    user_id: str
    module: ModuleTag
    action: str
    details: Dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[str] = None
