#taskmaster/schemas/team.py
from pydantic import BaseModel, ConfigDict, EmailStr, Field, constr
from typing import List, Literal, Optional
from datetime import datetime

from taskmaster.schemas.response import Pagination
from taskmaster.schemas.user import UserPublic

class TeamBase(BaseModel):
    """
    TeamBase — базовая схема для команды.
    """
    name: constr(strip_whitespace=True, min_length=1, max_length=100) = Field(..., examples=["Dev Team"], description="Название команды")
    description: Optional[constr(max_length=500)] = Field("", examples=["Development department"], description="Описание команды")
    avatar: Optional[str] = None

class TeamCreate(TeamBase):
    pass

class TeamUpdate(BaseModel):
    """
    TeamUpdate — обновление данных команды (все поля опциональны).
    """
    name: Optional[constr(strip_whitespace=True, min_length=1, max_length=100)] = None
    description: Optional[constr(max_length=500)] = None
    avatar: Optional[str] = None

class TeamRead(TeamBase):
    """
    TeamRead — схема для выдачи команды (response).
    """
    id: int
    owner_id: int = Field(..., description="ID владельца (user)")
    is_active: bool = True
    created_at: Optional[datetime] = Field(None, description="Дата создания")
    updated_at: Optional[datetime] = Field(None, description="Дата обновления")

    model_config = ConfigDict(from_attributes=True)

class TeamMemberRead(BaseModel):
    id: int
    team_id: int
    user_id: int
    role: str = Field(..., examples=["member"], description="owner / admin / member")
    created_at: Optional[datetime] = Field(None, description="Дата вступления")
    user: UserPublic

    model_config = ConfigDict(from_attributes=True)

class TeamDetail(BaseModel):
    """
    TeamDetail — команда с участниками и ролью текущего пользователя.
    """
    team: TeamRead
    members: List[TeamMemberRead]
    user_role: str

class TeamResponse(BaseModel):
    message: Optional[str] = None
    team: TeamRead

class TeamList(BaseModel):
    teams: List[TeamRead]
    pagination: Pagination

class InviteRequest(BaseModel):
    """
    InviteRequest — пригласить пользователя по email.
    """
    email: EmailStr = Field(..., examples=["jane@example.com"])
    role: Literal["admin", "member"] = Field("member", description="Роль после принятия приглашения")

class InviteResponse(BaseModel):
    message: str = "Invitation sent"
    invite_token: str = Field(..., alias="inviteToken", description="Токен приглашения (доставляется вне API)")
    expires_at: datetime

    model_config = ConfigDict(populate_by_name=True)

class InvitationRead(BaseModel):
    id: int
    team_id: int
    email: str
    role: str
    invited_by_id: int
    expires_at: datetime
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class InvitationList(BaseModel):
    invitations: List[InvitationRead]
