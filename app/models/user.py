from pydantic import BaseModel, EmailStr, Field


UNKNOWN_USER_NAME = "Usuário Desconhecido"


class User(BaseModel):
    """Authenticated user, built from the verified Firebase ID token claims."""

    id: str
    name: str | None = None
    email: EmailStr | None = None
    unit_id: str | None = Field(default=None, description="Organizational unit of the user")
    is_admin: bool = False

    @property
    def display_name(self) -> str:
        return self.name or UNKNOWN_USER_NAME
