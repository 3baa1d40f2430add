from pydantic import BaseModel, EmailStr, Field


class UserBase(BaseModel):

    email: EmailStr


class UserCreate(UserBase):

    username: str = Field(min_length=3, max_length=32, pattern=r"^[A-Za-z0-9_.-]+$")
    password: str = Field(min_length=6)


class UserLogin(UserBase):

    password: str


class UserPublic(UserBase):

    id: str
    username: str


class Token(BaseModel):

    access_token: str
    token_type: str = "bearer"


class TokenPayload(BaseModel):

    sub: str
    exp: int
