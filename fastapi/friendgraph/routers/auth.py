from fastapi import APIRouter, Depends, status

from friendgraph.core.errors import AuthError, operation_errors
from friendgraph.repositories.user_repository import UserRepository
from friendgraph.schemas.user import Token, UserCreate, UserLogin, UserPublic
from friendgraph.services.user_service import UserService
from friendgraph.utils.dependencies import get_current_user, get_user_repository
from friendgraph.utils.security import create_access_token


router = APIRouter(prefix="/auth", tags=["auth"])


def get_user_service(user_repo: UserRepository = Depends(get_user_repository)) -> UserService:
    return UserService(user_repo)


@router.post("/register", response_model=UserPublic, status_code=status.HTTP_201_CREATED)
async def register(payload: UserCreate, service: UserService = Depends(get_user_service)):
    with operation_errors("Error registering user"):
        return await service.register_user(payload.username, payload.email, payload.password)


@router.post("/login", response_model=Token)
async def login(payload: UserLogin, service: UserService = Depends(get_user_service)):
    with operation_errors("Error logging in"):
        user = await service.authenticate_user(payload.email, payload.password)
    if not user:
        raise AuthError("Incorrect email or password")
    return Token(access_token=create_access_token(user["_id"]))


@router.get("/me", response_model=UserPublic)
async def me(current_user: dict = Depends(get_current_user)):
    return UserPublic(id=current_user["_id"], username=current_user["username"], email=current_user["email"])
