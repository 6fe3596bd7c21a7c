from fastapi import APIRouter, Depends, status

from database import get_user_store
from middleware.auth import require_identity
from repositories.users import UserStore
from schemas import Identity, LoginRequest, RegisterRequest, success_response
from services import auth_service
from utils.jwt import TokenService, get_token_service

router = APIRouter()


@router.post("/login")
def login(
    credentials: LoginRequest,
    users: UserStore = Depends(get_user_store),
    tokens: TokenService = Depends(get_token_service),
) -> dict:
    """Login user & get token"""
    result = auth_service.login(
        users=users,
        tokens=tokens,
        email=credentials.email,
        password=credentials.password,
    )
    return success_response("Login successful", result.model_dump(mode="json", by_alias=True))


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(
    details: RegisterRequest,
    users: UserStore = Depends(get_user_store),
    tokens: TokenService = Depends(get_token_service),
) -> dict:
    """Register new user"""
    result = auth_service.register(
        users=users,
        tokens=tokens,
        email=details.email,
        password=details.password,
        name=details.name,
    )
    return success_response("Registration successful", result.model_dump(mode="json", by_alias=True))


@router.get("/me")
def get_me(
    identity: Identity = Depends(require_identity),
    users: UserStore = Depends(get_user_store),
) -> dict:
    """Get current user"""
    user = auth_service.me(users=users, identity=identity)
    return success_response("User data retrieved", user.model_dump(mode="json", by_alias=True))
