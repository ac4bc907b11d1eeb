from fastapi import APIRouter, Depends, Request
from starlette import status

from pokerpal.constants import SessionKeys
from pokerpal.data_models.accounts import SessionUser
from pokerpal.operations import AuthOperations
from pokerpal.operations.admin_operations import is_impersonating, start_session
from pokerpal.routes.deps import auth_operations, get_db, require_auth
from pokerpal.routes.schemas import (
    ChangePasswordRequest, CurrentUserResponse, LoginRequest, MessageResponse,
    ProfileUpdate, RegisterRequest, UserEnvelope, UserResponse,
)
from pokerpal.utils.exceptions import AuthenticationError

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=UserEnvelope, status_code=status.HTTP_201_CREATED)
async def register(body: RegisterRequest, request: Request, ops: AuthOperations = Depends(auth_operations)):
    user = await ops.create_user(body.email, body.password, body.name, body.phone)
    start_session(request.session, user)
    return UserEnvelope(message="Registration successful", user=UserResponse.model_validate(user))


@router.post("/login", response_model=UserEnvelope)
async def login(body: LoginRequest, request: Request, ops: AuthOperations = Depends(auth_operations)):
    user = await ops.authenticate(body.email, body.password)
    request.session.clear()
    start_session(request.session, user)
    return UserEnvelope(message="Login successful", user=UserResponse.model_validate(user))


@router.post("/logout", response_model=MessageResponse)
async def logout(request: Request):
    request.session.clear()
    return MessageResponse(message="Logout successful")


@router.get("/me", response_model=CurrentUserResponse)
async def me(request: Request, db=Depends(get_db)):
    user_id = request.session.get(SessionKeys.USER_ID)
    if not user_id:
        raise AuthenticationError("Not authenticated")

    user = await db.get_user(user_id)
    if not user:
        request.session.clear()
        raise AuthenticationError("User not found")

    response = CurrentUserResponse.model_validate(user)
    response.impersonating = is_impersonating(request.session)
    response.original_admin_id = request.session.get(SessionKeys.ORIGINAL_ADMIN_ID)
    return response


@router.put("/profile", response_model=UserEnvelope)
async def update_profile(
    body: ProfileUpdate,
    user: SessionUser = Depends(require_auth),
    ops: AuthOperations = Depends(auth_operations),
):
    updated = await ops.update_profile(user.id, body.name, body.email, body.phone)
    return UserEnvelope(message="Profile updated successfully", user=UserResponse.model_validate(updated))


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    body: ChangePasswordRequest,
    user: SessionUser = Depends(require_auth),
    ops: AuthOperations = Depends(auth_operations),
):
    await ops.change_password(user.id, body.current_password, body.new_password)
    return MessageResponse(message="Password changed successfully")
