from typing import List

from fastapi import APIRouter, Depends, Request

from pokerpal.operations import AdminOperations
from pokerpal.routes.deps import admin_operations, require_admin, require_auth
from pokerpal.routes.schemas import AccountResponse, AdminUserUpdate, UserEnvelope, UserResponse

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/users", response_model=List[AccountResponse], dependencies=[Depends(require_admin)])
async def list_users(ops: AdminOperations = Depends(admin_operations)):
    return [AccountResponse.model_validate(account) for account in await ops.list_accounts()]


@router.put("/users/{user_id}", response_model=UserResponse, dependencies=[Depends(require_admin)])
async def update_user(user_id: str, body: AdminUserUpdate, ops: AdminOperations = Depends(admin_operations)):
    return await ops.update_user(user_id, body.changes())


@router.post("/users/{user_id}/impersonate", response_model=UserEnvelope, dependencies=[Depends(require_admin)])
async def impersonate(user_id: str, request: Request, ops: AdminOperations = Depends(admin_operations)):
    target = await ops.impersonate(request.session, user_id)
    return UserEnvelope(message=f"Now impersonating {target.name}", user=UserResponse.model_validate(target))


@router.post("/stop-impersonation", response_model=UserEnvelope, dependencies=[Depends(require_auth)])
async def stop_impersonation(request: Request, ops: AdminOperations = Depends(admin_operations)):
    admin = await ops.stop_impersonation(request.session)
    return UserEnvelope(message="Stopped impersonating", user=UserResponse.model_validate(admin))
