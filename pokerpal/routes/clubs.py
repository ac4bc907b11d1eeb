from typing import List

from fastapi import APIRouter, Depends
from starlette import status
from starlette.responses import Response

from pokerpal.data_models.accounts import SessionUser
from pokerpal.operations import ClubOperations
from pokerpal.routes.deps import club_operations, require_auth
from pokerpal.routes.schemas import ClubCreate, ClubResponse, ClubUpdate, CountResponse

router = APIRouter(prefix="/api/clubs", tags=["clubs"])


@router.get("", response_model=List[ClubResponse])
async def list_clubs(ops: ClubOperations = Depends(club_operations)):
    return await ops.list_clubs()


@router.get("/slug/{slug}", response_model=ClubResponse)
async def get_club_by_slug(slug: str, ops: ClubOperations = Depends(club_operations)):
    return await ops.get_club_by_slug(slug)


@router.get("/{club_id}", response_model=ClubResponse)
async def get_club(club_id: str, ops: ClubOperations = Depends(club_operations)):
    return await ops.get_club(club_id)


@router.get("/{club_id}/members-count", response_model=CountResponse)
async def members_count(club_id: str, ops: ClubOperations = Depends(club_operations)):
    return CountResponse(count=await ops.members_count(club_id))


@router.post("", response_model=ClubResponse, status_code=status.HTTP_201_CREATED)
async def create_club(
    body: ClubCreate,
    user: SessionUser = Depends(require_auth),
    ops: ClubOperations = Depends(club_operations),
):
    return await ops.create_club(body.changes(), user)


@router.put("/{club_id}", response_model=ClubResponse)
async def update_club(
    club_id: str,
    body: ClubUpdate,
    user: SessionUser = Depends(require_auth),
    ops: ClubOperations = Depends(club_operations),
):
    return await ops.update_club(club_id, body.changes(), user)


@router.delete("/{club_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_club(
    club_id: str,
    user: SessionUser = Depends(require_auth),
    ops: ClubOperations = Depends(club_operations),
):
    await ops.delete_club(club_id, user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
