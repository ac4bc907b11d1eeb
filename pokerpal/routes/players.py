from typing import List

from fastapi import APIRouter, Depends
from starlette import status
from starlette.responses import Response

from pokerpal.operations import PlayerOperations
from pokerpal.routes.deps import player_operations
from pokerpal.routes.schemas import PlayerCreate, PlayerResponse, PlayerUpdate, RegistrationResponse

router = APIRouter(prefix="/api/players", tags=["players"])


@router.get("", response_model=List[PlayerResponse])
async def list_players(ops: PlayerOperations = Depends(player_operations)):
    return await ops.list_players()


@router.get("/{player_id}", response_model=PlayerResponse)
async def get_player(player_id: str, ops: PlayerOperations = Depends(player_operations)):
    return await ops.get_player(player_id)


@router.get("/{player_id}/registrations", response_model=List[RegistrationResponse])
async def player_registrations(player_id: str, ops: PlayerOperations = Depends(player_operations)):
    return await ops.player_registrations(player_id)


@router.post("", response_model=PlayerResponse, status_code=status.HTTP_201_CREATED)
async def create_player(body: PlayerCreate, ops: PlayerOperations = Depends(player_operations)):
    return await ops.create_player(body.changes())


@router.put("/{player_id}", response_model=PlayerResponse)
async def update_player(player_id: str, body: PlayerUpdate, ops: PlayerOperations = Depends(player_operations)):
    return await ops.update_player(player_id, body.changes())


@router.delete("/{player_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_player(player_id: str, ops: PlayerOperations = Depends(player_operations)):
    await ops.delete_player(player_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
