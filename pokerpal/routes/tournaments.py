from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from starlette import status
from starlette.responses import Response

from pokerpal.data_models.accounts import SessionUser
from pokerpal.operations import TournamentOperations
from pokerpal.operations.tournament_operations import FINALIZED_DESCRIPTION
from pokerpal.routes.deps import require_auth, tournament_operations
from pokerpal.routes.schemas import (
    DashboardStatsResponse, FinalizeResponse, PrizePoolResponse, RegistrationWithPlayerResponse,
    TournamentCreate, TournamentListResponse, TournamentResponse, TournamentUpdate,
)

router = APIRouter(tags=["tournaments"])


@router.get("/api/tournaments", response_model=List[TournamentListResponse])
async def list_tournaments(
    club_id: Optional[str] = Query(default=None, alias="clubId"),
    season_id: Optional[str] = Query(default=None, alias="seasonId"),
    ops: TournamentOperations = Depends(tournament_operations),
):
    listings = await ops.list_tournaments(club_id=club_id, season_id=season_id)
    return [
        TournamentListResponse.model_validate(listing.tournament).model_copy(
            update={'confirmed_player_count': listing.confirmed_player_count}
        )
        for listing in listings
    ]


@router.get("/api/tournaments/{tournament_id}", response_model=TournamentResponse)
async def get_tournament(tournament_id: str, ops: TournamentOperations = Depends(tournament_operations)):
    return await ops.get_tournament(tournament_id)


@router.get("/api/tournaments/{tournament_id}/prize-pool", response_model=PrizePoolResponse)
async def prize_pool(tournament_id: str, ops: TournamentOperations = Depends(tournament_operations)):
    return PrizePoolResponse.model_validate(await ops.prize_pool(tournament_id))


@router.post("/api/tournaments", response_model=TournamentResponse, status_code=status.HTTP_201_CREATED)
async def create_tournament(body: TournamentCreate, ops: TournamentOperations = Depends(tournament_operations)):
    return await ops.create_tournament(body.model_dump())


@router.patch("/api/tournaments/{tournament_id}", response_model=TournamentResponse)
async def patch_tournament(
    tournament_id: str,
    body: TournamentUpdate,
    ops: TournamentOperations = Depends(tournament_operations),
):
    return await ops.patch_tournament(tournament_id, body.changes())


@router.put("/api/tournaments/{tournament_id}", response_model=TournamentResponse)
async def update_tournament(
    tournament_id: str,
    body: TournamentUpdate,
    user: SessionUser = Depends(require_auth),
    ops: TournamentOperations = Depends(tournament_operations),
):
    return await ops.update_tournament(tournament_id, body.changes(), user)


@router.delete("/api/tournaments/{tournament_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tournament(
    tournament_id: str,
    user: SessionUser = Depends(require_auth),
    ops: TournamentOperations = Depends(tournament_operations),
):
    await ops.delete_tournament(tournament_id, user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/api/tournaments/{tournament_id}/finalize", response_model=FinalizeResponse,
             dependencies=[Depends(require_auth)])
async def finalize_tournament(tournament_id: str, ops: TournamentOperations = Depends(tournament_operations)):
    result = await ops.finalize_tournament(tournament_id)
    return FinalizeResponse(
        message=FINALIZED_DESCRIPTION,
        tournament=TournamentResponse.model_validate(result.tournament),
        net_prize_pool=result.summary.net_prize_pool,
        results=[RegistrationWithPlayerResponse.model_validate(reg) for reg in result.results],
    )


@router.get("/api/dashboard/stats", response_model=DashboardStatsResponse)
async def dashboard_stats(ops: TournamentOperations = Depends(tournament_operations)):
    return DashboardStatsResponse.model_validate(await ops.dashboard_stats())
