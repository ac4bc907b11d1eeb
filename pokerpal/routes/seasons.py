from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from starlette import status
from starlette.responses import Response

from pokerpal.operations import SeasonOperations
from pokerpal.routes.deps import require_auth, season_operations
from pokerpal.routes.schemas import (
    AllocationCreate, AllocationResponse, AllocationUpdate, LeaderboardResponse,
    PointsSystemCreate, PointsSystemResponse, PointsSystemUpdate,
    SeasonCreate, SeasonResponse, SeasonUpdate,
)

router = APIRouter(tags=["seasons"])


# Seasons

@router.get("/api/seasons", response_model=List[SeasonResponse])
async def list_seasons(
    club_id: Optional[str] = Query(default=None, alias="clubId"),
    ops: SeasonOperations = Depends(season_operations),
):
    return await ops.list_seasons(club_id)


@router.get("/api/seasons/{season_id}", response_model=SeasonResponse)
async def get_season(season_id: str, ops: SeasonOperations = Depends(season_operations)):
    return await ops.get_season(season_id)


@router.post("/api/seasons", response_model=SeasonResponse, status_code=status.HTTP_201_CREATED,
             dependencies=[Depends(require_auth)])
async def create_season(body: SeasonCreate, ops: SeasonOperations = Depends(season_operations)):
    return await ops.create_season(body.model_dump())


@router.put("/api/seasons/{season_id}", response_model=SeasonResponse, dependencies=[Depends(require_auth)])
async def update_season(season_id: str, body: SeasonUpdate, ops: SeasonOperations = Depends(season_operations)):
    return await ops.update_season(season_id, body.changes())


@router.delete("/api/seasons/{season_id}", status_code=status.HTTP_204_NO_CONTENT,
               dependencies=[Depends(require_auth)])
async def delete_season(season_id: str, ops: SeasonOperations = Depends(season_operations)):
    await ops.delete_season(season_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/api/seasons/{season_id}/leaderboard", response_model=LeaderboardResponse)
async def season_leaderboard(season_id: str, ops: SeasonOperations = Depends(season_operations)):
    return LeaderboardResponse.model_validate(await ops.season_leaderboard(season_id))


# Points systems

@router.get("/api/seasons/{season_id}/points-systems", response_model=List[PointsSystemResponse])
async def list_points_systems(season_id: str, ops: SeasonOperations = Depends(season_operations)):
    return await ops.list_points_systems(season_id)


@router.post("/api/seasons/{season_id}/points-systems", response_model=PointsSystemResponse,
             status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_auth)])
async def create_points_system(
    season_id: str,
    body: PointsSystemCreate,
    ops: SeasonOperations = Depends(season_operations),
):
    return await ops.create_points_system(season_id, body.model_dump())


@router.get("/api/points-systems/{points_system_id}", response_model=PointsSystemResponse)
async def get_points_system(points_system_id: str, ops: SeasonOperations = Depends(season_operations)):
    return await ops.get_points_system(points_system_id)


@router.put("/api/points-systems/{points_system_id}", response_model=PointsSystemResponse,
            dependencies=[Depends(require_auth)])
async def update_points_system(
    points_system_id: str,
    body: PointsSystemUpdate,
    ops: SeasonOperations = Depends(season_operations),
):
    return await ops.update_points_system(points_system_id, body.changes())


@router.delete("/api/points-systems/{points_system_id}", status_code=status.HTTP_204_NO_CONTENT,
               dependencies=[Depends(require_auth)])
async def delete_points_system(points_system_id: str, ops: SeasonOperations = Depends(season_operations)):
    await ops.delete_points_system(points_system_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Allocations

@router.get("/api/points-systems/{points_system_id}/allocations", response_model=List[AllocationResponse])
async def list_allocations(points_system_id: str, ops: SeasonOperations = Depends(season_operations)):
    return await ops.list_allocations(points_system_id)


@router.post("/api/points-systems/{points_system_id}/allocations", response_model=AllocationResponse,
             status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_auth)])
async def create_allocation(
    points_system_id: str,
    body: AllocationCreate,
    ops: SeasonOperations = Depends(season_operations),
):
    return await ops.create_allocation(points_system_id, body.model_dump())


@router.put("/api/points-allocations/{allocation_id}", response_model=AllocationResponse,
            dependencies=[Depends(require_auth)])
async def update_allocation(
    allocation_id: str,
    body: AllocationUpdate,
    ops: SeasonOperations = Depends(season_operations),
):
    return await ops.update_allocation(allocation_id, body.changes())


@router.delete("/api/points-allocations/{allocation_id}", status_code=status.HTTP_204_NO_CONTENT,
               dependencies=[Depends(require_auth)])
async def delete_allocation(allocation_id: str, ops: SeasonOperations = Depends(season_operations)):
    await ops.delete_allocation(allocation_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
