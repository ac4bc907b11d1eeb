from typing import List

from fastapi import APIRouter, Depends
from starlette import status
from starlette.responses import Response

from pokerpal.operations import RegistrationOperations
from pokerpal.routes.deps import registration_operations
from pokerpal.routes.schemas import (
    ActivityResponse, ConfirmActionResponse, ConfirmedRegistrationResponse, PendingActionCreate,
    PendingActionResponse, PendingActionWithPlayersResponse, PendingRegistrationResponse,
    RegistrationCreate, RegistrationResponse, RegistrationUpdate, RegistrationWithPlayerResponse,
)

router = APIRouter(tags=["registrations"])


@router.get("/api/tournaments/{tournament_id}/registrations",
            response_model=List[RegistrationWithPlayerResponse])
async def list_registrations(tournament_id: str, ops: RegistrationOperations = Depends(registration_operations)):
    return await ops.list_registrations(tournament_id)


@router.post("/api/tournaments/{tournament_id}/registrations", response_model=RegistrationResponse,
             status_code=status.HTTP_201_CREATED)
async def register_player(
    tournament_id: str,
    body: RegistrationCreate,
    ops: RegistrationOperations = Depends(registration_operations),
):
    return await ops.register_player(tournament_id, body.model_dump())


@router.patch("/api/tournaments/{tournament_id}/registrations/{registration_id}",
              response_model=RegistrationResponse)
async def patch_tournament_registration(
    tournament_id: str,
    registration_id: str,
    body: RegistrationUpdate,
    ops: RegistrationOperations = Depends(registration_operations),
):
    return await ops.patch_registration(registration_id, body.changes(), tournament_id=tournament_id)


@router.patch("/api/registrations/{registration_id}", response_model=RegistrationResponse)
async def patch_registration(
    registration_id: str,
    body: RegistrationUpdate,
    ops: RegistrationOperations = Depends(registration_operations),
):
    return await ops.patch_registration(registration_id, body.changes())


@router.put("/api/registrations/{registration_id}", response_model=RegistrationResponse)
async def update_registration(
    registration_id: str,
    body: RegistrationUpdate,
    ops: RegistrationOperations = Depends(registration_operations),
):
    return await ops.update_registration(registration_id, body.changes())


@router.delete("/api/registrations/{registration_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_registration(registration_id: str, ops: RegistrationOperations = Depends(registration_operations)):
    await ops.delete_registration(registration_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Self-service registration queues

@router.get("/api/tournaments/{tournament_id}/pending-registrations",
            response_model=List[PendingRegistrationResponse])
async def pending_registrations(tournament_id: str, ops: RegistrationOperations = Depends(registration_operations)):
    return [
        PendingRegistrationResponse.model_validate(
            RegistrationWithPlayerResponse.model_validate(line.registration).model_dump() | {'amount_owed': line.amount}
        )
        for line in await ops.pending_payments(tournament_id)
    ]


@router.get("/api/tournaments/{tournament_id}/confirmed-registrations",
            response_model=List[ConfirmedRegistrationResponse])
async def confirmed_registrations(tournament_id: str, ops: RegistrationOperations = Depends(registration_operations)):
    return [
        ConfirmedRegistrationResponse.model_validate(
            RegistrationWithPlayerResponse.model_validate(line.registration).model_dump() | {'amount_paid': line.amount}
        )
        for line in await ops.confirmed_payments(tournament_id)
    ]


@router.patch("/api/registrations/{registration_id}/confirm-payment", response_model=RegistrationResponse)
async def confirm_payment(registration_id: str, ops: RegistrationOperations = Depends(registration_operations)):
    return await ops.confirm_payment(registration_id)


# Pending actions

@router.get("/api/tournaments/{tournament_id}/pending-actions",
            response_model=List[PendingActionWithPlayersResponse])
async def list_pending_actions(tournament_id: str, ops: RegistrationOperations = Depends(registration_operations)):
    return await ops.list_pending_actions(tournament_id)


@router.post("/api/tournaments/{tournament_id}/pending-actions", response_model=PendingActionResponse,
             status_code=status.HTTP_201_CREATED)
async def create_pending_action(
    tournament_id: str,
    body: PendingActionCreate,
    ops: RegistrationOperations = Depends(registration_operations),
):
    return await ops.create_pending_action(tournament_id, body.model_dump())


@router.post("/api/pending-actions/{action_id}/confirm", response_model=ConfirmActionResponse)
async def confirm_pending_action(action_id: str, ops: RegistrationOperations = Depends(registration_operations)):
    registrations = await ops.confirm_pending_action(action_id)
    return ConfirmActionResponse(
        message="Action confirmed",
        registrations=[RegistrationResponse.model_validate(reg) for reg in registrations],
    )


@router.delete("/api/pending-actions/{action_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_pending_action(action_id: str, ops: RegistrationOperations = Depends(registration_operations)):
    await ops.delete_pending_action(action_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Activity

@router.get("/api/tournaments/{tournament_id}/activity", response_model=List[ActivityResponse])
async def list_activity(tournament_id: str, ops: RegistrationOperations = Depends(registration_operations)):
    return await ops.list_activity(tournament_id)
