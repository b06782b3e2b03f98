from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from src.accounts.dependencies import require_admin
from src.accounts.dtos import Identity
from src.exceptions import ScheduleNotFoundError, StoreFailure
from src.transport.repository.read_models import ScheduleReadModel, SqlScheduleReadModel
from src.transport.schemas import ScheduleResponse, SeatResponse
from src.transport.urls import SCHEDULES_URL, SEAT_MAP_URL

router = APIRouter()


def get_schedule_read_model() -> ScheduleReadModel:
    """Dependency to get schedule read model instance."""
    return SqlScheduleReadModel()


@router.get(SCHEDULES_URL, response_model=list[ScheduleResponse])
async def list_schedules(
    upcoming_only: bool = True,
    read_model: ScheduleReadModel = Depends(get_schedule_read_model),
) -> list[ScheduleResponse]:
    """List active bus schedules with the seats still available."""
    try:
        schedules = await read_model.list_schedules(upcoming_only=upcoming_only)
    except StoreFailure as e:
        raise HTTPException(status_code=503, detail=str(e))
    return [ScheduleResponse.from_dto(schedule) for schedule in schedules]


@router.get(SEAT_MAP_URL, response_model=list[SeatResponse])
async def get_seat_map(
    schedule_id: UUID,
    read_model: ScheduleReadModel = Depends(get_schedule_read_model),
    _: Identity = Depends(require_admin),
) -> list[SeatResponse]:
    """Seat map of a bus. Seats 1 and 2 belong to the driver and the guide."""
    try:
        seats = await read_model.get_seat_map(schedule_id)
    except ScheduleNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StoreFailure as e:
        raise HTTPException(status_code=503, detail=str(e))
    return [SeatResponse.from_dto(seat) for seat in seats]
