from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from reading_tracker.shelves import ShelfService

from api.dependencies import get_current_user, get_service
from api.schemas import GoalUpdate, calendar_to_dict, goal_to_dict, pace_to_dict

router = APIRouter(prefix="/goals", tags=["goals"])


@router.get("/current")
def get_reading_goal(user_id: str = Depends(get_current_user), service: ShelfService = Depends(get_service)):
    return goal_to_dict(service.get_reading_goal(user_id))


@router.put("/current")
def set_reading_goal(
    body: GoalUpdate,
    user_id: str = Depends(get_current_user),
    service: ShelfService = Depends(get_service),
):
    return goal_to_dict(service.set_reading_goal(user_id, body.goal))


@router.get("/current/pace")
def get_goal_pace(user_id: str = Depends(get_current_user), service: ShelfService = Depends(get_service)):
    return pace_to_dict(service.get_goal_pace(user_id))


@router.get("/calendar")
def get_reading_calendar(
    year: int,
    month: int = Query(..., ge=1, le=12),
    user_id: str = Depends(get_current_user),
    service: ShelfService = Depends(get_service),
):
    return calendar_to_dict(service.get_reading_calendar(user_id, year, month))
