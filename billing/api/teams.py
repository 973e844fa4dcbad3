"""
Team API endpoints
"""

from fastapi import APIRouter, Depends, status
from typing import List

from billing.core.dependencies import get_services, require
from billing.core.guards import Access, CallContext
from billing.schemas.team import TeamCreate, TeamResponse
from billing.services.container import Services

router = APIRouter()


@router.post("/", response_model=TeamResponse, status_code=status.HTTP_201_CREATED)
async def create_team(
    team_data: TeamCreate,
    ctx: CallContext = Depends(require(Access.AUTHENTICATED)),
    services: Services = Depends(get_services),
):
    """Create a team owned by the caller"""
    return await services.teams.create(ctx, team_data.name, is_personal=team_data.is_personal)


@router.get("/", response_model=List[TeamResponse])
async def list_teams(
    ctx: CallContext = Depends(require(Access.AUTHENTICATED)),
    services: Services = Depends(get_services),
):
    """List the caller's teams"""
    return await services.teams.list(ctx)


@router.get("/{team_id}", response_model=TeamResponse)
async def get_team(
    team_id: int,
    ctx: CallContext = Depends(require(Access.AUTHENTICATED)),
    services: Services = Depends(get_services),
):
    return await services.teams.read(ctx, team_id)
