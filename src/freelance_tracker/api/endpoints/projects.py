"""Project endpoints for project management."""

from fastapi import APIRouter, Depends, Query, Response, status

from freelance_tracker.api.dependencies import get_owner_id, get_repository
from freelance_tracker.api.models import (
    CreateProjectRequest,
    ProjectResponse,
    UpdateProjectRequest,
)
from freelance_tracker.core.models import Project
from freelance_tracker.core.repository import Repository

router = APIRouter()


@router.get("/", response_model=list[ProjectResponse])
async def list_projects(
    active_only: bool = Query(False, description="Only active projects"),
    repository: Repository = Depends(get_repository),
    owner_id: str = Depends(get_owner_id),
) -> list[ProjectResponse]:
    """List the owner's projects sorted by name.

    Example:
        >>> GET /api/v1/projects/?active_only=true
    """
    projects = await repository.list_projects(owner_id, active_only=active_only)
    return [ProjectResponse.from_project(p) for p in projects]


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: str,
    repository: Repository = Depends(get_repository),
    owner_id: str = Depends(get_owner_id),
) -> ProjectResponse:
    """Get a specific project by ID. Unknown ids give 404."""
    project = await repository.get_project(owner_id, project_id)
    return ProjectResponse.from_project(project)


@router.post("/", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    request: CreateProjectRequest,
    repository: Repository = Depends(get_repository),
    owner_id: str = Depends(get_owner_id),
) -> ProjectResponse:
    """Create a new project.

    Example:
        >>> POST /api/v1/projects/
        {
            "name": "Website redesign",
            "hourly_rate": 250000
        }
    """
    project = Project(
        owner_id=owner_id,
        name=request.name,
        hourly_rate=request.hourly_rate,
        description=request.description,
    )
    await repository.add_project(project)
    return ProjectResponse.from_project(project)


@router.patch("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: str,
    request: UpdateProjectRequest,
    repository: Repository = Depends(get_repository),
    owner_id: str = Depends(get_owner_id),
) -> ProjectResponse:
    """Update project fields that are present in the request.

    A new hourly rate reprices all of the project's past entries in later
    statistics.
    """
    changes = request.model_dump(exclude_none=True)
    if not changes:
        project = await repository.get_project(owner_id, project_id)
    else:
        project = await repository.update_project(owner_id, project_id, **changes)
    return ProjectResponse.from_project(project)


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(
    project_id: str,
    repository: Repository = Depends(get_repository),
    owner_id: str = Depends(get_owner_id),
) -> Response:
    """Delete a project. Its time entries no longer count in statistics."""
    await repository.remove_project(owner_id, project_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
