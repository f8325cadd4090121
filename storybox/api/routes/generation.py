"""Story generation endpoints."""

from fastapi import APIRouter, HTTPException, status

from ..dependencies import CurrentPrincipal, Manager
from ..models.requests import StartGenerationRequest
from ..models.responses import GenerationStateResponse
from ..services.generation_manager import GenerationInProgressError

router = APIRouter()


@router.post(
    "/",
    response_model=GenerationStateResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Start a story generation",
    description="Start generating a story for the signed-in user. Returns immediately; poll /generations/current for progress.",
    responses={409: {"description": "A generation is already running"}},
)
async def start_generation(request: StartGenerationRequest, principal: CurrentPrincipal, manager: Manager):
    """Start a new story generation."""
    try:
        state = await manager.start(principal, request.to_params(), language=request.language)
    except GenerationInProgressError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A story is already being generated",
        )

    return GenerationStateResponse.from_state(state)


@router.get(
    "/current",
    response_model=GenerationStateResponse,
    summary="Get generation state",
    description="Current snapshot of the user's generation. Idle when nothing was started.",
)
async def get_current_generation(principal: CurrentPrincipal, manager: Manager):
    """Get the current generation state."""
    return GenerationStateResponse.from_state(manager.get_state(principal.uid))


@router.delete(
    "/current",
    response_model=GenerationStateResponse,
    summary="Cancel generation",
    description="Cancel the running generation (or clear a finished one). The state returns to idle immediately.",
)
async def cancel_generation(principal: CurrentPrincipal, manager: Manager):
    """Cancel or reset the current generation."""
    return GenerationStateResponse.from_state(manager.cancel(principal.uid))
