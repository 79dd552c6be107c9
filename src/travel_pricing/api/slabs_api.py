"""
Slabs API - FastAPI router for markup slab management.
"""
from dataclasses import asdict
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel
from typing import Optional

from ..engine.errors import ConfigValidationError
from ..engine.models import MarkupSlab
from ..services.slab_service import SlabService
from . import state

router = APIRouter(prefix="/api/slabs", tags=["slabs"])

def get_slab_service() -> SlabService:
    """Slab service bound to the current repository's data directory."""
    return SlabService(slabs_csv_path=state.repository.settings.markup_slabs)


# Pydantic models for API
class SlabCreate(BaseModel):
    """Request model for creating a slab."""
    id: Optional[str] = None
    name: str
    min_amount: float
    max_amount: float
    markup_type: str = "percentage"
    markup_value: float = 0.0
    currency: str = "USD"
    is_active: bool = True


class SlabUpdate(BaseModel):
    """Request model for updating a slab."""
    name: Optional[str] = None
    min_amount: Optional[float] = None
    max_amount: Optional[float] = None
    markup_type: Optional[str] = None
    markup_value: Optional[float] = None
    currency: Optional[str] = None
    is_active: Optional[bool] = None


class SlabResponse(BaseModel):
    """Response model for a slab."""
    id: str
    name: str
    min_amount: float
    max_amount: float
    markup_type: str
    markup_value: float
    currency: str
    is_active: bool
    created_at: Optional[str]
    updated_at: Optional[str]


class ValidationResponse(BaseModel):
    """Response model for validation."""
    valid: bool
    errors: list[str]
    warnings: list[str]


def _to_slab(data: SlabCreate) -> MarkupSlab:
    fields = data.model_dump()
    fields['id'] = fields['id'] or ''
    return MarkupSlab(**fields)


# Endpoints

@router.get("", response_model=list[SlabResponse])
async def list_slabs(include_inactive: bool = True, currency: Optional[str] = None):
    """List all markup slabs in stored order."""
    slabs = get_slab_service().list_slabs(include_inactive=include_inactive, currency=currency)
    return [SlabResponse(**asdict(slab)) for slab in slabs]


@router.get("/stats")
async def get_stats():
    """Get slab statistics."""
    return get_slab_service().get_stats()


@router.get("/{slab_id}", response_model=SlabResponse)
async def get_slab(slab_id: str):
    """Get a single slab by ID."""
    slab = get_slab_service().get_slab(slab_id)
    if not slab:
        raise HTTPException(status_code=404, detail=f"Slab '{slab_id}' not found")
    return SlabResponse(**asdict(slab))


@router.post("", response_model=SlabResponse)
async def create_slab(slab_data: SlabCreate):
    """Create a new markup slab."""
    try:
        created = get_slab_service().create_slab(_to_slab(slab_data))
    except ConfigValidationError as e:
        raise HTTPException(status_code=400, detail={"errors": e.errors})
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    state.repository.reload()
    return SlabResponse(**asdict(created))


@router.put("/{slab_id}", response_model=SlabResponse)
async def update_slab(slab_id: str, updates: SlabUpdate):
    """Update an existing slab."""
    update_dict = {k: v for k, v in updates.model_dump(exclude_unset=True).items() if v is not None}

    try:
        updated = get_slab_service().update_slab(slab_id, update_dict)
    except ConfigValidationError as e:
        raise HTTPException(status_code=400, detail={"errors": e.errors})
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    state.repository.reload()
    return SlabResponse(**asdict(updated))


@router.delete("/{slab_id}")
async def delete_slab(slab_id: str):
    """Delete a slab."""
    try:
        get_slab_service().delete_slab(slab_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    state.repository.reload()
    return {"success": True, "message": f"Slab '{slab_id}' deleted"}


@router.post("/validate", response_model=ValidationResponse)
async def validate_slab(slab_data: SlabCreate):
    """Validate a slab without saving."""
    result = get_slab_service().validate_slab(_to_slab(slab_data))
    return ValidationResponse(valid=result.valid, errors=result.errors, warnings=result.warnings)
