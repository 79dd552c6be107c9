from fastapi import FastAPI, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
from typing import Optional

from ..engine.errors import InvalidPaxCountError, InvalidServiceTypeError, RateNotFoundError
from ..engine.models import PaxCount
from .slabs_api import router as slabs_router
from . import state

app = FastAPI(
    title="Travel Pricing API",
    description="Markup, currency and destination tax quoting for travel packages",
    version="1.0.0"
)

# Enable CORS for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include slab management API
app.include_router(slabs_router)


class PaxModel(BaseModel):
    adults: int = Field(1, ge=0)
    children: int = Field(0, ge=0)
    infants: int = Field(0, ge=0)


class PriceRequest(BaseModel):
    base_amount: float = Field(..., ge=0)
    pax: PaxModel = PaxModel()
    country_code: Optional[str] = None
    currency: str
    source_currency: Optional[str] = None


class TaxRequest(BaseModel):
    amount: float = Field(..., ge=0)
    country_code: Optional[str] = None
    service_type: str = "all"
    is_inclusive: bool = False


class QuoteRequest(PriceRequest):
    service_type: str = "all"
    is_inclusive: bool = False


class ConvertRequest(BaseModel):
    amount: float
    from_currency: str
    to_currency: str


def _pax(model: PaxModel) -> PaxCount:
    return PaxCount(adults=model.adults, children=model.children, infants=model.infants)


@app.get("/")
async def root():
    return {"status": "online", "message": "Travel Pricing API Active"}


@app.post("/price")
async def price(req: PriceRequest):
    try:
        result = state.repository.pricing_engine.price(
            req.base_amount, _pax(req.pax), req.country_code, req.currency,
            source_currency=req.source_currency,
        )
    except InvalidPaxCountError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except RateNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return jsonable_encoder(result)


@app.post("/tax")
async def tax(req: TaxRequest):
    try:
        result = state.repository.tax_engine.calculate_tax(
            req.amount, req.country_code, req.service_type, req.is_inclusive
        )
    except InvalidServiceTypeError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return jsonable_encoder(result)


@app.post("/quote")
async def quote(req: QuoteRequest):
    try:
        result = state.repository.quote_service.quote(
            req.base_amount, _pax(req.pax), req.country_code, req.currency,
            service_type=req.service_type,
            is_inclusive=req.is_inclusive,
            source_currency=req.source_currency,
        )
    except (InvalidPaxCountError, InvalidServiceTypeError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except RateNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {
        "summary": result.to_dict(),
        "pricing": jsonable_encoder(result.pricing),
        "tax": jsonable_encoder(result.tax),
    }


@app.post("/convert")
async def convert(req: ConvertRequest):
    try:
        converted = state.repository.converter.convert(req.amount, req.from_currency, req.to_currency)
    except RateNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {
        "amount": req.amount,
        "from_currency": req.from_currency.upper(),
        "to_currency": req.to_currency.upper(),
        "converted_amount": converted,
    }


@app.post("/cache/clear")
async def clear_cache():
    cleared = len(state.repository.converter.cache)
    state.repository.converter.clear_cache()
    return {"success": True, "cleared": cleared}


@app.get("/system/status")
async def get_status():
    settings = state.repository.settings
    return {
        "engine_active": True,
        "data_dir": str(settings.data_dir),
        "pricing": jsonable_encoder(settings.pricing),
        "records": state.repository.get_stats(),
    }
