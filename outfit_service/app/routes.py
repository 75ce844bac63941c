"""
API Routes for the Clos8 Outfit Service (v1.0.0)
Wardrobe CRUD, weekly outfit planning and suggestion settings.
"""
import logging
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Form, HTTPException, Query
from fastapi.responses import JSONResponse

from outfit_service.app.deps import get_planner
from outfit_service.core.auth import get_current_owner
from outfit_service.core.errors import PlannerError, StoreUnavailableError, WardrobeError
from outfit_service.core.models import ClothingItem, Notice, CLOTHING_TYPES, DAYS_OF_WEEK, new_id
from outfit_service.core.planner import OutfitPlanner
from outfit_service.config import get_settings
from outfit_service.db import mongo
from outfit_service.observability import get_metrics, is_logging_enabled

logger = logging.getLogger(__name__)

router = APIRouter()


def _planner_error(e: PlannerError) -> JSONResponse:
    return JSONResponse(content=e.to_dict(), status_code=e.status_code)


def _wardrobe_error(e: WardrobeError) -> JSONResponse:
    return JSONResponse(content={"error": e.message}, status_code=e.status_code)


def _store_unavailable(e: Exception) -> JSONResponse:
    logger.error(f"Store operation failed: {e}")
    return _planner_error(StoreUnavailableError())


def _outfit_response(outfit, day: str, notice: Optional[Notice] = None) -> JSONResponse:
    if outfit is None:
        notice = notice or Notice(
            title="No outfit yet",
            description=f"Generate a weekly plan to get an outfit for {day.capitalize()}",
            variant="info",
        )
        return JSONResponse(
            content={"day": day, "outfit": None, "notice": notice.to_dict()},
            status_code=404,
        )
    return JSONResponse(content={
        "day": day,
        "outfit": outfit.to_dict(),
        "notice": notice.to_dict() if notice else None,
    })


# ==================== PUBLIC ENDPOINTS ====================

@router.get("/health")
async def health_check(planner: OutfitPlanner = Depends(get_planner)):
    """Health check with observability info."""
    settings = get_settings()
    metrics = get_metrics()

    return {
        "status": "ok",
        "version": "1.0.0",
        "storage": {
            "backend": settings.storage_backend,
            "mongo": mongo.health_check() if settings.storage_backend == "mongo" else None,
        },
        "llm": planner.source.get_status(settings.gemini_api_key),
        "cache": planner.caches.get_status(),
        "observability": {
            "logging_enabled": is_logging_enabled(),
            "cache_hit_ratio": metrics["cache_hit_ratio"],
            "plans_generated": metrics["plans_generated"],
        },
    }


@router.get("/metrics")
async def get_metrics_endpoint():
    """Get counters for monitoring."""
    return JSONResponse(content=get_metrics())


# ==================== WARDROBE ====================

@router.get("/wardrobe/categories")
async def list_categories(planner: OutfitPlanner = Depends(get_planner)):
    """Category and subcategory reference data."""
    return JSONResponse(content=planner.reference.load().to_dict())


@router.post("/wardrobe/items")
async def create_wardrobe_item(
    type: str = Form(..., description="upper | bottom"),
    category_id: str = Form(...),
    subcategory_id: str = Form(""),
    color: str = Form(..., description="Hex color, e.g. #FFFFFF"),
    image_url: str = Form(""),
    name: Optional[str] = Form(None),
    owner_id: str = Depends(get_current_owner),
    planner: OutfitPlanner = Depends(get_planner)
):
    """Add a clothing item to the owner's wardrobe."""
    item = ClothingItem(
        item_id=new_id(),
        type=type.strip().lower(),
        category_id=category_id,
        subcategory_id=subcategory_id,
        color=color,
        image_url=image_url,
        name=name,
    )
    try:
        item = planner.wardrobe.add_item(owner_id, item)
    except WardrobeError as we:
        return _wardrobe_error(we)
    except Exception as e:
        return _store_unavailable(e)
    return JSONResponse(content=item.to_dict(), status_code=201)


@router.get("/wardrobe/items")
async def list_wardrobe_items(
    type: Optional[str] = Query(None, description="Filter by upper | bottom"),
    owner_id: str = Depends(get_current_owner),
    planner: OutfitPlanner = Depends(get_planner)
):
    """List the owner's wardrobe items."""
    if type is not None and type not in CLOTHING_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"type must be one of: {', '.join(CLOTHING_TYPES)}"
        )
    try:
        items = planner.wardrobe.get_items(owner_id, type)
    except Exception as e:
        return _store_unavailable(e)
    return JSONResponse(content={
        "items": [i.to_dict() for i in items],
        "total": len(items),
    })


@router.get("/wardrobe/items/{item_id}")
async def get_wardrobe_item(
    item_id: str,
    owner_id: str = Depends(get_current_owner),
    planner: OutfitPlanner = Depends(get_planner)
):
    try:
        item = planner.wardrobe.get_item(owner_id, item_id)
    except Exception as e:
        return _store_unavailable(e)
    if item is None:
        raise HTTPException(status_code=404, detail="Item not found")
    return JSONResponse(content=item.to_dict())


@router.put("/wardrobe/items/{item_id}")
async def replace_wardrobe_item(
    item_id: str,
    type: str = Form(...),
    category_id: str = Form(...),
    subcategory_id: str = Form(""),
    color: str = Form(...),
    image_url: str = Form(""),
    name: Optional[str] = Form(None),
    owner_id: str = Depends(get_current_owner),
    planner: OutfitPlanner = Depends(get_planner)
):
    """
    Full replace of a wardrobe item. The item's type cannot change.
    """
    item = ClothingItem(
        item_id=item_id,
        type=type.strip().lower(),
        category_id=category_id,
        subcategory_id=subcategory_id,
        color=color,
        image_url=image_url,
        name=name,
    )
    try:
        item = planner.wardrobe.replace_item(owner_id, item)
    except WardrobeError as we:
        return _wardrobe_error(we)
    except Exception as e:
        return _store_unavailable(e)
    return JSONResponse(content=item.to_dict())


@router.delete("/wardrobe/items/{item_id}")
async def remove_wardrobe_item(
    item_id: str,
    owner_id: str = Depends(get_current_owner),
    planner: OutfitPlanner = Depends(get_planner)
):
    try:
        planner.wardrobe.delete_item(owner_id, item_id)
    except WardrobeError as we:
        return _wardrobe_error(we)
    except Exception as e:
        return _store_unavailable(e)
    return JSONResponse(content={"message": "Item deleted"})


# ==================== OUTFITS ====================

@router.get("/outfits")
async def get_weekly_plan(
    owner_id: str = Depends(get_current_owner),
    planner: OutfitPlanner = Depends(get_planner)
):
    """Current weekly plan, ordered monday..sunday."""
    try:
        plan = planner.get_weekly_plan(owner_id)
    except PlannerError as pe:
        return _planner_error(pe)
    return JSONResponse(content=plan.to_dict())


@router.post("/outfits/generate")
async def generate_weekly_plan(
    owner_id: str = Depends(get_current_owner),
    planner: OutfitPlanner = Depends(get_planner)
):
    """
    POST /outfits/generate

    Generate outfits for all seven days and replace the saved plan.

    Errors:
        409: Generation already running for this owner
        422: Wardrobe lacks an upper or a bottom item
        503: Wardrobe unreadable or plan could not be saved
    """
    try:
        result = await planner.generate_weekly_plan(owner_id)
    except PlannerError as pe:
        return _planner_error(pe)
    return JSONResponse(content=result.to_dict())


@router.get("/outfits/status")
async def get_generation_status(
    owner_id: str = Depends(get_current_owner),
    planner: OutfitPlanner = Depends(get_planner)
):
    return JSONResponse(content={
        "state": planner.get_run_state(owner_id).value,
        "running": planner.is_running(owner_id),
    })


@router.get("/outfits/today")
async def get_today_outfit(
    owner_id: str = Depends(get_current_owner),
    planner: OutfitPlanner = Depends(get_planner)
):
    """Outfit for the current weekday."""
    today = date.today()
    day = DAYS_OF_WEEK[today.weekday()]
    try:
        outfit = planner.get_current_day_outfit(owner_id, today)
    except PlannerError as pe:
        return _planner_error(pe)
    return _outfit_response(outfit, day)


@router.get("/outfits/{day}")
async def get_day_outfit(
    day: str,
    owner_id: str = Depends(get_current_owner),
    planner: OutfitPlanner = Depends(get_planner)
):
    try:
        outfit = planner.get_outfit_for_day(owner_id, day)
    except PlannerError as pe:
        return _planner_error(pe)
    return _outfit_response(outfit, day.strip().lower())


@router.post("/outfits/{day}/regenerate")
async def regenerate_day(
    day: str,
    owner_id: str = Depends(get_current_owner),
    planner: OutfitPlanner = Depends(get_planner)
):
    """
    POST /outfits/{day}/regenerate

    Replace one day's outfit; the other six days are untouched.
    """
    try:
        result = await planner.regenerate_day(owner_id, day)
    except PlannerError as pe:
        return _planner_error(pe)
    return JSONResponse(content=result.to_dict())


# ==================== SUGGESTIONS ====================

@router.delete("/suggestions/cache")
async def reset_suggestion_cache(
    owner_id: str = Depends(get_current_owner),
    planner: OutfitPlanner = Depends(get_planner)
):
    notice = planner.reset_suggestion_cache(owner_id)
    return JSONResponse(content={"message": "Cache cleared", "notice": notice.to_dict()})


# ==================== SETTINGS ====================

@router.get("/settings/gemini-key")
async def get_gemini_key_status(
    owner_id: str = Depends(get_current_owner),
    planner: OutfitPlanner = Depends(get_planner)
):
    """Whether a Gemini key is configured. The key itself is never returned."""
    try:
        api_key = planner.credentials.get_key(owner_id)
        own_key = planner.credentials.has_own_key(owner_id)
    except Exception as e:
        return _store_unavailable(e)
    return JSONResponse(content={
        "configured": api_key is not None,
        "own_key": own_key,
        "rate_limit": planner.source.get_status(api_key)["rate_limit"],
    })


@router.put("/settings/gemini-key")
async def set_gemini_key(
    api_key: str = Form(..., description="Gemini API key"),
    owner_id: str = Depends(get_current_owner),
    planner: OutfitPlanner = Depends(get_planner)
):
    try:
        previous = planner.credentials.get_key(owner_id)
        planner.credentials.set_key(owner_id, api_key)
    except ValueError as ve:
        raise HTTPException(status_code=400, detail=str(ve))
    except Exception as e:
        return _store_unavailable(e)

    planner.source.reset_credential(previous)
    planner.source.reset_credential(api_key.strip())

    notice = Notice(title="API key saved", description="Outfit suggestions will use your Gemini key")
    return JSONResponse(content={"configured": True, "notice": notice.to_dict()})


@router.delete("/settings/gemini-key")
async def clear_gemini_key(
    owner_id: str = Depends(get_current_owner),
    planner: OutfitPlanner = Depends(get_planner)
):
    try:
        previous = planner.credentials.get_key(owner_id)
        planner.credentials.clear_key(owner_id)
        current = planner.credentials.get_key(owner_id)
    except Exception as e:
        return _store_unavailable(e)
    planner.source.reset_credential(previous)
    planner.source.reset_credential(current)

    notice = Notice(title="API key removed", description="Outfit suggestions will use the default source")
    return JSONResponse(content={
        "configured": current is not None,
        "notice": notice.to_dict(),
    })
