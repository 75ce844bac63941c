"""
Error Taxonomy (v1.0.0)
Exceptions raised by the suggestion source, planner and stores.
"""
from typing import Optional

from outfit_service.core.models import Notice


# ==================== SUGGESTION SOURCE ====================
# Raised and absorbed inside the suggestion source; callers only ever
# see the mock fallback.

class SuggestionError(Exception):
    """Base class for external suggestion failures."""
    reason = "error"


class RateLimitedError(SuggestionError):
    """External call budget exhausted or upstream returned 429."""
    reason = "rate_limited"

    def __init__(self, message: str, retry_after: Optional[float] = None):
        self.retry_after = retry_after
        super().__init__(message)


class EndpointUnavailableError(SuggestionError):
    """Upstream returned 404 (endpoint or model not found)."""
    reason = "endpoint_unavailable"


class MalformedResponseError(SuggestionError):
    """Reply could not be parsed into suggestions."""
    reason = "malformed_response"


class UpstreamError(SuggestionError):
    """Transport error or unexpected non-2xx status."""
    reason = "upstream_error"

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


# ==================== PLANNER ====================

class PlannerError(Exception):
    """Cross-cutting failure that aborts a generation request."""
    code = "planner_error"

    def __init__(self, message: str, status_code: int = 500, notice: Optional[Notice] = None):
        self.message = message
        self.status_code = status_code
        self.notice = notice or Notice(
            title="Error generating outfits",
            description=message,
            variant="destructive",
        )
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {
            "error": self.code,
            "message": self.message,
            "notice": self.notice.to_dict(),
        }


class InsufficientWardrobeError(PlannerError):
    code = "insufficient_wardrobe"

    def __init__(self, message: str = "Wardrobe needs at least one upper and one bottom item"):
        super().__init__(
            message,
            status_code=422,
            notice=Notice(
                title="Incomplete wardrobe",
                description="Please add both upper and bottom clothing items to your wardrobe",
                variant="destructive",
            ),
        )


class GenerationInProgressError(PlannerError):
    code = "generation_in_progress"

    def __init__(self, message: str = "Outfit generation already in progress"):
        super().__init__(
            message,
            status_code=409,
            notice=Notice(
                title="Generation in progress",
                description="Your outfits are already being generated, please wait",
                variant="info",
            ),
        )


class PersistenceError(PlannerError):
    code = "persistence_failure"

    def __init__(self, message: str = "Could not save outfits"):
        super().__init__(
            message,
            status_code=503,
            notice=Notice(
                title="Error generating outfits",
                description="Could not save your weekly outfit plan",
                variant="destructive",
            ),
        )


class StoreUnavailableError(PlannerError):
    code = "store_unavailable"

    def __init__(self, message: str = "Storage is unavailable"):
        super().__init__(
            message,
            status_code=503,
            notice=Notice(
                title="Storage unavailable",
                description="Your data could not be reached, please try again later",
                variant="destructive",
            ),
        )


class InvalidDayError(PlannerError):
    code = "invalid_day"

    def __init__(self, day: str):
        super().__init__(
            f"Invalid day: {day!r}",
            status_code=400,
            notice=Notice(
                title="Invalid day",
                description="Day must be one of monday..sunday",
                variant="destructive",
            ),
        )


# ==================== WARDROBE ====================

class WardrobeError(Exception):
    """Wardrobe store rejected an operation."""
    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class ItemNotFoundError(WardrobeError):
    def __init__(self, item_id: str):
        super().__init__(f"Item not found: {item_id}", status_code=404)


class ItemTypeChangeError(WardrobeError):
    def __init__(self, item_id: str):
        super().__init__(f"Clothing type of item {item_id} cannot be changed", status_code=400)
