# Core module
from outfit_service.core.models import (
    ClothingItem,
    Category,
    Subcategory,
    Suggestion,
    Outfit,
    WeeklyPlan,
    Notice,
    DAYS_OF_WEEK,
    UPPER,
    BOTTOM,
)
from outfit_service.core.labels import ReferenceData, label_for_color
from outfit_service.core.errors import (
    PlannerError,
    InsufficientWardrobeError,
    GenerationInProgressError,
    PersistenceError,
    StoreUnavailableError,
    InvalidDayError,
    WardrobeError,
)
from outfit_service.core.rate_limit import RateLimiter, credential_key
