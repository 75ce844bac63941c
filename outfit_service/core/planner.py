"""
Outfit Planner (v1.0.0)
Weekly plan generation and single-day regeneration.

Flow per day:
-------------
1. Coin flip: seed from uppers or bottoms, random item from that pool
2. Suggestions for the seed (owner's cache first, then suggestion source)
3. Match suggestions against the opposite pool
4. First match, else a random opposite item
5. Any error in 2-4 -> random upper + random bottom for that day

A weekly run always attempts all seven days, then saves the plan in one
atomic replace. Weekly generation and day regeneration share a per-owner
guard: a second request while one is running is rejected, not queued.

The outfit store is the source of truth: every read goes back to it, so
plans saved by other workers are visible. The running guard, run states
and suggestion caches are per process; several workers share the store
but not each other's guards.
"""
import time
import random
import logging
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, List, Optional, Tuple

from outfit_service.cache.suggestion_cache import SuggestionCacheManager
from outfit_service.core.errors import (
    GenerationInProgressError,
    InsufficientWardrobeError,
    InvalidDayError,
    PersistenceError,
)
from outfit_service.core.labels import ReferenceData
from outfit_service.core.matcher import find_matches
from outfit_service.core.models import (
    ClothingItem,
    Notice,
    Outfit,
    WeeklyPlan,
    DAYS_OF_WEEK,
    UPPER,
    BOTTOM,
)
from outfit_service.db.credentials import CredentialStore
from outfit_service.db.outfits import OutfitStore
from outfit_service.db.reference import ReferenceStore
from outfit_service.db.wardrobe import WardrobeStore
from outfit_service.llm.suggestion_source import SuggestionSource, SuggestionResult
from outfit_service.observability import metrics, log_generation

logger = logging.getLogger(__name__)


class RunState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    PARTIALLY_COMPLETED = "partially_completed"
    FAILED = "failed"


# How a day's outfit was chosen
OUTCOME_MATCHED = "matched"
OUTCOME_RANDOM = "random"
OUTCOME_FALLBACK = "fallback"


@dataclass
class DayOutcome:
    day: str
    outcome: str
    source: Optional[str] = None  # gemini | mock | cache
    error: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "day": self.day,
            "outcome": self.outcome,
            "source": self.source,
            "error": self.error,
        }


@dataclass
class PlanResult:
    """Outcome of a successful generation or regeneration."""
    status: RunState
    outfits: List[Outfit]
    outcomes: List[DayOutcome]
    notices: List[Notice] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "outfits": [o.to_dict() for o in self.outfits],
            "outcomes": [o.to_dict() for o in self.outcomes],
            "notice": self.notices[0].to_dict() if self.notices else None,
            "notices": [n.to_dict() for n in self.notices],
        }


def _fallback_notice(result: SuggestionResult) -> Optional[Notice]:
    """User-facing notice for a suggestion fallback, if it deserves one."""
    if not result.notify:
        return None
    if result.reason == "endpoint_unavailable":
        return Notice(
            title="AI suggestions unavailable",
            description="The Gemini model could not be reached; using built-in styling rules",
            variant="warning",
        )
    if result.reason == "rate_limited":
        return Notice(
            title="AI suggestions paused",
            description="Too many requests to Gemini; using built-in styling rules for now",
            variant="info",
        )
    return None


class OutfitPlanner:
    """
    Usage:
        planner = OutfitPlanner(wardrobe, outfits, reference, credentials, source, caches)
        result = await planner.generate_weekly_plan(owner_id)
        result = await planner.regenerate_day(owner_id, "wednesday")
    """

    def __init__(
        self,
        wardrobe: WardrobeStore,
        outfits: OutfitStore,
        reference: ReferenceStore,
        credentials: CredentialStore,
        source: SuggestionSource,
        caches: Optional[SuggestionCacheManager] = None,
        rng: Optional[random.Random] = None
    ):
        self.wardrobe = wardrobe
        self.outfits = outfits
        self.reference = reference
        self.credentials = credentials
        self.source = source
        self.caches = caches or SuggestionCacheManager()
        self.rng = rng or random.Random()
        self._active: set = set()
        self._states: Dict[str, RunState] = {}
        self._plans: Dict[str, WeeklyPlan] = {}

    # ==================== GUARD ====================

    def is_running(self, owner_id: str) -> bool:
        return owner_id in self._active

    def get_run_state(self, owner_id: str) -> RunState:
        return self._states.get(owner_id, RunState.IDLE)

    def _enter(self, owner_id: str) -> None:
        # Check and add with no await in between
        if owner_id in self._active:
            metrics.increment("generation_rejected")
            logger.info(f"Generation rejected for {owner_id}: already running")
            raise GenerationInProgressError()
        self._active.add(owner_id)
        self._states[owner_id] = RunState.RUNNING

    def _exit(self, owner_id: str, state: RunState) -> None:
        self._active.discard(owner_id)
        self._states[owner_id] = state

    # ==================== HELPERS ====================

    def _load_pools(self, owner_id: str) -> Tuple[List[ClothingItem], List[ClothingItem]]:
        try:
            uppers = self.wardrobe.get_items(owner_id, UPPER)
            bottoms = self.wardrobe.get_items(owner_id, BOTTOM)
        except Exception as e:
            logger.error(f"Failed to load wardrobe for {owner_id}: {e}")
            raise PersistenceError(f"Could not load wardrobe: {e}") from e

        if not uppers or not bottoms:
            logger.info(f"Incomplete wardrobe for {owner_id}: {len(uppers)} uppers, {len(bottoms)} bottoms")
            raise InsufficientWardrobeError()

        return uppers, bottoms

    def _load_api_key(self, owner_id: str) -> Optional[str]:
        """Owner's Gemini key; an unreadable credential store means no key (mock only)."""
        try:
            return self.credentials.get_key(owner_id)
        except Exception as e:
            metrics.increment("credential_failures")
            logger.warning(f"Failed to read Gemini key for {owner_id}, using mock suggestions: {e}")
            return None

    async def _suggest(
        self,
        owner_id: str,
        seed: ClothingItem,
        reference: ReferenceData,
        api_key: Optional[str]
    ) -> SuggestionResult:
        """Suggestions for a seed, cache-first with write-through."""
        cache = self.caches.for_owner(owner_id) if self.caches.enabled else None

        if cache is not None:
            cached = cache.get(seed.item_id)
            if cached:
                return SuggestionResult(suggestions=cached, source="cache")

        result = await self.source.get_suggestions(seed, reference, api_key)

        # Mock output is not cached
        if cache is not None and not result.used_fallback and result.suggestions:
            cache.put(seed.item_id, result.suggestions)

        return result

    async def _build_outfit(
        self,
        owner_id: str,
        day: str,
        uppers: List[ClothingItem],
        bottoms: List[ClothingItem],
        reference: ReferenceData,
        api_key: Optional[str],
        notices: List[Notice]
    ) -> Tuple[Outfit, DayOutcome]:
        start_with_upper = self.rng.random() < 0.5
        seeds, complements = (uppers, bottoms) if start_with_upper else (bottoms, uppers)
        seed = self.rng.choice(seeds)

        try:
            result = await self._suggest(owner_id, seed, reference, api_key)

            notice = _fallback_notice(result)
            if notice and notice not in notices:
                notices.append(notice)

            matched = find_matches(result.suggestions, complements, reference, self.rng)
            if matched:
                partner = matched[0]
                outcome = DayOutcome(day, OUTCOME_MATCHED, source=result.source)
            else:
                partner = self.rng.choice(complements)
                outcome = DayOutcome(day, OUTCOME_RANDOM, source=result.source)

            upper, bottom = (seed, partner) if start_with_upper else (partner, seed)

        except Exception as e:
            logger.error(f"Error generating outfit for {day}: {e}")
            metrics.increment("day_fallbacks")
            upper = self.rng.choice(uppers)
            bottom = self.rng.choice(bottoms)
            outcome = DayOutcome(day, OUTCOME_FALLBACK, error=str(e))

        outfit = Outfit(upper=upper, bottom=bottom, day=day, owner_id=owner_id)
        return outfit, outcome

    # ==================== OPERATIONS ====================

    async def generate_weekly_plan(self, owner_id: str) -> PlanResult:
        """
        Generate and save outfits for monday..sunday.

        Raises:
            GenerationInProgressError: A run is already active for the owner
            InsufficientWardrobeError: No upper or no bottom items
            PersistenceError: Wardrobe could not be read or plan could not be saved
        """
        self._enter(owner_id)
        started = time.time()
        state = RunState.FAILED
        error: Optional[str] = None
        outcomes: List[DayOutcome] = []

        try:
            uppers, bottoms = self._load_pools(owner_id)
            reference = self.reference.load()
            api_key = self._load_api_key(owner_id)

            new_outfits: List[Outfit] = []
            notices: List[Notice] = []

            for day in DAYS_OF_WEEK:
                outfit, outcome = await self._build_outfit(
                    owner_id, day, uppers, bottoms, reference, api_key, notices
                )
                new_outfits.append(outfit)
                outcomes.append(outcome)

            try:
                self.outfits.replace_week(owner_id, new_outfits)
            except Exception as e:
                metrics.increment("persistence_failures")
                logger.error(f"Failed to save weekly plan for {owner_id}: {e}")
                raise PersistenceError(f"Could not save weekly plan: {e}") from e

            self._plans[owner_id] = WeeklyPlan(new_outfits)

            fallbacks = sum(1 for o in outcomes if o.outcome == OUTCOME_FALLBACK)
            state = RunState.PARTIALLY_COMPLETED if fallbacks else RunState.COMPLETED
            metrics.increment("plans_generated")

            notices.insert(0, Notice(
                title="Weekly outfits generated!",
                description="Your AI-powered weekly outfit plan is ready",
            ))
            logger.info(f"✓ Weekly plan generated for {owner_id} ({state.value})")

            return PlanResult(state, new_outfits, outcomes, notices)

        except Exception as e:
            error = str(e)
            raise

        finally:
            self._exit(owner_id, state)
            log_generation(
                owner_id, "weekly", state.value,
                int((time.time() - started) * 1000),
                days=len(outcomes),
                fallback_days=sum(1 for o in outcomes if o.outcome == OUTCOME_FALLBACK),
                error=error,
            )

    async def regenerate_day(self, owner_id: str, day: str) -> PlanResult:
        """
        Replace the outfit for one day, leaving the other days untouched.

        Raises:
            InvalidDayError: Day is not monday..sunday
            GenerationInProgressError, InsufficientWardrobeError, PersistenceError
        """
        day = (day or "").strip().lower()
        if day not in DAYS_OF_WEEK:
            raise InvalidDayError(day)

        self._enter(owner_id)
        started = time.time()
        state = RunState.FAILED
        error: Optional[str] = None

        try:
            uppers, bottoms = self._load_pools(owner_id)
            plan = self._get_plan(owner_id)
            reference = self.reference.load()
            api_key = self._load_api_key(owner_id)
            notices: List[Notice] = []

            outfit, outcome = await self._build_outfit(
                owner_id, day, uppers, bottoms, reference, api_key, notices
            )

            try:
                self.outfits.replace_day(owner_id, outfit)
            except Exception as e:
                metrics.increment("persistence_failures")
                logger.error(f"Failed to save {day} outfit for {owner_id}: {e}")
                raise PersistenceError(f"Could not save outfit for {day}: {e}") from e

            plan.merge(outfit)

            state = RunState.PARTIALLY_COMPLETED if outcome.outcome == OUTCOME_FALLBACK else RunState.COMPLETED
            metrics.increment("days_regenerated")

            notices.insert(0, Notice(
                title="Outfit regenerated!",
                description=f"Your outfit for {day.capitalize()} has been updated",
            ))
            logger.info(f"✓ Regenerated {day} for {owner_id} ({outcome.outcome})")

            return PlanResult(state, [outfit], [outcome], notices)

        except Exception as e:
            error = str(e)
            raise

        finally:
            self._exit(owner_id, state)
            log_generation(
                owner_id, "regenerate_day", state.value,
                int((time.time() - started) * 1000),
                days=1 if state != RunState.FAILED else 0,
                fallback_days=1 if state == RunState.PARTIALLY_COMPLETED else 0,
                error=error,
            )

    def _get_plan(self, owner_id: str) -> WeeklyPlan:
        """Plan re-read from the outfit store; refreshes the in-memory copy."""
        try:
            plan = WeeklyPlan(self.outfits.list_outfits(owner_id))
        except Exception as e:
            logger.error(f"Failed to load outfits for {owner_id}: {e}")
            raise PersistenceError(f"Could not load outfits: {e}") from e
        self._plans[owner_id] = plan
        return plan

    def get_weekly_plan(self, owner_id: str) -> WeeklyPlan:
        return self._get_plan(owner_id)

    def get_outfit_for_day(self, owner_id: str, day: str) -> Optional[Outfit]:
        """
        Raises:
            InvalidDayError: Day is not monday..sunday
        """
        day = (day or "").strip().lower()
        if day not in DAYS_OF_WEEK:
            raise InvalidDayError(day)
        return self._get_plan(owner_id).get(day)

    def get_current_day_outfit(self, owner_id: str, today: Optional[date] = None) -> Optional[Outfit]:
        today = today or date.today()
        return self.get_outfit_for_day(owner_id, DAYS_OF_WEEK[today.weekday()])

    def reset_suggestion_cache(self, owner_id: str) -> Notice:
        self.caches.reset(owner_id)
        return Notice(
            title="Suggestion cache cleared",
            description="New outfit suggestions will be fetched on the next generation",
        )
