"""
Tests for weekly plan generation and day regeneration.
"""
import random
import asyncio
from datetime import date
from unittest.mock import MagicMock, patch

import pytest

from outfit_service.cache import SuggestionCacheManager, MemoryKeyValueStore
from outfit_service.core.errors import (
    GenerationInProgressError,
    InsufficientWardrobeError,
    InvalidDayError,
    PersistenceError,
)
from outfit_service.core.models import DAYS_OF_WEEK, Suggestion
from outfit_service.core.planner import OutfitPlanner, RunState
from outfit_service.db import (
    MemoryWardrobeStore,
    MemoryOutfitStore,
    ReferenceStore,
    CredentialStore,
)
from outfit_service.llm import SuggestionSource, SuggestionResult
from outfit_service.observability import get_metrics

OWNER = "alice"


class StubSource:
    """Suggestion source answering by seed type, yielding to the loop once per call."""

    def __init__(self, source="gemini", reason=None, notify=False, error=None):
        self.source = source
        self.reason = reason
        self.notify = notify
        self.error = error
        self.calls = []
        self.api_keys = []

    async def get_suggestions(self, item, reference, api_key=None):
        self.calls.append(item.item_id)
        self.api_keys.append(api_key)
        await asyncio.sleep(0)
        if self.error:
            raise self.error
        if item.type == "upper":
            suggestions = [Suggestion(type="bottom", category="Jeans", color="blue")]
        else:
            suggestions = [Suggestion(type="upper", category="T-Shirt", color="white")]
        return SuggestionResult(
            suggestions=suggestions, source=self.source, reason=self.reason, notify=self.notify
        )


@pytest.fixture
def wardrobe(white_tshirt, blue_jeans, black_pants):
    store = MemoryWardrobeStore()
    for item in (white_tshirt, blue_jeans, black_pants):
        store.add_item(OWNER, item)
    return store


@pytest.fixture
def make_planner(wardrobe, clock):
    def _make(source=None, outfits=None, wardrobe_store=None, caches=None, credentials=None):
        return OutfitPlanner(
            wardrobe=wardrobe_store or wardrobe,
            outfits=outfits or MemoryOutfitStore(),
            reference=ReferenceStore(),
            credentials=credentials or CredentialStore(default_key="test-key"),
            source=source or StubSource(),
            caches=caches or SuggestionCacheManager(MemoryKeyValueStore(), clock=clock),
            rng=random.Random(7),
        )
    return _make


# ==================== WEEKLY GENERATION ====================

class TestGenerateWeeklyPlan:

    def test_generates_all_seven_days(self, make_planner):
        planner = make_planner()

        result = asyncio.run(planner.generate_weekly_plan(OWNER))

        assert result.status == RunState.COMPLETED
        assert [o.day for o in result.outfits] == list(DAYS_OF_WEEK)
        plan = planner.get_weekly_plan(OWNER)
        assert plan.is_complete()
        assert planner.get_run_state(OWNER) == RunState.COMPLETED

    def test_every_outfit_pairs_upper_with_bottom(self, make_planner):
        planner = make_planner()
        result = asyncio.run(planner.generate_weekly_plan(OWNER))

        for outfit in result.outfits:
            assert outfit.upper.type == "upper"
            assert outfit.bottom.type == "bottom"
            assert outfit.owner_id == OWNER

    def test_matches_follow_suggestions(self, make_planner):
        planner = make_planner()
        result = asyncio.run(planner.generate_weekly_plan(OWNER))

        assert all(o.outcome == "matched" for o in result.outcomes)
        for outfit in result.outfits:
            assert outfit.upper.item_id == "white-tshirt"

    def test_success_notice(self, make_planner):
        result = asyncio.run(make_planner().generate_weekly_plan(OWNER))
        notice = result.to_dict()["notice"]
        assert notice["title"] == "Weekly outfits generated!"

    def test_plan_is_persisted(self, make_planner):
        outfits = MemoryOutfitStore()
        planner = make_planner(outfits=outfits)

        asyncio.run(planner.generate_weekly_plan(OWNER))

        assert sorted(o.day for o in outfits.list_outfits(OWNER)) == sorted(DAYS_OF_WEEK)

    def test_insufficient_wardrobe_touches_nothing(self, make_planner, white_tshirt):
        wardrobe = MemoryWardrobeStore()
        wardrobe.add_item(OWNER, white_tshirt)
        outfits = MagicMock()
        source = StubSource()
        planner = make_planner(source=source, outfits=outfits, wardrobe_store=wardrobe)

        with pytest.raises(InsufficientWardrobeError) as exc:
            asyncio.run(planner.generate_weekly_plan(OWNER))

        assert exc.value.status_code == 422
        assert exc.value.notice.title == "Incomplete wardrobe"
        outfits.replace_week.assert_not_called()
        assert source.calls == []
        assert planner.get_run_state(OWNER) == RunState.FAILED
        assert not planner.is_running(OWNER)

    def test_wardrobe_read_failure(self, make_planner):
        wardrobe = MagicMock()
        wardrobe.get_items.side_effect = RuntimeError("db down")
        planner = make_planner(wardrobe_store=wardrobe)

        with pytest.raises(PersistenceError):
            asyncio.run(planner.generate_weekly_plan(OWNER))

    def test_concurrent_request_rejected(self, make_planner):
        planner = make_planner()

        async def both():
            return await asyncio.gather(
                planner.generate_weekly_plan(OWNER),
                planner.generate_weekly_plan(OWNER),
                return_exceptions=True,
            )

        results = asyncio.run(both())

        rejected = [r for r in results if isinstance(r, GenerationInProgressError)]
        completed = [r for r in results if not isinstance(r, Exception)]
        assert len(rejected) == 1
        assert len(completed) == 1
        assert rejected[0].status_code == 409
        assert get_metrics()["generation_rejected"] == 1
        assert not planner.is_running(OWNER)

    def test_other_owner_not_blocked(self, make_planner, wardrobe, make_item):
        wardrobe.add_item("bob", make_item("upper", "cat-2", "#FFFFFF"))
        wardrobe.add_item("bob", make_item("bottom", "cat-5", "#808080"))
        planner = make_planner()

        async def both():
            return await asyncio.gather(
                planner.generate_weekly_plan(OWNER),
                planner.generate_weekly_plan("bob"),
            )

        first, second = asyncio.run(both())
        assert first.status == RunState.COMPLETED
        assert second.status == RunState.COMPLETED

    def test_day_errors_fall_back_to_random_pairing(self, make_planner):
        planner = make_planner(source=StubSource(error=RuntimeError("boom")))

        result = asyncio.run(planner.generate_weekly_plan(OWNER))

        assert result.status == RunState.PARTIALLY_COMPLETED
        assert len(result.outfits) == 7
        assert all(o.outcome == "fallback" for o in result.outcomes)
        assert get_metrics()["day_fallbacks"] == 7

    def test_persistence_failure_keeps_previous_plan(self, make_planner):
        outfits = MemoryOutfitStore()
        planner = make_planner(outfits=outfits)
        asyncio.run(planner.generate_weekly_plan(OWNER))
        before = [o.outfit_id for o in planner.get_weekly_plan(OWNER).outfits()]

        with patch.object(outfits, "replace_week", side_effect=RuntimeError("write failed")):
            with pytest.raises(PersistenceError) as exc:
                asyncio.run(planner.generate_weekly_plan(OWNER))

        assert exc.value.status_code == 503
        assert [o.outfit_id for o in planner.get_weekly_plan(OWNER).outfits()] == before
        assert sorted(o.outfit_id for o in outfits.list_outfits(OWNER)) == sorted(before)
        assert planner.get_run_state(OWNER) == RunState.FAILED
        assert get_metrics()["persistence_failures"] == 1

    def test_fallback_notice_is_deduplicated(self, make_planner):
        source = StubSource(source="mock", reason="rate_limited", notify=True)
        result = asyncio.run(make_planner(source=source).generate_weekly_plan(OWNER))

        titles = [n.title for n in result.notices]
        assert titles.count("AI suggestions paused") == 1

    def test_unreadable_credentials_use_no_key(self, make_planner):
        credentials = MagicMock()
        credentials.get_key.side_effect = RuntimeError("MongoDB not available")
        source = StubSource()
        planner = make_planner(source=source, credentials=credentials)

        result = asyncio.run(planner.generate_weekly_plan(OWNER))

        assert result.status == RunState.COMPLETED
        assert len(result.outfits) == 7
        assert source.api_keys and all(key is None for key in source.api_keys)
        assert get_metrics()["credential_failures"] == 1


# ==================== CACHING ====================

class TestSuggestionCaching:

    def test_gemini_results_are_cached(self, make_planner):
        source = StubSource()
        planner = make_planner(source=source)

        asyncio.run(planner.generate_weekly_plan(OWNER))
        first_calls = len(source.calls)
        asyncio.run(planner.generate_weekly_plan(OWNER))

        # Three items: at most three distinct lookups ever reach the source
        assert first_calls <= 3
        assert len(source.calls) == first_calls
        assert get_metrics()["cache_hits"] > 0

    def test_mock_results_are_not_cached(self, make_planner):
        source = StubSource(source="mock", reason="no_credential")
        planner = make_planner(source=source)

        asyncio.run(planner.generate_weekly_plan(OWNER))

        assert len(source.calls) == 7

    def test_reset_cache_forces_fresh_lookups(self, make_planner):
        source = StubSource()
        planner = make_planner(source=source)
        asyncio.run(planner.generate_weekly_plan(OWNER))
        calls = len(source.calls)

        notice = planner.reset_suggestion_cache(OWNER)
        asyncio.run(planner.generate_weekly_plan(OWNER))

        assert notice.title == "Suggestion cache cleared"
        assert len(source.calls) > calls

    def test_real_source_mock_path(self, make_planner, clock):
        source = SuggestionSource(llm_enabled=False, rng=random.Random(3))
        result = asyncio.run(make_planner(source=source).generate_weekly_plan(OWNER))

        assert result.status == RunState.COMPLETED
        assert all(o.source == "mock" for o in result.outcomes)


# ==================== DAY REGENERATION ====================

class TestRegenerateDay:

    def test_only_target_day_changes(self, make_planner):
        planner = make_planner()
        asyncio.run(planner.generate_weekly_plan(OWNER))
        before = {o.day: o.to_dict() for o in planner.get_weekly_plan(OWNER).outfits()}

        result = asyncio.run(planner.regenerate_day(OWNER, "wednesday"))

        after = {o.day: o.to_dict() for o in planner.get_weekly_plan(OWNER).outfits()}
        assert result.outfits[0].day == "wednesday"
        assert after["wednesday"]["outfit_id"] != before["wednesday"]["outfit_id"]
        for day in DAYS_OF_WEEK:
            if day != "wednesday":
                assert after[day] == before[day]

    def test_regenerate_persists_single_day(self, make_planner):
        outfits = MemoryOutfitStore()
        planner = make_planner(outfits=outfits)
        asyncio.run(planner.generate_weekly_plan(OWNER))

        result = asyncio.run(planner.regenerate_day(OWNER, "Friday"))

        assert outfits.get_outfit(OWNER, "friday").outfit_id == result.outfits[0].outfit_id
        assert len(outfits.list_outfits(OWNER)) == 7

    def test_regenerate_without_plan_creates_day(self, make_planner):
        planner = make_planner()

        asyncio.run(planner.regenerate_day(OWNER, "monday"))

        assert planner.get_weekly_plan(OWNER).days() == ["monday"]

    def test_invalid_day(self, make_planner):
        with pytest.raises(InvalidDayError) as exc:
            asyncio.run(make_planner().regenerate_day(OWNER, "funday"))
        assert exc.value.status_code == 400

    def test_regenerate_rejected_while_generating(self, make_planner):
        planner = make_planner()

        async def both():
            return await asyncio.gather(
                planner.generate_weekly_plan(OWNER),
                planner.regenerate_day(OWNER, "monday"),
                return_exceptions=True,
            )

        weekly, day = asyncio.run(both())
        assert weekly.status == RunState.COMPLETED
        assert isinstance(day, GenerationInProgressError)

    def test_regenerate_persistence_failure(self, make_planner):
        outfits = MemoryOutfitStore()
        planner = make_planner(outfits=outfits)
        asyncio.run(planner.generate_weekly_plan(OWNER))
        before = planner.get_outfit_for_day(OWNER, "tuesday").outfit_id

        with patch.object(outfits, "replace_day", side_effect=RuntimeError("write failed")):
            with pytest.raises(PersistenceError):
                asyncio.run(planner.regenerate_day(OWNER, "tuesday"))

        assert planner.get_outfit_for_day(OWNER, "tuesday").outfit_id == before

    def test_regenerate_with_unreadable_credentials(self, make_planner):
        credentials = MagicMock()
        credentials.get_key.side_effect = RuntimeError("MongoDB not available")
        source = StubSource()
        planner = make_planner(source=source, credentials=credentials)

        result = asyncio.run(planner.regenerate_day(OWNER, "tuesday"))

        assert result.status == RunState.COMPLETED
        assert source.api_keys == [None]
        assert planner.get_run_state(OWNER) == RunState.COMPLETED


# ==================== READS ====================

class TestReads:

    def test_plan_loaded_from_store(self, make_planner):
        outfits = MemoryOutfitStore()
        asyncio.run(make_planner(outfits=outfits).generate_weekly_plan(OWNER))

        fresh = make_planner(outfits=outfits)
        assert fresh.get_weekly_plan(OWNER).is_complete()

    def test_reads_see_changes_saved_by_another_planner(self, make_planner):
        outfits = MemoryOutfitStore()
        first = make_planner(outfits=outfits)
        second = make_planner(outfits=outfits)
        asyncio.run(first.generate_weekly_plan(OWNER))
        assert second.get_weekly_plan(OWNER).is_complete()

        result = asyncio.run(second.regenerate_day(OWNER, "thursday"))

        seen = first.get_outfit_for_day(OWNER, "thursday")
        assert seen.outfit_id == result.outfits[0].outfit_id
        assert len(first.get_weekly_plan(OWNER)) == 7

    def test_current_day_outfit(self, make_planner):
        planner = make_planner()
        asyncio.run(planner.generate_weekly_plan(OWNER))

        outfit = planner.get_current_day_outfit(OWNER, today=date(2026, 10, 21))
        assert outfit.day == "wednesday"

    def test_missing_day_is_none(self, make_planner):
        assert make_planner().get_outfit_for_day(OWNER, "sunday") is None

    def test_read_failure_raises_persistence_error(self, make_planner):
        outfits = MagicMock()
        outfits.list_outfits.side_effect = RuntimeError("db down")
        with pytest.raises(PersistenceError):
            make_planner(outfits=outfits).get_weekly_plan(OWNER)

    def test_idle_state_by_default(self, make_planner):
        assert make_planner().get_run_state(OWNER) == RunState.IDLE
