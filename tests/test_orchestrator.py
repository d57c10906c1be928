"""
Tests for the resolution orchestrator.
"""

import pytest

from productresolver.app import build_orchestrator
from productresolver.errors import TransientSourceError
from productresolver.orchestrator import ResolutionCallbacks, ResolutionOrchestrator
from productresolver.sources.base import SourceAdapter
from productresolver.sources.synthetic import SyntheticSource
from productresolver.storage import MemoryStore

from conftest import DEPLOYED, LOCAL, FakeResponse, FakeSession


class Recorder:
    """Collects every callback invocation in order."""

    def __init__(self):
        self.events = []

    def callbacks(self):
        return ResolutionCallbacks(
            on_resolved=lambda entity, label: self.events.append(("resolved", entity, label)),
            on_degraded=lambda reason: self.events.append(("degraded", reason)),
            on_failed=lambda reason: self.events.append(("failed", reason)),
        )

    def of(self, kind):
        return [e for e in self.events if e[0] == kind]


class ScriptedSource(SourceAdapter):
    def __init__(self, label, payload=None, error=None, fuzzy=False, log=None):
        self.label = label
        self.payload = payload
        self.error = error
        self.fuzzy = fuzzy
        self.log = log if log is not None else []

    def fetch(self, entity_id):
        self.log.append(self.label)
        if self.error:
            raise TransientSourceError(self.label, self.error)
        return self.payload


class FakeRegistry:
    def __init__(self, sources):
        self.sources = sources

    def sources_for(self, entity_id):
        return list(self.sources)


@pytest.fixture
def recorder():
    return Recorder()


class TestPriorityOrder:
    def test_third_source_wins(self, cache, recorder):
        log = []
        registry = FakeRegistry([
            ScriptedSource("first", error="timed out", log=log),
            ScriptedSource("second", payload={"data": {"_id": "other"}}, log=log),
            ScriptedSource("third", payload={"data": {"_id": "p1", "name": "Oak Table"}}, log=log),
            ScriptedSource("fourth", payload={"data": {"_id": "p1"}}, log=log),
        ])
        token = ResolutionOrchestrator(registry, cache).resolve("p1", recorder.callbacks())

        assert log == ["first", "second", "third"]
        resolved = recorder.of("resolved")
        assert len(resolved) == 1
        assert resolved[0][2] == "third"
        assert resolved[0][1].name == "Oak Table"
        assert token.source_label == "third"
        assert [a.source_label for a in token.attempts] == ["first", "second", "third"]
        assert token.attempts[0].error.endswith("timed out")
        assert "does not match" in token.attempts[1].error
        assert recorder.of("degraded") == []

    def test_unrecognized_payload_skipped(self, cache, recorder):
        registry = FakeRegistry([
            ScriptedSource("garbage", payload={"success": False, "message": "Not found"}),
            ScriptedSource("good", payload={"_id": "p1"}),
        ])
        ResolutionOrchestrator(registry, cache).resolve("p1", recorder.callbacks())
        assert recorder.of("resolved")[0][2] == "good"

    def test_fuzzy_source_accepts_prefix_mismatch(self, cache, recorder):
        registry = FakeRegistry([
            ScriptedSource("exact", payload={"_id": "680dcd62"}),
            ScriptedSource("fuzzy", payload={"_id": "680dcd62"}, fuzzy=True),
        ])
        ResolutionOrchestrator(registry, cache).resolve("680dcd6207d80949f2c7f36e", recorder.callbacks())

        entity, label = recorder.of("resolved")[0][1:]
        assert label == "fuzzy"
        assert entity.id == "680dcd6207d80949f2c7f36e"


class TestCaching:
    def test_live_win_is_cached(self, cache, recorder):
        registry = FakeRegistry([ScriptedSource("live", payload={"data": {"_id": "X", "price": 10}})])
        ResolutionOrchestrator(registry, cache).resolve("X", recorder.callbacks())

        delivered = recorder.of("resolved")[0][1]
        assert cache.get("X").entity == delivered

    def test_synthetic_is_not_cached(self, cache, recorder):
        registry = FakeRegistry([SyntheticSource()])
        ResolutionOrchestrator(registry, cache).resolve("X", recorder.callbacks())
        assert cache.get("X") is None
        assert len(recorder.of("resolved")) == 1

    def test_cache_write_happens_before_delivery(self, cache):
        seen = []
        registry = FakeRegistry([ScriptedSource("live", payload={"_id": "X"})])
        callbacks = ResolutionCallbacks(on_resolved=lambda e, label: seen.append(cache.get("X")))
        ResolutionOrchestrator(registry, cache).resolve("X", callbacks)
        assert seen[0] is not None


class TestDegradedAndFailed:
    def test_synthetic_win_signals_degraded(self, cache, recorder):
        registry = FakeRegistry([ScriptedSource("live", error="down"), SyntheticSource()])
        ResolutionOrchestrator(registry, cache).resolve("unknown-chair-42", recorder.callbacks())

        assert [e[0] for e in recorder.events] == ["resolved", "degraded"]
        assert recorder.of("resolved")[0][2] == "synthetic"

    def test_failed_when_nothing_produced(self, cache, recorder):
        registry = FakeRegistry([ScriptedSource("live", error="down")])
        token = ResolutionOrchestrator(registry, cache).resolve("p1", recorder.callbacks())

        assert recorder.of("resolved") == []
        assert len(recorder.of("failed")) == 1
        assert not token.delivered

    def test_surrounding_whitespace_is_stripped(self, cache, recorder):
        registry = FakeRegistry([ScriptedSource("live", error="down"), SyntheticSource()])
        token = ResolutionOrchestrator(registry, cache).resolve("  unknown-chair-42\n", recorder.callbacks())

        assert token.entity_id == "unknown-chair-42"
        assert recorder.of("resolved")[0][1].id == "unknown-chair-42"
        assert recorder.of("failed") == []

    def test_failing_cache_store_only_skips_the_cache(self, fast_settings, offline_session, recorder):
        class LockedStore(MemoryStore):
            def get(self, key):
                raise RuntimeError("database is locked")

        orchestrator = build_orchestrator(fast_settings, store=LockedStore(), session=offline_session)
        orchestrator.resolve("680cfe1ee4e0274a4cc9a1eb", recorder.callbacks())

        assert recorder.of("resolved")[0][2] == "static"
        assert recorder.of("failed") == []

    def test_empty_id_rejected_without_callbacks(self, cache, recorder):
        orchestrator = ResolutionOrchestrator(FakeRegistry([SyntheticSource()]), cache)
        assert orchestrator.resolve("", recorder.callbacks()) is None
        assert orchestrator.resolve(None, recorder.callbacks()) is None
        assert recorder.events == []


class TestCancellation:
    def test_newer_resolution_supersedes_in_flight_one(self, cache, recorder):
        orchestrator = None

        class InterruptingSource(SourceAdapter):
            label = "interrupting"

            def fetch(self, entity_id):
                if entity_id == "A":
                    orchestrator.resolve("B", recorder.callbacks())
                return {"_id": entity_id}

        orchestrator = ResolutionOrchestrator(FakeRegistry([InterruptingSource()]), cache)
        token_a = orchestrator.resolve("A", recorder.callbacks())

        resolved = recorder.of("resolved")
        assert [e[1].id for e in resolved] == ["B"]
        assert not token_a.delivered
        assert cache.get("A") is None

    def test_resolve_started_from_on_resolved_suppresses_stale_degraded(self, cache):
        events = []
        orchestrator = ResolutionOrchestrator(FakeRegistry([SyntheticSource()]), cache)

        def callbacks_for(entity_id, then=None):
            def on_resolved(entity, label):
                events.append(("resolved", entity.id))
                if then:
                    orchestrator.resolve(then, callbacks_for(then))

            return ResolutionCallbacks(
                on_resolved=on_resolved,
                on_degraded=lambda reason: events.append(("degraded", entity_id)),
            )

        orchestrator.resolve("A", callbacks_for("A", then="B"))

        assert events == [("resolved", "A"), ("resolved", "B"), ("degraded", "B")]

    def test_cancel_drops_delivery(self, cache, recorder):
        orchestrator = None

        class CancellingSource(SourceAdapter):
            label = "cancelling"

            def fetch(self, entity_id):
                orchestrator.cancel()
                return {"_id": entity_id}

        orchestrator = ResolutionOrchestrator(FakeRegistry([CancellingSource(), SyntheticSource()]), cache)
        token = orchestrator.resolve("A", recorder.callbacks())

        assert recorder.events == []
        assert not orchestrator.is_current(token)

    def test_sequential_resolutions_each_deliver(self, cache, recorder):
        orchestrator = ResolutionOrchestrator(FakeRegistry([SyntheticSource()]), cache)
        orchestrator.resolve("A", recorder.callbacks())
        orchestrator.resolve("B", recorder.callbacks())
        assert [e[1].id for e in recorder.of("resolved")] == ["A", "B"]


class TestEndToEnd:
    """The default pipeline wired by build_orchestrator against a fake backend."""

    def test_totality_with_backend_down(self, fast_settings, memory_store, offline_session, recorder):
        orchestrator = build_orchestrator(fast_settings, store=memory_store, session=offline_session)
        orchestrator.registry.fetcher.sleep = lambda seconds: None

        for entity_id in ["unknown-chair-42", "680dcd6207d80949f2c7f36e", "%%garbage%%", " unknown-chair-42 "]:
            recorder.events.clear()
            orchestrator.resolve(entity_id, recorder.callbacks())
            assert len(recorder.of("resolved")) == 1
            assert recorder.of("failed") == []

    def test_synthetic_fallback_is_deterministic(self, fast_settings, memory_store, offline_session, recorder):
        orchestrator = build_orchestrator(fast_settings, store=memory_store, session=offline_session)
        orchestrator.registry.fetcher.sleep = lambda seconds: None

        orchestrator.resolve("unknown-chair-42", recorder.callbacks())
        orchestrator.resolve("unknown-chair-42", recorder.callbacks())

        first, second = [e[1] for e in recorder.of("resolved")]
        assert first.name == second.name
        assert first.category.name == second.category.name == "Chairs"
        assert first.images[0] == second.images[0]
        assert [e[2] for e in recorder.of("resolved")] == ["synthetic", "synthetic"]
        assert len(recorder.of("degraded")) == 2

    def test_static_table_when_backend_down(self, fast_settings, memory_store, offline_session, recorder):
        orchestrator = build_orchestrator(fast_settings, store=memory_store, session=offline_session)
        orchestrator.registry.fetcher.sleep = lambda seconds: None

        orchestrator.resolve("680cfe0ee4e0274a4cc9a1ea", recorder.callbacks())
        entity, label = recorder.of("resolved")[0][1:]
        assert label == "static"
        assert entity.name == "Modern Dining Table"
        assert len(recorder.of("degraded")) == 1

    def test_retries_follow_policy(self, fast_settings, memory_store, offline_session, recorder):
        orchestrator = build_orchestrator(fast_settings, store=memory_store, session=offline_session)
        orchestrator.registry.fetcher.sleep = lambda seconds: None
        orchestrator.resolve("zz", recorder.callbacks())

        urls = offline_session.urls
        assert urls.count(f"{LOCAL}/api/direct-product/zz") == 3
        assert urls.count(f"{LOCAL}/api/reliable/products/zz") == 2
        assert urls.count(f"{LOCAL}/api/products/zz") == 1
        # deployed direct: 3 exploratory attempts + 1 last-resort attempt
        assert urls.count(f"{DEPLOYED}/api/direct-product/zz") == 4
        assert (f"{DEPLOYED}/api/direct-product/zz", 60.0) == offline_session.calls[-1]

    def test_live_response_then_cache_when_backend_goes_down(self, fast_settings, memory_store, sofa_payload, recorder):
        product_id = "680dcd6207d80949f2c7f36e"
        live = FakeSession({f"{LOCAL}/api/direct-product/{product_id}": FakeResponse(sofa_payload)})
        build_orchestrator(fast_settings, store=memory_store, session=live).resolve(product_id, recorder.callbacks())
        fresh = recorder.of("resolved")[0][1]
        assert recorder.of("resolved")[0][2] == "direct:local"

        recorder.events.clear()
        down = build_orchestrator(fast_settings, store=memory_store, session=FakeSession())
        down.registry.fetcher.sleep = lambda seconds: None
        down.resolve(product_id, recorder.callbacks())

        entity, label = recorder.of("resolved")[0][1:]
        assert label == "cache"
        assert entity == fresh
        assert len(recorder.of("degraded")) == 1

    def test_skip_network_serves_cache_without_requests(self, fast_settings, memory_store, sofa_payload, recorder):
        product_id = "680dcd6207d80949f2c7f36e"
        live = FakeSession({f"{LOCAL}/api/direct-product/{product_id}": FakeResponse(sofa_payload)})
        build_orchestrator(fast_settings, store=memory_store, session=live).resolve(product_id, recorder.callbacks())

        recorder.events.clear()
        fast_settings.skip_network = True
        session = FakeSession()
        build_orchestrator(fast_settings, store=memory_store, session=session).resolve(product_id, recorder.callbacks())

        assert recorder.of("resolved")[0][2] == "cache"
        assert recorder.of("degraded") == []
        assert session.calls == []

    def test_preloaded_used_once(self, fast_settings, memory_store, offline_session, recorder):
        orchestrator = build_orchestrator(
            fast_settings, store=memory_store, session=offline_session,
            preloaded={"data": {"_id": "p1", "name": "Preloaded Desk"}},
        )
        orchestrator.registry.fetcher.sleep = lambda seconds: None

        orchestrator.resolve("p1", recorder.callbacks())
        assert recorder.of("resolved")[0][2] == "preloaded"
        assert offline_session.calls == []

        orchestrator.resolve("p1", recorder.callbacks())
        assert recorder.of("resolved")[1][2] == "cache"

    def test_debug_envelope_from_debug_endpoint(self, fast_settings, memory_store, recorder):
        url = f"{DEPLOYED}/api/debug/product/p1"
        session = FakeSession({url: FakeResponse({"data": {"_id": "p1", "name": "Desk"}, "formats": {}})})
        orchestrator = build_orchestrator(fast_settings, store=memory_store, session=session)
        orchestrator.registry.fetcher.sleep = lambda seconds: None
        orchestrator.resolve("p1", recorder.callbacks())

        entity, label = recorder.of("resolved")[0][1:]
        assert label == "debug:deployed"
        assert entity.category.name == "Tables"
