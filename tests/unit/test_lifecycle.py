"""
Unit tests for scripto/lifecycle.py

Coverage plan
─────────────
on_error()      → wholesale cache reset
on_connected()  → bulk re-warm of cold names via the scheduler, opt-out flag
warm()          → partial failure, observer, invalidation / re-registration races
rewarm()        → skips names already cached
"""

from unittest.mock import MagicMock

import pytest


SCRIPTS = {"a": "return 1", "b": "return 2", "c": "return 3"}


@pytest.fixture
def parts():
    from scripto.cache import HashCache
    from scripto.loader import RemoteLoader
    from scripto.registry.registry import ScriptRegistry
    from scripto.store.memory_store import MemoryScriptStore

    registry = ScriptRegistry()
    registry.register(SCRIPTS)
    cache = HashCache()
    store = MemoryScriptStore()
    loader = RemoteLoader(store)
    return registry, cache, loader, store


def _hooks(parts, **kwargs):
    from scripto.lifecycle import LifecycleHooks
    registry, cache, loader, _ = parts
    return LifecycleHooks(registry, cache, loader, **kwargs)


class TestOnError:

    def test_clears_cache_regardless_of_contents(self, parts):
        _, cache, _, _ = parts
        cache.update({"a": "1", "b": "2"})
        _hooks(parts).on_error(ConnectionError("reset by peer"))
        assert len(cache) == 0

    def test_store_disconnect_signal_clears_cache(self, parts):
        _, cache, _, store = parts
        hooks = _hooks(parts)
        store.subscribe(hooks)
        cache.update({"a": "1"})
        store.disconnect()
        assert cache.snapshot() == {}


class TestOnConnected:

    def test_rewarms_every_registered_name(self, parts):
        from scripto.hasher import digest
        _, cache, _, _ = parts
        _hooks(parts).on_connected()
        assert cache.snapshot() == {name: digest(body) for name, body in SCRIPTS.items()}

    def test_uses_scheduler(self, parts):
        _, cache, _, _ = parts
        schedule = MagicMock()
        hooks = _hooks(parts, schedule=schedule)
        hooks.on_connected()
        schedule.assert_called_once_with(hooks.rewarm)
        assert len(cache) == 0

    def test_disabled_reload_does_nothing(self, parts):
        _, cache, _, store = parts
        _hooks(parts, reload_on_connect=False).on_connected()
        assert len(cache) == 0
        assert store.calls == []

    def test_reconnect_after_failover(self, parts):
        _, cache, _, store = parts
        hooks = _hooks(parts)
        store.subscribe(hooks)
        hooks.warm()
        store.disconnect()
        assert len(cache) == 0
        store.reconnect(flush=True)
        assert set(cache.snapshot()) == set(SCRIPTS)
        assert len(store.scripts) == len(SCRIPTS)


class TestWarm:

    def test_failure_is_reported_not_raised(self, parts):
        from scripto.exceptions import StoreError
        _, cache, _, store = parts
        observer = MagicMock()
        err = StoreError("OOM")
        store.fail_next("upload", err)
        result = _hooks(parts, on_load_error=observer).warm()
        assert not result.ok
        observer.assert_called_once_with("a", err)
        assert len(cache) == 0

    def test_partial_failure_keeps_earlier_digests(self, parts):
        from scripto.exceptions import StoreError
        _, cache, loader, store = parts
        real_upload = store.upload
        uploads = {"n": 0}

        def third_upload_fails(body):
            uploads["n"] += 1
            if uploads["n"] == 3:
                raise StoreError("OOM")
            return real_upload(body)

        store.upload = third_upload_fails
        result = _hooks(parts).warm()
        assert result.failed_name == "c"
        assert set(cache.snapshot()) == {"a", "b"}

    def test_failing_observer_is_contained(self, parts):
        from scripto.exceptions import StoreError
        _, _, _, store = parts
        store.fail_next("upload", StoreError("OOM"))
        observer = MagicMock(side_effect=RuntimeError("observer bug"))
        result = _hooks(parts, on_load_error=observer).warm()
        assert not result.ok

    def test_failure_logged_as_warning(self, parts, caplog):
        from scripto.exceptions import StoreError
        _, _, _, store = parts
        store.fail_next("upload", StoreError("OOM"))
        _hooks(parts).warm()
        assert any(r.levelname == "WARNING" for r in caplog.records)

    def test_subset_warm(self, parts):
        _, cache, _, _ = parts
        _hooks(parts).warm({"b": "return 2"})
        assert set(cache.snapshot()) == {"b"}

    def test_invalidation_during_pass_drops_results(self, parts):
        _, cache, loader, _ = parts
        real = loader.ensure_all_loaded

        def load_then_drop(scripts):
            result = real(scripts)
            cache.clear()
            return result

        loader.ensure_all_loaded = load_then_drop
        result = _hooks(parts).warm()
        assert result.ok
        assert len(cache) == 0

    def test_reregistered_body_not_cached_with_old_digest(self, parts):
        registry, cache, _, _ = parts
        stale = {"a": "return 1"}
        registry.register_one("a", "return 100")
        _hooks(parts).warm(stale)
        assert cache.get("a") is None

    def test_unrelated_reregistration_during_pass_keeps_digests(self, parts):
        from scripto.hasher import digest
        registry, cache, _, store = parts
        real_check = store.check_exists

        def check_then_register_other(sha):
            registry.register_one("other", "return 42")
            cache.discard(["other"])
            return real_check(sha)

        store.check_exists = check_then_register_other
        result = _hooks(parts).warm({"a": "return 1", "b": "return 2"})
        assert result.ok
        assert cache.get("a") == digest("return 1")
        assert cache.get("b") == digest("return 2")

    def test_reregistered_after_update_is_evicted(self, parts):
        registry, cache, _, _ = parts
        real_update = cache.update

        def update_then_register(digests, generation=None):
            stored = real_update(digests, generation)
            registry.register_one("a", "return 100")
            return stored

        cache.update = update_then_register
        _hooks(parts).warm({"a": "return 1", "b": "return 2"})
        assert cache.get("a") is None
        assert cache.get("b") is not None


class TestRewarm:

    def test_skips_cached_names(self, parts):
        from scripto.hasher import digest
        _, cache, _, store = parts
        cache.put("a", digest("return 1"))
        hooks = _hooks(parts)
        result = hooks.rewarm()
        assert set(result.digests) == {"b", "c"}
        assert [arg for op, arg in store.calls if op == "check_exists"] == [
            digest("return 2"), digest("return 3"),
        ]

    def test_nothing_cold_makes_no_store_calls(self, parts):
        _, _, _, store = parts
        hooks = _hooks(parts)
        hooks.warm()
        store.calls.clear()
        result = hooks.rewarm()
        assert result.ok
        assert result.digests == {}
        assert store.calls == []
