"""Unit tests for the custom function registry and the pattern cache."""

import re
import threading
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import Mock

import pytest

from rulesengine.domain.engine.registry import FunctionRegistry, PatternCache, ReadWriteLock


class TestFunctionRegistry:
    """Test registration and lookup."""

    def test_register__then_get__returns_function(self, registry):
        fn = Mock(return_value=True)

        registry.register("isEmail", fn)

        assert registry.get("isEmail") is fn
        assert "isEmail" in registry
        assert len(registry) == 1

    def test_get__unknown_name__returns_none(self, registry):
        assert registry.get("missing") is None

    def test_register__same_name__last_writer_wins(self, registry):
        first, second = Mock(), Mock()

        registry.register("check", first)
        registry.register("check", second)

        assert registry.get("check") is second
        assert registry.names() == ["check"]

    def test_register__not_callable__raises_type_error(self, registry):
        with pytest.raises(TypeError, match="must be callable"):
            registry.register("bad", "not callable")

    @pytest.mark.parametrize("name", ["", None])
    def test_register__empty_name__raises_value_error(self, registry, name):
        with pytest.raises(ValueError):
            registry.register(name, Mock())

    def test_unregister(self, registry):
        registry.register("tmp", Mock())

        assert registry.unregister("tmp") is True
        assert registry.unregister("tmp") is False
        assert registry.get("tmp") is None

    def test_registries__are_isolated(self):
        a, b = FunctionRegistry("a"), FunctionRegistry("b")

        a.register("only_in_a", Mock())

        assert b.get("only_in_a") is None

    def test_concurrent_register_and_get__is_consistent(self, registry):
        """Readers always see either no entry or a complete one."""
        names = [f"fn_{i}" for i in range(50)]

        def register(name):
            registry.register(name, lambda actual, _name=name: _name)

        def lookup(name):
            fn = registry.get(name)
            return fn is None or fn(None) == name

        with ThreadPoolExecutor(max_workers=8) as executor:
            writes = [executor.submit(register, name) for name in names]
            reads = [executor.submit(lookup, name) for name in names * 4]
            for future in writes:
                future.result()
            assert all(future.result() for future in reads)

        assert registry.names() == sorted(names)


class TestPatternCache:
    """Test memoization of compiled patterns."""

    def test_get__compiles_each_pattern_once(self):
        compiler = Mock(side_effect=re.compile)
        cache = PatternCache(compiler=compiler)

        first = cache.get(r"\d+")
        second = cache.get(r"\d+")
        cache.get(r"\w+")

        assert first is second
        assert compiler.call_count == 2
        assert len(cache) == 2

    def test_get__invalid_pattern__raises_and_is_not_cached(self):
        cache = PatternCache()

        with pytest.raises(re.error):
            cache.get("(unclosed")

        assert len(cache) == 0

    def test_clear(self):
        cache = PatternCache()
        cache.get("a")

        cache.clear()

        assert len(cache) == 0

    def test_concurrent_get__returns_single_instance(self):
        cache = PatternCache()

        with ThreadPoolExecutor(max_workers=8) as executor:
            compiled = list(executor.map(lambda _: cache.get(r"^[a-z]+$"), range(100)))

        assert len({id(pattern) for pattern in compiled}) == 1


class TestReadWriteLock:
    """Test reader/writer exclusion."""

    def test_readers__share_the_lock(self):
        lock = ReadWriteLock()
        both_inside = threading.Barrier(2, timeout=5)

        def reader():
            with lock.read():
                both_inside.wait()

        threads = [threading.Thread(target=reader) for _ in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=5)

        assert not both_inside.broken

    def test_writer__waits_for_readers(self):
        lock = ReadWriteLock()
        events = []
        reader_inside = threading.Event()
        release_reader = threading.Event()

        def reader():
            with lock.read():
                reader_inside.set()
                release_reader.wait(timeout=5)
                events.append("reader_done")

        def writer():
            reader_inside.wait(timeout=5)
            with lock.write():
                events.append("writer")

        threads = [threading.Thread(target=reader), threading.Thread(target=writer)]
        for thread in threads:
            thread.start()
        reader_inside.wait(timeout=5)
        release_reader.set()
        for thread in threads:
            thread.join(timeout=5)

        assert events == ["reader_done", "writer"]
