"""Tests for DerivedCell values."""

import gc
import weakref

import pytest

from cellflow import CellKind, DerivedWriteError, derived, get_root, source


class TestDerived:
    def test_eager_eval(self):
        call_count = 0
        a = source(5)

        def fn():
            nonlocal call_count
            call_count += 1
            return a.get() * 2

        d = derived(fn)
        assert call_count == 1  # evaluated at construction
        assert d.value == 10
        assert d.value == 10
        assert call_count == 1  # reads never re-evaluate

    def test_recomputes_on_change(self):
        a = source(2)
        d = derived(lambda: a.value * 2)
        assert d.value == 4
        a.value = 3
        assert d.value == 6

    def test_kind(self):
        d = derived(lambda: 1)
        assert d.kind is CellKind.DERIVED

    def test_once_per_update(self):
        call_count = 0
        a = source(1)

        def fn():
            nonlocal call_count
            call_count += 1
            return a.value + a.value + a.value

        d = derived(fn)
        assert len(a._dependents) == 1  # three reads, one edge
        a.value = 2
        assert call_count == 2
        assert d.value == 6

    def test_chained_derived(self):
        a = source(3)
        doubled = derived(lambda: a.value * 2)
        quadrupled = derived(lambda: doubled.value * 2)
        assert quadrupled.value == 12
        a.value = 5
        assert quadrupled.value == 20

    def test_multiple_dependencies(self):
        first = source("Ada")
        last = source("Lovelace")
        full = derived(lambda: f"{first.value} {last.value}")
        last.value = "Byron"
        assert full.value == "Ada Byron"
        first.value = "Anne"
        assert full.value == "Anne Byron"

    def test_dynamic_dependencies(self):
        flag = source(True)
        a = source(1)
        b = source(2)
        d = derived(lambda: a.value if flag.value else b.value)
        assert d.value == 1
        flag.value = False
        assert d.value == 2
        b.value = 20  # edge discovered during recomputation
        assert d.value == 20

    def test_always_propagates(self):
        """A recomputation that yields the same value still notifies."""
        a = source(1)
        positive = derived(lambda: a.value > 0)
        log = []
        positive.listen(log.append)
        a.value = 2
        assert log == [True]

    def test_peek_does_not_track(self):
        a = source(1)
        b = source(10)
        d = derived(lambda: a.value + b.peek())
        b.value = 20
        assert d.value == 11
        a.value = 2
        assert d.value == 22

    def test_decorator(self):
        price = source(10)
        quantity = source(2)

        @derived
        def total():
            return price.value * quantity.value

        assert total.value == 20
        quantity.value = 3
        assert total.value == 30
        assert "total" in repr(total)


class TestDerivedWrites:
    def test_value_assignment_raises(self):
        d = derived(lambda: 1)
        with pytest.raises(DerivedWriteError):
            d.value = 2
        assert d.value == 1

    def test_set_raises(self):
        d = derived(lambda: 1)
        with pytest.raises(AttributeError):
            d.set(2)


class TestDerivedLifetime:
    def test_collected_dependent_is_pruned(self):
        a = source(1)
        d = derived(lambda: a.value * 2)
        ref = weakref.ref(d)
        assert len(a._dependents) == 1

        del d
        gc.collect()
        assert ref() is None

        a.value = 2
        assert a._dependents == []

    def test_dependency_does_not_keep_derived_alive(self):
        a = source(1)
        log = []
        d = derived(lambda: log.append(a.value))
        assert log == [1]
        del d
        gc.collect()
        a.value = 2
        assert log == [1]


class TestDerivedErrors:
    def test_stack_unwinds_when_construction_raises(self):
        def boom():
            raise ValueError("bad computation")

        with pytest.raises(ValueError):
            derived(boom)
        assert get_root().derivation_stack == []

    def test_stack_unwinds_when_recomputation_raises(self):
        a = source(1)

        def fn():
            if a.value > 1:
                raise ValueError("too big")
            return a.value

        d = derived(fn)
        with pytest.raises(ValueError):
            a.value = 2
        assert get_root().derivation_stack == []
        assert d.peek() == 1

        a.value = 0
        assert d.value == 0
