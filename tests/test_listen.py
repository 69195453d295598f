"""Tests for listener registration, ordering and removal."""

import pytest

from cellflow import AbortController, DuplicateListenerError, derived, source


class TestListen:
    def test_notifies_with_new_value(self):
        c = source("hello")
        log = []
        c.listen(log.append)
        c.value = "world"
        assert log == ["world"]

    def test_priority_order(self):
        c = source(0)
        order = []
        c.listen(lambda v: order.append("lo"), priority=0)
        c.listen(lambda v: order.append("hi"), priority=10)
        c.value = 1
        assert order == ["hi", "lo"]

    def test_ties_keep_registration_order(self):
        c = source(0)
        order = []
        c.listen(lambda v: order.append("a"))
        c.listen(lambda v: order.append("b"), priority=5)
        c.listen(lambda v: order.append("c"))
        c.listen(lambda v: order.append("d"), priority=5)
        c.listen(lambda v: order.append("e"), priority=-1)
        c.value = 1
        assert order == ["b", "d", "a", "c", "e"]

    def test_run_and_listen(self):
        c = source(0)
        log = []
        c.run_and_listen(log.append)
        assert log == [0]
        c.value = 1
        assert log == [0, 1]

    def test_on_change_assignment(self):
        c = source(0)
        log = []
        c.on_change = log.append
        c.value = 1
        assert log == [1]
        with pytest.raises(DuplicateListenerError):
            c.on_change = log.append

    def test_derived_listener(self):
        a = source(2)
        d = derived(lambda: a.value * 2)
        log = []
        d.listen(log.append)
        a.value = 5
        assert log == [10]


class TestDuplicates:
    def test_same_callback_twice(self):
        c = source(0)
        log = []
        c.listen(log.append)
        with pytest.raises(DuplicateListenerError):
            c.listen(log.append)
        c.value = 1
        assert log == [1]

    def test_same_name_twice(self):
        c = source(0)
        c.listen(lambda v: None, name="render")
        with pytest.raises(DuplicateListenerError):
            c.listen(lambda v: None, name="render")
        assert len(c._effects) == 1

    def test_same_callback_on_different_cells(self):
        a = source(0)
        b = source(0)
        log = []
        a.listen(log.append)
        b.listen(log.append)
        a.value = 1
        b.value = 2
        assert log == [1, 2]


class TestRemoval:
    def test_disposer(self):
        c = source(0)
        log = []
        stop = c.listen(log.append)
        c.value = 1
        stop()
        c.value = 2
        stop()  # idempotent
        assert log == [1]

    def test_ignore(self):
        c = source(0)
        log = []
        c.listen(log.append)
        c.ignore(log.append)
        c.ignore(log.append)  # no-op when absent
        c.value = 1
        assert log == []

    def test_stop_listening_to(self):
        c = source(0)
        log = []
        c.listen(log.append, name="logger")
        assert c.is_listening_to("logger")
        c.stop_listening_to("logger")
        assert not c.is_listening_to("logger")
        c.stop_listening_to("logger")
        c.value = 1
        assert log == []

    def test_reregister_after_removal(self):
        c = source(0)
        log = []
        c.listen(log.append, name="logger")
        c.stop_listening_to("logger")
        c.listen(log.append, name="logger")
        c.value = 1
        assert log == [1]

    def test_removal_during_update(self):
        c = source(0)
        log = []

        def first(value):
            log.append(("first", value))
            c.ignore(second)

        def second(value):
            log.append(("second", value))

        c.listen(first, priority=1)
        c.listen(second)
        c.value = 1
        assert log == [("first", 1)]


class TestOnce:
    def test_fires_once(self):
        c = source(0)
        log = []
        c.listen(log.append, once=True)
        c.value = 1
        c.value = 2
        assert log == [1]
        assert c._effects == []

    def test_once_can_reregister(self):
        c = source(0)
        log = []
        c.listen(log.append, once=True, name="once")
        c.value = 1
        assert not c.is_listening_to("once")
        c.listen(log.append, once=True, name="once")
        c.value = 2
        assert log == [1, 2]


class TestAbortSignal:
    def test_abort_removes_listener(self):
        c = source(0)
        log = []
        controller = AbortController()
        c.listen(log.append, signal=controller.signal)
        c.value = 1
        controller.abort()
        c.value = 2
        assert log == [1]
        assert controller.signal.aborted

    def test_already_aborted(self):
        c = source(0)
        log = []
        controller = AbortController()
        controller.abort("done")
        c.listen(log.append, signal=controller.signal, name="late")
        assert not c.is_listening_to("late")
        c.value = 1
        assert log == []
        assert controller.signal.reason == "done"

    def test_ignore_detaches_from_signal(self):
        c = source(0)
        controller = AbortController()
        c.listen(print, signal=controller.signal)
        assert len(controller.signal._listeners) == 1
        c.ignore(print)
        assert controller.signal._listeners == []

    def test_abort_does_not_touch_reregistered_listener(self):
        c = source(0)
        log = []
        controller = AbortController()
        c.listen(log.append, signal=controller.signal)
        c.ignore(log.append)
        c.listen(log.append)
        controller.abort()
        c.value = 1
        assert log == [1]
