"""Unit tests for map, filter and for_each."""

import asyncio

import pytest

from pushflow import Observable, UnhandledError, UsageError, flush


class TaggedObservable(Observable):
    pass


class BaseSpeciesObservable(Observable):
    @classmethod
    def species(cls):
        return Observable


def fail_on(bad):
    def transform(value):
        if value == bad:
            raise ValueError(f"bad value {value}")
        return value * 10

    return transform


@pytest.mark.unit
@pytest.mark.operators
def test_map_transforms_every_value(recorder):
    """map applies the function to each value and forwards completion"""
    Observable.of(1, 2, 3).map(lambda x: x * 2).subscribe(
        recorder.next, recorder.error, recorder.complete
    )

    flush()

    assert recorder.events == [("next", 2), ("next", 4), ("next", 6), ("complete",)]


@pytest.mark.unit
@pytest.mark.operators
def test_filter_drops_values_with_falsy_predicate(recorder):
    """filter forwards only values the predicate accepts"""
    Observable.of(1, 2, 3, 4, 0).filter(lambda x: x % 2 == 0).subscribe(
        recorder.next, recorder.error, recorder.complete
    )

    flush()

    assert recorder.events == [("next", 2), ("next", 4), ("next", 0), ("complete",)]


@pytest.mark.unit
@pytest.mark.operators
def test_map_is_lazy(manual_source):
    """Building a derived observable does not subscribe to the source"""
    Observable(manual_source).map(str).filter(bool)

    assert manual_source.starts == 0


@pytest.mark.unit
@pytest.mark.operators
def test_map_exception_is_routed_to_error_and_stops_delivery(recorder):
    """A transform failure on 2 delivers 1, then the error, and never 3"""
    Observable.of(1, 2, 3).map(fail_on(2)).subscribe(
        recorder.next, recorder.error, recorder.complete
    )

    flush()

    assert recorder.values == [10]
    assert [str(error) for error in recorder.errors] == ["bad value 2"]
    assert len(recorder.events) == 2


@pytest.mark.unit
@pytest.mark.operators
def test_map_exception_unsubscribes_the_source(manual_source, recorder):
    """The derived subscription's cleanup cancels the upstream subscription"""
    # Arrange
    subscription = Observable(manual_source).map(fail_on(2)).subscribe(
        recorder.next, recorder.error
    )

    # Act
    manual_source.push(1)
    manual_source.push(2)
    manual_source.push(3)

    # Assert
    assert recorder.values == [10]
    assert len(recorder.errors) == 1
    assert manual_source.cleanups == 1
    assert subscription.closed


@pytest.mark.unit
@pytest.mark.operators
def test_filter_predicate_exception_is_routed_to_error(recorder):
    """Predicate failures behave like map failures"""

    def predicate(value):
        if value == 2:
            raise KeyError(value)
        return True

    Observable.of(1, 2, 3).filter(predicate).subscribe(
        recorder.next, recorder.error, recorder.complete
    )
    flush()

    assert recorder.values == [1]
    assert len(recorder.errors) == 1
    assert isinstance(recorder.errors[0], KeyError)


@pytest.mark.unit
@pytest.mark.operators
def test_source_errors_and_completion_are_forwarded(manual_source, recorder):
    """Errors and completion values from the source pass through unchanged"""
    failure = RuntimeError("upstream")
    derived = Observable(manual_source).map(lambda x: x)

    derived.subscribe(recorder.next, recorder.error, recorder.complete)
    manual_source.error(failure)

    derived.subscribe(recorder.next, recorder.error, recorder.complete)
    manual_source.complete("finished")

    assert recorder.events == [("error", failure), ("complete", "finished")]


@pytest.mark.unit
@pytest.mark.operators
def test_unsubscribing_derived_cancels_source(manual_source):
    """Cancelling a derived subscription releases the upstream one"""
    subscription = Observable(manual_source).filter(bool).map(str).subscribe()

    subscription.unsubscribe()

    assert manual_source.cleanups == 1


@pytest.mark.unit
@pytest.mark.operators
@pytest.mark.parametrize("operator", ["map", "filter"])
def test_operators_reject_non_callables(operator):
    """map and filter validate their function eagerly"""
    with pytest.raises(UsageError):
        getattr(Observable.of(1), operator)(None)


@pytest.mark.unit
@pytest.mark.operators
def test_operators_preserve_subclass():
    """map and filter on a subclass produce that subclass"""
    source = TaggedObservable.of(1, 2)

    assert type(source.map(str)) is TaggedObservable
    assert type(source.filter(bool)) is TaggedObservable
    assert type(source.map(str).filter(bool)) is TaggedObservable


@pytest.mark.unit
@pytest.mark.operators
def test_operators_honor_species_override():
    """species() decides which class operators construct"""
    source = BaseSpeciesObservable.of(1)

    assert type(source.map(str)) is Observable
    assert type(source.filter(bool)) is Observable


@pytest.mark.unit
@pytest.mark.operators
def test_for_each_resolves_after_completion():
    """for_each calls fn per value and resolves with None"""
    seen = []

    async def main():
        return await Observable.of(1, 2, 3).for_each(seen.append)

    assert asyncio.run(main()) is None
    assert seen == [1, 2, 3]


@pytest.mark.unit
@pytest.mark.operators
def test_for_each_rejects_on_source_error():
    """A source error fails the future"""

    def numbers():
        yield 1
        raise ValueError("source failed")

    async def main():
        await Observable.from_(numbers()).for_each(lambda value: None)

    with pytest.raises(ValueError, match="source failed"):
        asyncio.run(main())


@pytest.mark.unit
@pytest.mark.operators
def test_for_each_wraps_non_exception_errors(manual_source):
    """Error values that are not exceptions fail the future as UnhandledError"""

    async def main():
        future = Observable(manual_source).for_each(lambda value: None)
        manual_source.error("bad")
        await future

    with pytest.raises(UnhandledError):
        asyncio.run(main())


@pytest.mark.unit
@pytest.mark.operators
def test_for_each_rejects_and_unsubscribes_when_fn_raises():
    """fn failing on 2 fails the future and stops the walk before 3"""
    seen = []

    def fn(value):
        seen.append(value)
        if value == 2:
            raise RuntimeError("fn failed")

    async def main():
        await Observable.of(1, 2, 3).for_each(fn)

    with pytest.raises(RuntimeError, match="fn failed"):
        asyncio.run(main())

    assert seen == [1, 2]


@pytest.mark.unit
@pytest.mark.operators
def test_for_each_startup_failure_fails_the_future():
    """A subscriber routine that raises fails the future instead of raising"""

    def broken(push, error, complete):
        raise ValueError("startup")

    async def main():
        future = Observable(broken).for_each(print)
        assert isinstance(future, asyncio.Future)
        await future

    with pytest.raises(ValueError, match="startup"):
        asyncio.run(main())


@pytest.mark.unit
@pytest.mark.operators
def test_cancelling_for_each_unsubscribes(manual_source):
    """Cancelling the future releases the subscription"""

    async def main():
        future = Observable(manual_source).for_each(print)
        future.cancel()
        await asyncio.sleep(0)

    asyncio.run(main())

    assert manual_source.cleanups == 1


@pytest.mark.unit
@pytest.mark.operators
def test_for_each_rejects_non_callables():
    """for_each validates fn before touching the event loop"""
    with pytest.raises(UsageError):
        Observable.of(1).for_each(42)
