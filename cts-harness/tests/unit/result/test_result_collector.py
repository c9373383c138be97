from __future__ import annotations

import itertools

from cts_harness.result import (
    PackageContext,
    ResultCollector,
    SessionResult,
    TestId,
    TestOutcome,
    TestStatus,
)


def _clock():
    counter = itertools.count()
    return lambda: f"t{next(counter)}"


CTX = PackageContext("android.app", app_package_name="android.app.cts", digest="abc")


def test_events_become_package_results() -> None:
    collector = ResultCollector(clock=_clock())
    ok = TestId("android.app.cts.ActivityTest", "testOk")
    bad = TestId("android.app.cts.ActivityTest", "testBad")

    collector.test_run_started(CTX, 2)
    collector.test_started(CTX, ok)
    collector.test_ended(CTX, ok)
    collector.test_started(CTX, bad)
    collector.test_failed(CTX, bad, "AssertionError: nope\n\tat X.y(X.java:3)")
    collector.test_ended(CTX, bad)
    collector.test_run_ended(CTX, 10)

    package = collector.session.get_package("android.app")
    assert package is not None
    assert package.app_package_name == "android.app.cts"
    assert package.digest == "abc"

    results = package.tree.root.children["android"].children["app"].children["cts"].cases
    assert results["ActivityTest"] == [
        ("testOk", TestOutcome(TestStatus.PASS, start_time="t0", end_time="t1")),
        (
            "testBad",
            TestOutcome(
                TestStatus.FAIL,
                start_time="t2",
                end_time="t3",
                message="AssertionError: nope",
                stack_trace="AssertionError: nope\n\tat X.y(X.java:3)",
            ),
        ),
    ]


def test_failure_status_is_carried_through() -> None:
    collector = ResultCollector(clock=_clock())
    test = TestId("a.B", "testTimeout")

    collector.test_run_started(CTX, 1)
    collector.test_started(CTX, test)
    collector.test_failed(CTX, test, "timed out", TestStatus.TIMEOUT)
    collector.test_ended(CTX, test)

    assert collector.session.get_tests_with_status(TestStatus.TIMEOUT)[0].test_id == test


def test_unfinished_tests_are_recorded_as_failures_when_run_ends() -> None:
    collector = ResultCollector(clock=_clock())
    test = TestId("a.B", "testHangs")

    collector.test_run_started(CTX, 1)
    collector.test_started(CTX, test)
    collector.test_run_failed(CTX, "Instrumentation crashed")
    collector.test_run_ended(CTX, 5)

    package = collector.session.get_package("android.app")
    assert package.get_tests_with_status(TestStatus.FAIL) == [test]
    _, outcome = package.tree.root.children["a"].cases["B"][0]
    assert outcome.message == "test did not complete: Instrumentation crashed"


def test_packages_are_kept_apart() -> None:
    session = SessionResult(plan_name="CTS")
    collector = ResultCollector(session, clock=_clock())
    other = PackageContext("android.os")
    test = TestId("a.B", "t")

    for ctx in (CTX, other):
        collector.test_run_started(ctx, 1)
        collector.test_started(ctx, test)
        collector.test_ended(ctx, test)
        collector.test_run_ended(ctx, 1)

    assert [p.name for p in session.packages] == ["android.app", "android.os"]
    assert session.get_package("android.os").digest is None
    assert len(session.get_tests_with_status(TestStatus.PASS)) == 2


def test_dropped_class_name_does_not_break_collection() -> None:
    collector = ResultCollector(clock=_clock())
    collector.test_run_started(CTX, 2)
    collector.test_ended(CTX, TestId("NoDotsHere", "t"))
    collector.test_ended(CTX, TestId("a.B", "t"))

    assert [str(p.test_id) for p in collector.session.get_tests_with_status(TestStatus.PASS)] == [
        "a.B#t"
    ]
