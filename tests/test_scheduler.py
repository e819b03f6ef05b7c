"""Tests for realnet.scheduler -- cadence, replacement and stop semantics."""

import asyncio
import unittest

from realnet.aggregator import NetworkSnapshot
from realnet.scheduler import PollingScheduler


class VirtualClock:
    """Monotonic clock whose ``sleep`` advances time and yields once."""

    def __init__(self):
        self.now = 0.0

    async def sleep(self, seconds):
        self.now += seconds
        await asyncio.sleep(0)


async def wait_until(predicate, spins=2000):
    for _ in range(spins):
        if predicate():
            return True
        await asyncio.sleep(0)
    return False


class TestPollingScheduler(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.clock = VirtualClock()
        self.emitted = []
        self.cycle_seconds = 1.0
        self.cycles = 0
        self.failing_cycles = set()
        self.in_flight = 0
        self.max_in_flight = 0

    def make(self, sink=None):
        async def measure():
            self.cycles += 1
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
            self.clock.now += self.cycle_seconds
            await asyncio.sleep(0)
            self.in_flight -= 1
            if self.cycles in self.failing_cycles:
                raise LookupError("unknown encoding: bogus-cs")
            return NetworkSnapshot(ping_ms=len(self.emitted))

        def record(snapshot):
            self.emitted.append(self.clock.now)

        return PollingScheduler(measure, sink or record, sleep=self.clock.sleep)

    async def test_first_cycle_immediate_then_interval_after_each_emission(self):
        scheduler = self.make()
        scheduler.start(5)
        self.assertTrue(await wait_until(lambda: len(self.emitted) >= 4))
        await scheduler.aclose()
        self.assertEqual(self.emitted[:4], [1.0, 7.0, 13.0, 19.0])

    async def test_overrunning_cycle_still_waits_full_interval(self):
        self.cycle_seconds = 7.0
        scheduler = self.make()
        scheduler.start(5)
        self.assertTrue(await wait_until(lambda: len(self.emitted) >= 3))
        await scheduler.aclose()
        self.assertEqual(self.emitted[:3], [7.0, 19.0, 31.0])
        self.assertEqual(self.max_in_flight, 1)

    async def test_start_twice_replaces_loop(self):
        scheduler = self.make()
        scheduler.start(5)
        scheduler.start(5)
        self.assertTrue(await wait_until(lambda: len(self.emitted) >= 3))
        await scheduler.aclose()
        self.assertEqual(self.emitted[:3], [1.0, 7.0, 13.0])
        self.assertEqual(self.max_in_flight, 1)

    async def test_restart_with_new_interval(self):
        scheduler = self.make()
        scheduler.start(5)
        self.assertTrue(await wait_until(lambda: len(self.emitted) >= 1))
        scheduler.start(2)
        self.assertEqual(scheduler.interval, 2)
        self.assertTrue(scheduler.running)
        await scheduler.aclose()

    async def test_no_emission_after_stop(self):
        scheduler = self.make()
        scheduler.start(5)
        self.assertTrue(await wait_until(lambda: len(self.emitted) >= 2))
        scheduler.stop()
        seen = len(self.emitted)
        for _ in range(100):
            await asyncio.sleep(0)
        self.assertEqual(len(self.emitted), seen)
        self.assertFalse(scheduler.running)

    async def test_stop_from_another_thread(self):
        scheduler = self.make()
        scheduler.start(5)
        self.assertTrue(await wait_until(lambda: len(self.emitted) >= 1))
        await asyncio.to_thread(scheduler.stop)
        seen = len(self.emitted)
        for _ in range(100):
            await asyncio.sleep(0)
        self.assertEqual(len(self.emitted), seen)

    async def test_stop_is_idempotent(self):
        scheduler = self.make()
        scheduler.start(5)
        scheduler.stop()
        scheduler.stop()
        self.assertFalse(scheduler.running)

    async def test_stale_generation_is_refused(self):
        scheduler = self.make()
        scheduler._generation = 2
        self.assertFalse(scheduler._emit(NetworkSnapshot(), 1))
        self.assertEqual(self.emitted, [])

    async def test_sink_error_does_not_stop_polling(self):
        calls = []

        def flaky(snapshot):
            calls.append(snapshot)
            if len(calls) == 1:
                raise RuntimeError("host went away")

        scheduler = self.make(sink=flaky)
        with self.assertLogs("realnet.scheduler", level="ERROR"):
            scheduler.start(5)
            self.assertTrue(await wait_until(lambda: len(calls) >= 3))
        await scheduler.aclose()

    async def test_failed_measurement_skips_cycle_and_keeps_polling(self):
        self.failing_cycles = {2}
        scheduler = self.make()
        with self.assertLogs("realnet.scheduler", level="ERROR") as logs:
            scheduler.start(5)
            self.assertTrue(await wait_until(lambda: len(self.emitted) >= 2))
        self.assertTrue(scheduler.running)
        await scheduler.aclose()
        # cycle 2 ends at t=7 without a snapshot; cycle 3 follows one interval later
        self.assertEqual(self.emitted[:2], [1.0, 13.0])
        self.assertIs(logs.records[0].exc_info[0], LookupError)

    async def test_non_positive_interval(self):
        scheduler = self.make()
        with self.assertRaises(ValueError):
            scheduler.start(0)
        self.assertFalse(scheduler.running)

    async def test_aclose_waits_for_task(self):
        scheduler = self.make()
        scheduler.start(5)
        task = scheduler._task
        await scheduler.aclose()
        self.assertTrue(task.done())
        self.assertFalse(scheduler.running)


class TestPollingSchedulerWithoutLoop(unittest.TestCase):
    def test_stop_before_start(self):
        async def measure():
            return NetworkSnapshot()

        scheduler = PollingScheduler(measure, lambda s: None)
        scheduler.stop()
        self.assertFalse(scheduler.running)


if __name__ == "__main__":
    unittest.main()
