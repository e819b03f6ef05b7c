"""Tests for realnet.bridge -- command parsing and dispatch."""

import asyncio
import unittest

from realnet.aggregator import NetworkSnapshot
from realnet.bridge import (
    NOT_IMPLEMENTED,
    NetworkEngine,
    ReplyStatus,
    RunTest,
    StartConnectivityListening,
    StartListening,
    StopConnectivityListening,
    StopListening,
    Unknown,
    parse_command,
)
from realnet.connectivity import ManualSignalSource, NetworkSignal
from realnet.constants import (
    DEFAULT_INTERVAL,
    EVENT_CONNECTIVITY_CHANGED,
    EVENT_NETWORK_STATS,
    MAX_INTERVAL,
    MIN_INTERVAL,
)

SNAPSHOT = NetworkSnapshot(
    download_speed_mbps=80.0,
    upload_speed_mbps=16.0,
    ping_ms=25,
    jitter_ms=3,
    public_ip="203.0.113.7",
    isp_name="Telia",
)


class FakeAggregator:
    def __init__(self):
        self.calls = 0

    async def collect(self):
        self.calls += 1
        await asyncio.sleep(0)
        return SNAPSHOT


class TestParseCommand(unittest.TestCase):
    def test_start_listening_default(self):
        self.assertEqual(parse_command("startListening"), StartListening(DEFAULT_INTERVAL))
        self.assertEqual(parse_command("startListening", {}), StartListening(DEFAULT_INTERVAL))

    def test_start_listening_interval(self):
        self.assertEqual(parse_command("startListening", {"interval": 30}), StartListening(30))

    def test_interval_clamped(self):
        self.assertEqual(parse_command("startListening", {"interval": 0}).interval, MIN_INTERVAL)
        self.assertEqual(parse_command("startListening", {"interval": -5}).interval, MIN_INTERVAL)
        self.assertEqual(parse_command("startListening", {"interval": 10**9}).interval, MAX_INTERVAL)

    def test_interval_wrong_type(self):
        self.assertEqual(parse_command("startListening", {"interval": "fast"}).interval, DEFAULT_INTERVAL)
        self.assertEqual(parse_command("startListening", {"interval": True}).interval, DEFAULT_INTERVAL)

    def test_simple_commands(self):
        self.assertEqual(parse_command("stopListening"), StopListening())
        self.assertEqual(parse_command("runTest"), RunTest())
        self.assertEqual(parse_command("startConnectivityListening"), StartConnectivityListening())
        self.assertEqual(parse_command("stopConnectivityListening"), StopConnectivityListening())

    def test_unknown(self):
        self.assertEqual(parse_command("getSignalStrength"), Unknown("getSignalStrength"))
        self.assertEqual(parse_command("RUNTEST"), Unknown("RUNTEST"))


class TestNetworkEngine(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.aggregator = FakeAggregator()
        self.source = ManualSignalSource()
        self.events = []
        self.engine = NetworkEngine(
            self.aggregator,
            self.source,
            lambda event, payload: self.events.append((event, payload)),
        )

    async def asyncTearDown(self):
        await self.engine.aclose()

    async def test_run_test_returns_wire_dict(self):
        reply = await self.engine.handle("runTest")
        self.assertTrue(reply.ok)
        self.assertEqual(reply.value, SNAPSHOT.to_dict())
        self.assertEqual(self.events, [])

    async def test_start_listening_emits_stats(self):
        reply = await self.engine.handle("startListening", {"interval": 60})
        self.assertTrue(reply.ok)
        self.assertIsNone(reply.value)
        self.assertTrue(self.engine.scheduler.running)
        for _ in range(100):
            if self.events:
                break
            await asyncio.sleep(0)
        self.assertEqual(self.events[0], (EVENT_NETWORK_STATS, SNAPSHOT.to_dict()))
        self.assertEqual(self.engine.scheduler.interval, 60)

    async def test_stop_listening(self):
        await self.engine.handle("startListening")
        reply = await self.engine.handle("stopListening")
        self.assertTrue(reply.ok)
        self.assertFalse(self.engine.scheduler.running)

    async def test_stop_listening_when_idle(self):
        reply = await self.engine.handle("stopListening")
        self.assertTrue(reply.ok)

    async def test_connectivity_listening(self):
        await self.engine.handle("startConnectivityListening")
        self.source.publish(NetworkSignal.AVAILABLE)
        self.source.publish(NetworkSignal.AVAILABLE)
        self.source.publish(NetworkSignal.LOST)
        await self.engine.handle("stopConnectivityListening")
        self.source.publish(NetworkSignal.AVAILABLE)
        self.assertEqual(self.events, [
            (EVENT_CONNECTIVITY_CHANGED, True),
            (EVENT_CONNECTIVITY_CHANGED, False),
        ])

    async def test_unknown_method(self):
        with self.assertLogs("realnet.bridge", level="WARNING"):
            reply = await self.engine.handle("getSignalStrength", {"interval": 5})
        self.assertIs(reply, NOT_IMPLEMENTED)
        self.assertEqual(reply.status, ReplyStatus.NOT_IMPLEMENTED)
        self.assertFalse(reply.ok)
        self.assertFalse(self.engine.scheduler.running)
        self.assertFalse(self.engine.monitor.running)
        self.assertEqual(self.aggregator.calls, 0)

    async def test_aclose_stops_everything(self):
        await self.engine.handle("startListening")
        await self.engine.handle("startConnectivityListening")
        await self.engine.aclose()
        self.assertFalse(self.engine.scheduler.running)
        self.assertFalse(self.engine.monitor.running)
        self.assertEqual(self.source.subscriber_count, 0)


if __name__ == "__main__":
    unittest.main()
