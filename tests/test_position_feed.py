import unittest
from unittest.mock import MagicMock

from PySide6.QtPositioning import QGeoPositionInfoSource

from core.errors import SensorError
from core.models import Coordinate, PositionSample
from core.settings import FeedSettings
from sensors.position_feed import PositionFeed


def _sample(ts, lat=35.0, lon=139.0):
    return PositionSample(Coordinate(lat, lon), timestamp=ts)


class TestPositionFeed(unittest.TestCase):

    def setUp(self):
        self.source = MagicMock()
        self.factory = MagicMock(return_value=self.source)
        self.now = 10_000
        self.feed = PositionFeed(FeedSettings(), source_factory=self.factory, clock=lambda: self.now)
        self.on_sample = MagicMock()
        self.on_error = MagicMock()

    def test_start_configures_source(self):
        self.feed.start(self.on_sample, self.on_error)
        self.source.setPreferredPositioningMethods.assert_called_once_with(
            QGeoPositionInfoSource.PositioningMethod.SatellitePositioningMethods)
        self.source.startUpdates.assert_called_once()
        self.source.requestUpdate.assert_called_once_with(20000)
        self.assertTrue(self.feed.is_running)

    def test_low_accuracy_uses_all_methods(self):
        feed = PositionFeed(FeedSettings(high_accuracy=False, timeout_ms=5000),
                            source_factory=self.factory, clock=lambda: self.now)
        feed.start(self.on_sample, self.on_error)
        self.source.setPreferredPositioningMethods.assert_called_once_with(
            QGeoPositionInfoSource.PositioningMethod.AllPositioningMethods)
        self.source.requestUpdate.assert_called_once_with(5000)

    def test_source_shared_between_subscribers(self):
        first = self.feed.start(self.on_sample, self.on_error)
        second = self.feed.start(MagicMock(), MagicMock())
        self.factory.assert_called_once()
        self.feed.stop(first)
        self.source.stopUpdates.assert_not_called()
        self.feed.stop(second)
        self.source.stopUpdates.assert_called_once()

    def test_stop_is_idempotent(self):
        handle = self.feed.start(self.on_sample, self.on_error)
        self.feed.stop(handle)
        self.feed.stop(handle)
        self.feed.stop(12345)
        self.source.stopUpdates.assert_called_once()
        self.assertFalse(self.feed.is_running)

    def test_samples_are_time_ordered(self):
        self.feed.start(self.on_sample, self.on_error)
        self.assertTrue(self.feed.deliver(_sample(9_000)))
        self.assertFalse(self.feed.deliver(_sample(8_500)))
        self.assertFalse(self.feed.deliver(_sample(9_000)))
        self.assertTrue(self.feed.deliver(_sample(9_500)))
        delivered = [c.args[0].timestamp for c in self.on_sample.call_args_list]
        self.assertEqual(delivered, [9_000, 9_500])
        self.assertEqual(self.feed.last_sample.timestamp, 9_500)

    def test_stale_samples_are_discarded(self):
        self.feed.start(self.on_sample, self.on_error)
        self.assertFalse(self.feed.deliver(_sample(self.now - 2_001)))
        self.assertTrue(self.feed.deliver(_sample(self.now - 2_000)))
        self.on_sample.assert_called_once()

    def test_sample_without_timestamp_gets_clock_time(self):
        self.feed.start(self.on_sample, self.on_error)
        self.feed.deliver(PositionSample(Coordinate(1.0, 2.0)))
        self.assertEqual(self.on_sample.call_args.args[0].timestamp, self.now)

    def test_errors_do_not_stop_the_feed(self):
        self.feed.start(self.on_sample, self.on_error)
        self.feed._on_error_occurred(QGeoPositionInfoSource.Error.UpdateTimeoutError)
        error = self.on_error.call_args.args[0]
        self.assertIsInstance(error, SensorError)
        self.assertEqual(error.kind, SensorError.TIMEOUT)
        self.assertTrue(self.feed.is_running)
        self.assertTrue(self.feed.deliver(_sample(9_999)))

    def test_error_kinds(self):
        self.feed.start(self.on_sample, self.on_error)
        self.feed._on_error_occurred(QGeoPositionInfoSource.Error.AccessError)
        self.feed._on_error_occurred(QGeoPositionInfoSource.Error.ClosedError)
        self.feed._on_error_occurred(QGeoPositionInfoSource.Error.NoError)
        kinds = [c.args[0].kind for c in self.on_error.call_args_list]
        self.assertEqual(kinds, [SensorError.DENIED, SensorError.UNAVAILABLE])

    def test_missing_source_reports_unavailable(self):
        feed = PositionFeed(source_factory=MagicMock(return_value=None))
        self.assertIsNone(feed.start(self.on_sample, self.on_error))
        self.assertEqual(self.on_error.call_args.args[0].kind, SensorError.UNAVAILABLE)
        self.assertFalse(feed.is_running)
        feed.stop(None)

    def test_start_retries_once_a_source_appears(self):
        self.factory.side_effect = [None, self.source]
        self.assertIsNone(self.feed.start(self.on_sample, self.on_error))
        handle = self.feed.start(self.on_sample, self.on_error)
        self.assertIsNotNone(handle)
        self.assertEqual(self.factory.call_count, 2)
        self.assertTrue(self.feed.is_running)
        self.source.startUpdates.assert_called_once()
        self.feed.stop(handle)
        self.source.stopUpdates.assert_called_once()

    def test_restart_resets_ordering(self):
        handle = self.feed.start(self.on_sample, self.on_error)
        self.feed.deliver(_sample(9_900))
        self.feed.stop(handle)
        self.feed.start(self.on_sample, self.on_error)
        self.assertTrue(self.feed.deliver(_sample(9_000)))


if __name__ == '__main__':
    unittest.main()
