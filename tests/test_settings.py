import unittest

from core.settings import AppSettings, FeedSettings


class TestAppSettings(unittest.TestCase):

    def setUp(self):
        self.settings = AppSettings()

    def test_defaults(self):
        self.assertEqual(self.settings.feed, FeedSettings(True, 20000, 2000))
        self.assertEqual(self.settings.zoom, 15)

    def test_with_values(self):
        updated = self.settings.with_values({
            "high_accuracy": False,
            "timeout_ms": " 5000 ",
            "max_sample_age_ms": "0",
            "export_dir": "/tmp/out",
        })
        self.assertEqual(updated.feed, FeedSettings(False, 5000, 0))
        self.assertEqual(updated.export_dir, "/tmp/out")
        # El original no cambia
        self.assertEqual(self.settings.feed.timeout_ms, 20000)

    def test_empty_text_keeps_current_value(self):
        updated = self.settings.with_values({"high_accuracy": True, "timeout_ms": "", "max_sample_age_ms": ""})
        self.assertEqual(updated.feed, self.settings.feed)

    def test_invalid_number(self):
        with self.assertRaisesRegex(ValueError, "Tiempo de espera: 'abc'"):
            self.settings.with_values({"timeout_ms": "abc"})

    def test_negative_number(self):
        with self.assertRaisesRegex(ValueError, "Antigüedad máxima"):
            self.settings.with_values({"max_sample_age_ms": "-1"})


if __name__ == '__main__':
    unittest.main()
