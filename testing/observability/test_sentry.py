"""Tests for Sentry initialisation."""

import os
import unittest
from unittest.mock import MagicMock, patch

from src.observability.sentry import init_sentry


class TestInitSentry(unittest.TestCase):
    """Tests for init_sentry function."""

    @patch("src.observability.sentry.sentry_sdk.init")
    @patch.dict(os.environ, {}, clear=True)
    def test_skipped_without_dsn(self, mock_init: MagicMock) -> None:
        """Test that nothing is initialised when SENTRY_DSN is unset."""
        self.assertFalse(init_sentry())
        mock_init.assert_not_called()

    @patch("src.observability.sentry.sentry_sdk.init")
    @patch.dict(
        os.environ,
        {"SENTRY_DSN": "https://key@sentry.example.com/1", "APP_ENV": "prod"},
        clear=True,
    )
    def test_initialised_with_dsn(self, mock_init: MagicMock) -> None:
        """Test that the DSN, environment and sample rate are passed through."""
        self.assertTrue(init_sentry())

        kwargs = mock_init.call_args.kwargs
        self.assertEqual(kwargs["dsn"], "https://key@sentry.example.com/1")
        self.assertEqual(kwargs["environment"], "prod")
        self.assertEqual(kwargs["traces_sample_rate"], 0.0)
        self.assertFalse(kwargs["send_default_pii"])


if __name__ == "__main__":
    unittest.main()
