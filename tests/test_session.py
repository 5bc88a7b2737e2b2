import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from ledgerkit.constants import DEFAULT_URL
from ledgerkit.errors import ConfigError
from ledgerkit.session import SessionConfig, load_session, save_session, session_path


class SessionTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.path = Path(self._tmp.name) / "session.toml"
        env = {k: v for k, v in os.environ.items() if not k.startswith("LEDGERKIT_")}
        self._env = patch.dict(os.environ, env, clear=True)
        self._env.start()

    def tearDown(self) -> None:
        self._env.stop()
        self._tmp.cleanup()

    def test_missing_file_yields_defaults(self) -> None:
        config = load_session(self.path)
        self.assertEqual(config, SessionConfig())
        self.assertEqual(config.url, DEFAULT_URL)
        self.assertFalse(self.path.exists())

    def test_file_values(self) -> None:
        self.path.write_text(
            '[session]\nurl = "http://node:1337"\nalgorithm = "SM2"\ncolor = false\ndebug = true\nextra = 1\n'
        )
        config = load_session(self.path)
        self.assertEqual(config.url, "http://node:1337")
        self.assertEqual(config.algorithm, "sm2")
        self.assertFalse(config.color)
        self.assertTrue(config.debug)

    def test_environment_overrides_file(self) -> None:
        self.path.write_text('[session]\nurl = "http://file:1337"\n')
        with patch.dict(os.environ, {"LEDGERKIT_URL": "http://env:1337", "LEDGERKIT_ALGORITHM": "ed25519"}):
            config = load_session(self.path)
        self.assertEqual(config.url, "http://env:1337")
        self.assertEqual(config.algorithm, "ed25519")

    def test_bad_types_rejected(self) -> None:
        self.path.write_text("[session]\ncolor = \"yes\"\n")
        with self.assertRaises(ConfigError):
            load_session(self.path)

    def test_unknown_algorithm_rejected(self) -> None:
        self.path.write_text('[session]\nalgorithm = "rsa"\n')
        with self.assertRaises(ConfigError):
            load_session(self.path)

    def test_malformed_toml(self) -> None:
        self.path.write_text("[session\n")
        with self.assertRaises(ConfigError):
            load_session(self.path)

    def test_save_round_trip_skips_cached_response(self) -> None:
        config = SessionConfig(url="http://saved:1337", color=False, last_response={"a": 1})
        save_session(config, self.path)
        loaded = load_session(self.path)
        self.assertEqual(loaded.url, "http://saved:1337")
        self.assertFalse(loaded.color)
        self.assertIsNone(loaded.last_response)

    def test_session_path_from_environment(self) -> None:
        with patch.dict(os.environ, {"LEDGERKIT_SESSION": str(self.path)}):
            self.assertEqual(session_path(), self.path)

    def test_record_response(self) -> None:
        config = SessionConfig()
        config.record_response("0xabc")
        self.assertEqual(config.last_response, "0xabc")


if __name__ == "__main__":
    unittest.main()
