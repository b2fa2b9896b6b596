import configparser
import os
import tempfile
import textwrap
import unittest
from pathlib import Path
from unittest.mock import patch

from services.providers import build_client
from vultrctl_core import DEFAULT_ENDPOINT, AppConfig, resolve_config, save_config_to_ini


_CLEAN_ENV = {"VULTR_API_KEY": "", "VULTR_ENDPOINT": ""}


class AppConfigIniTests(unittest.TestCase):
    def test_from_sources_reads_ini_values(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir, "config.ini")
            config_path.write_text(
                textwrap.dedent(
                    """
                    [vultrctl]
                    endpoint = https://api.example/v1

                    [vultrctl.secrets]
                    api_key = ini-secret
                    """
                ).strip()
                + "\n",
                encoding="utf-8",
            )

            with patch.dict(os.environ, _CLEAN_ENV, clear=False):
                config = AppConfig.from_sources(ini_path=config_path)

            self.assertEqual("ini-secret", config.api_key)
            self.assertEqual("https://api.example/v1", config.endpoint)
            self.assertEqual("https://api.example/v1", config.base_url)

    def test_env_variables_override_ini_values(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir, "config.ini")
            config_path.write_text(
                textwrap.dedent(
                    """
                    [vultrctl.secrets]
                    api_key = ini-key
                    """
                ).strip()
                + "\n",
                encoding="utf-8",
            )

            with patch.dict(
                os.environ,
                {"VULTR_API_KEY": "env-key", "VULTR_ENDPOINT": ""},
                clear=False,
            ):
                config = AppConfig.from_sources(ini_path=config_path)

            self.assertEqual("env-key", config.api_key)
            self.assertIsNone(config.endpoint)
            self.assertEqual(DEFAULT_ENDPOINT, config.base_url)

    def test_invalid_endpoint_in_environment(self) -> None:
        with patch.dict(os.environ, {"VULTR_ENDPOINT": "ftp://example"}, clear=False):
            with self.assertRaises(RuntimeError):
                AppConfig.from_env()

    def test_non_interactive_resolution_skips_prompts(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            with patch.dict(os.environ, _CLEAN_ENV, clear=False):
                config = resolve_config(interactive=False, config_path=Path(tmpdir, "missing.ini"))

        self.assertIsNone(config.api_key)

    def test_save_config_to_ini_writes_sections(self) -> None:
        config = AppConfig(api_key="secret-key", endpoint="https://example")

        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir, "nested", "config.ini")
            save_config_to_ini(config, config_path)

            parser = configparser.ConfigParser()
            parser.read(config_path, encoding="utf-8")

            self.assertEqual("https://example", parser.get("vultrctl", "endpoint"))
            self.assertEqual("secret-key", parser.get("vultrctl.secrets", "api_key"))

            if os.name == "posix":
                mode = os.stat(config_path).st_mode & 0o777
                self.assertEqual(0o600, mode)


class BuildClientTests(unittest.TestCase):
    def test_requires_api_key(self) -> None:
        with self.assertRaises(ValueError):
            build_client(AppConfig(api_key=None))

    def test_uses_configured_endpoint(self) -> None:
        client = build_client(AppConfig(api_key="key", endpoint="https://api.example/v1/"))

        self.assertEqual("https://api.example/v1", client.base_url)
        self.assertEqual("key", client.api_key)


if __name__ == "__main__":  # pragma: no cover - test hook
    unittest.main()
