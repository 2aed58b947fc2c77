"""Tests for rpcval.config: YAML configuration loading."""

import textwrap
from pathlib import Path

import pytest

from rpcval.config import (
    DEFAULT_TEST_TOKEN_ACCOUNT,
    ConfigError,
    ValidatorConfig,
    load_config,
)


class TestValidatorConfigDefaults:
    """ValidatorConfig should provide sensible defaults for every field."""

    def test_solana_rpc_url_default(self) -> None:
        cfg = ValidatorConfig()
        assert cfg.solana_rpc_url == "https://api.mainnet-beta.solana.com"

    def test_output_path_default_in_cwd(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)
        cfg = ValidatorConfig()
        assert cfg.output_path == str(tmp_path / "rpcHosts.json")

    def test_limits_default(self) -> None:
        cfg = ValidatorConfig()
        assert cfg.connection_timeout_ms == 2000
        assert cfg.max_buffer_size == 10 * 1024 * 1024
        assert cfg.max_concurrent_tests == 25

    def test_test_token_account_default(self) -> None:
        cfg = ValidatorConfig()
        assert cfg.test_token_account == DEFAULT_TEST_TOKEN_ACCOUNT

    def test_solana_binary_and_commitment_default(self) -> None:
        cfg = ValidatorConfig()
        assert cfg.solana_binary == "solana"
        assert cfg.commitment == "confirmed"


class TestLoadConfigExplicitPath:
    """load_config(path=...) with an explicit file path."""

    def test_full_config(self, tmp_path: Path) -> None:
        cfg_file = tmp_path / "config.yaml"
        cfg_file.write_text(
            textwrap.dedent("""\
                solana_rpc_url: https://api.testnet.solana.com
                output_path: /data/rpcHosts.json
                test_token_account: 9xQeWvG816bUx9EPjHmaT23yvVM2ZWbrrpZb9PusVFin
                connection_timeout_ms: 500
                max_buffer_size: 1048576
                max_concurrent_tests: 10
                solana_binary: /opt/solana/bin/solana
                commitment: finalized
            """),
            encoding="utf-8",
        )

        cfg = load_config(cfg_file)

        assert cfg.solana_rpc_url == "https://api.testnet.solana.com"
        assert cfg.output_path == "/data/rpcHosts.json"
        assert cfg.test_token_account == "9xQeWvG816bUx9EPjHmaT23yvVM2ZWbrrpZb9PusVFin"
        assert cfg.connection_timeout_ms == 500
        assert cfg.max_buffer_size == 1048576
        assert cfg.max_concurrent_tests == 10
        assert cfg.solana_binary == "/opt/solana/bin/solana"
        assert cfg.commitment == "finalized"

    def test_partial_config_uses_defaults(self, tmp_path: Path) -> None:
        cfg_file = tmp_path / "config.yaml"
        cfg_file.write_text("max_concurrent_tests: 5\n", encoding="utf-8")

        cfg = load_config(cfg_file)

        assert cfg.max_concurrent_tests == 5
        # Remaining fields keep their defaults.
        assert cfg.connection_timeout_ms == 2000
        assert cfg.solana_binary == "solana"

    def test_empty_file_returns_defaults(self, tmp_path: Path) -> None:
        cfg_file = tmp_path / "config.yaml"
        cfg_file.write_text("", encoding="utf-8")

        cfg = load_config(cfg_file)

        assert cfg == ValidatorConfig()

    def test_unknown_keys_are_ignored(self, tmp_path: Path) -> None:
        cfg_file = tmp_path / "config.yaml"
        cfg_file.write_text(
            textwrap.dedent("""\
                max_concurrent_tests: 7
                retries: 3
            """),
            encoding="utf-8",
        )

        cfg = load_config(cfg_file)

        assert cfg.max_concurrent_tests == 7
        assert not hasattr(cfg, "retries")

    def test_accepts_string_path(self, tmp_path: Path) -> None:
        cfg_file = tmp_path / "config.yaml"
        cfg_file.write_text("commitment: processed\n", encoding="utf-8")

        cfg = load_config(str(cfg_file))

        assert cfg.commitment == "processed"

    def test_output_path_expands_user(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("HOME", str(tmp_path))
        cfg_file = tmp_path / "config.yaml"
        cfg_file.write_text("output_path: ~/out/hosts.json\n", encoding="utf-8")

        cfg = load_config(cfg_file)

        assert cfg.output_path == str(tmp_path / "out" / "hosts.json")


class TestLoadConfigMissingFile:
    """Behavior when the config file doesn't exist."""

    def test_explicit_path_not_found_raises(self, tmp_path: Path) -> None:
        missing = tmp_path / "nonexistent.yaml"

        with pytest.raises(FileNotFoundError, match="Config file not found"):
            load_config(missing)

    def test_no_default_file_returns_defaults(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """When no path is given and the default doesn't exist, return defaults."""
        import rpcval.config as config_mod

        monkeypatch.setattr(
            config_mod, "DEFAULT_CONFIG_PATH", tmp_path / "nope" / "config.yaml"
        )

        cfg = load_config()

        assert cfg == ValidatorConfig()

    def test_default_file_is_used_when_present(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        import rpcval.config as config_mod

        default = tmp_path / "config.yaml"
        default.write_text("max_concurrent_tests: 3\n", encoding="utf-8")
        monkeypatch.setattr(config_mod, "DEFAULT_CONFIG_PATH", default)

        cfg = load_config()

        assert cfg.max_concurrent_tests == 3


class TestLoadConfigInvalid:
    """load_config should raise ConfigError on malformed input."""

    def test_invalid_yaml_raises_config_error(self, tmp_path: Path) -> None:
        cfg_file = tmp_path / "bad.yaml"
        cfg_file.write_text(":\n  - :\n    bad: [", encoding="utf-8")

        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(cfg_file)

    def test_non_mapping_top_level_raises(self, tmp_path: Path) -> None:
        cfg_file = tmp_path / "list.yaml"
        cfg_file.write_text("- one\n- two\n", encoding="utf-8")

        with pytest.raises(ConfigError, match="Expected a YAML mapping"):
            load_config(cfg_file)

    @pytest.mark.parametrize(
        "line",
        [
            "max_concurrent_tests: 0",
            "max_concurrent_tests: -5",
            "connection_timeout_ms: fast",
            "max_buffer_size: 1.5",
            "max_concurrent_tests: true",
        ],
    )
    def test_non_positive_limits_rejected(self, tmp_path: Path, line: str) -> None:
        cfg_file = tmp_path / "limits.yaml"
        cfg_file.write_text(line + "\n", encoding="utf-8")

        with pytest.raises(ConfigError, match="must be a positive integer"):
            load_config(cfg_file)
