"""YAML configuration file loading."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path.home() / ".rpcval"
DEFAULT_CONFIG_PATH = DEFAULT_CONFIG_DIR / "config.yaml"
DEFAULT_OUTPUT_FILENAME = "rpcHosts.json"

# Well-known mainnet token account queried by every probe.
DEFAULT_TEST_TOKEN_ACCOUNT = "H5Wuy51jEAV9mrDFUVbNsrSMcBckgHCqmc1r45e7ztVo"


def _default_output_path() -> str:
    return str(Path.cwd() / DEFAULT_OUTPUT_FILENAME)


@dataclass
class ValidatorConfig:
    """Top-level configuration for the rpcval tool.

    Every component receives this object at construction; there is no
    module-level mutable state.

    Attributes:
        solana_rpc_url: Cluster URL handed to ``solana gossip --url``.
        output_path: Where the validated host list is written.
        test_token_account: Token account whose balance each probe requests.
        connection_timeout_ms: Hard per-probe deadline in milliseconds.
        max_buffer_size: Byte cap on the gossip command's stdout and stderr.
        max_concurrent_tests: Probes per batch (peak in-flight probes).
        solana_binary: Path (or bare name for $PATH lookup) of the Solana CLI.
        commitment: Commitment level sent with every probe request.
    """

    solana_rpc_url: str = "https://api.mainnet-beta.solana.com"
    output_path: str = field(default_factory=_default_output_path)
    test_token_account: str = DEFAULT_TEST_TOKEN_ACCOUNT
    connection_timeout_ms: int = 2000
    max_buffer_size: int = 10 * 1024 * 1024
    max_concurrent_tests: int = 25
    solana_binary: str = "solana"
    commitment: str = "confirmed"


# Keys in the YAML file that map to ValidatorConfig fields.
_YAML_KEY_TO_FIELD: dict[str, str] = {
    "solana_rpc_url": "solana_rpc_url",
    "output_path": "output_path",
    "test_token_account": "test_token_account",
    "connection_timeout_ms": "connection_timeout_ms",
    "max_buffer_size": "max_buffer_size",
    "max_concurrent_tests": "max_concurrent_tests",
    "solana_binary": "solana_binary",
    "commitment": "commitment",
}

# Fields that must be positive integers.
_POSITIVE_INT_FIELDS = (
    "connection_timeout_ms",
    "max_buffer_size",
    "max_concurrent_tests",
)


def load_config(path: Path | str | None = None) -> ValidatorConfig:
    """Load configuration from a YAML file.

    Args:
        path: Explicit path to a YAML config file.  If ``None``, the
            default location (``~/.rpcval/config.yaml``) is tried.  If the
            default file doesn't exist, a ``ValidatorConfig`` with all
            defaults is returned silently.

    Returns:
        A populated ``ValidatorConfig`` instance.

    Raises:
        FileNotFoundError: If an explicit *path* was given but doesn't exist.
        ConfigError: If the file contains invalid YAML, has an unexpected
            top-level structure, or a numeric limit is not a positive integer.
    """
    resolved = _resolve_path(path)

    if resolved is None:
        logger.debug("No config file found; using defaults")
        return ValidatorConfig()

    logger.debug("Loading config from %s", resolved)
    text = resolved.read_text(encoding="utf-8")

    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {resolved}: {exc}") from exc

    if raw is None:
        # Empty file, treat as all-defaults.
        return ValidatorConfig()

    if not isinstance(raw, dict):
        raise ConfigError(
            f"Expected a YAML mapping at the top level in {resolved}, "
            f"got {type(raw).__name__}"
        )

    return _build_config(raw, source=resolved)


class ConfigError(Exception):
    """Raised when a configuration file is malformed or unreadable."""


# ------------------------------------------------------------------
# Internal helpers
# ------------------------------------------------------------------


def _resolve_path(path: Path | str | None) -> Path | None:
    """Return a concrete ``Path`` to read, or ``None`` if nothing to read.

    Raises:
        FileNotFoundError: If the caller supplied an explicit path that
            doesn't exist on disk.
    """
    if path is not None:
        p = Path(path).expanduser()
        if not p.is_file():
            raise FileNotFoundError(f"Config file not found: {p}")
        return p

    default = DEFAULT_CONFIG_PATH.expanduser()
    if default.is_file():
        return default
    return None


def _build_config(raw: dict, source: Path) -> ValidatorConfig:
    """Map raw YAML dict to a ``ValidatorConfig``, ignoring unknown keys."""
    kwargs: dict[str, object] = {}

    for yaml_key, field_name in _YAML_KEY_TO_FIELD.items():
        if yaml_key in raw:
            kwargs[field_name] = raw[yaml_key]

    for field_name in _POSITIVE_INT_FIELDS:
        if field_name in kwargs:
            value = kwargs[field_name]
            # bool is an int subclass; "true" is never a valid limit.
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ConfigError(
                    f"{field_name} in {source} must be a positive integer, "
                    f"got {value!r}"
                )

    if "output_path" in kwargs:
        kwargs["output_path"] = str(Path(str(kwargs["output_path"])).expanduser())

    unknown = set(raw) - set(_YAML_KEY_TO_FIELD)
    if unknown:
        logger.warning(
            "Ignoring unknown config keys in %s: %s",
            source,
            ", ".join(sorted(unknown)),
        )

    return ValidatorConfig(**kwargs)
