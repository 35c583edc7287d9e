"""Scoring configuration: the aggregate config object and its YAML loader.

A configuration file mirrors the dataclasses section by section; any
section or key may be omitted to keep its default::

    strict: false
    base_lens: hardened          # or: credibility
    mitigations:
      velocity:
        max_in_window: 10
        window_ms: 60000
      sybilrank:
        enabled: true
    credibility:
      unpaid_weight: 0.1
    stake:
      slash_cooldown_ms: 2592000000
    tee:
      dampening: 0.3

Unknown sections or keys raise ``ConfigError`` rather than being ignored,
so a typo cannot silently fall back to a default.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from skilltrust.core.mitigations.config import MitigationConfig
from skilltrust.core.scoring.credibility import CredibilityConfig
from skilltrust.core.scoring.stake import StakeConfig
from skilltrust.core.scoring.tee import TEEConfig
from skilltrust.exceptions import ConfigError

logger = logging.getLogger(__name__)

BASE_LENSES: tuple[str, ...] = ("hardened", "credibility")


@dataclass(frozen=True)
class ScoringConfig:
    """Everything the scoring engine needs besides the snapshot.

    Attributes:
        mitigations: Mitigation toggles and constants.
        credibility: Credibility multiplier ranges.
        stake: Stake multiplier curve.
        tee: Attestation weights.
        strict: Raise on out-of-range feedback values instead of clamping.
        base_lens: Summary the stake and TEE lenses are applied to.
    """

    mitigations: MitigationConfig = field(default_factory=MitigationConfig)
    credibility: CredibilityConfig = field(default_factory=CredibilityConfig)
    stake: StakeConfig = field(default_factory=StakeConfig)
    tee: TEEConfig = field(default_factory=TEEConfig)
    strict: bool = False
    base_lens: str = "hardened"

    def validate(self) -> None:
        """Validate every section.

        Raises:
            ConfigError: If any value is out of range.
        """
        self.mitigations.validate()
        self.credibility.validate()
        self.stake.validate()
        self.tee.validate()
        if self.base_lens not in BASE_LENSES:
            raise ConfigError(
                f"base_lens must be one of {list(BASE_LENSES)}, got {self.base_lens!r}"
            )


def _check_flag(name: str, value: Any) -> None:
    if not isinstance(value, bool):
        raise ConfigError(f"{name} must be true or false, got {value!r}")


def _build(cls: type, data: Any, where: str) -> Any:
    """Instantiate a flat config dataclass from a mapping of overrides."""
    if data is None:
        return cls()
    if not isinstance(data, dict):
        raise ConfigError(f"{where} must be a mapping, got {type(data).__name__}")
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown key(s) in {where}: {unknown}")
    for f in fields(cls):
        if isinstance(f.default, bool) and f.name in data:
            _check_flag(f"{where}.{f.name}", data[f.name])
    try:
        return cls(**data)
    except TypeError as exc:
        raise ConfigError(f"Invalid {where}: {exc}") from exc


def _build_mitigations(data: Any) -> MitigationConfig:
    if data is None:
        return MitigationConfig()
    if not isinstance(data, dict):
        raise ConfigError("mitigations must be a mapping")
    sections = {f.name: f for f in fields(MitigationConfig)}
    unknown = sorted(set(data) - set(sections))
    if unknown:
        raise ConfigError(f"Unknown mitigation section(s): {unknown}")
    defaults = MitigationConfig()
    return MitigationConfig(**{
        name: _build(type(getattr(defaults, name)), data.get(name), f"mitigations.{name}")
        for name in sections
    })


def config_from_dict(data: dict[str, Any] | None) -> ScoringConfig:
    """Build and validate a ``ScoringConfig`` from parsed YAML/JSON.

    Raises:
        ConfigError: On unknown keys, wrong types or invalid values.
    """
    data = data or {}
    if not isinstance(data, dict):
        raise ConfigError("Configuration root must be a mapping")
    known = {f.name for f in fields(ScoringConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown configuration section(s): {unknown}")
    if "strict" in data:
        _check_flag("strict", data["strict"])

    config = ScoringConfig(
        mitigations=_build_mitigations(data.get("mitigations")),
        credibility=_build(CredibilityConfig, data.get("credibility"), "credibility"),
        stake=_build(StakeConfig, data.get("stake"), "stake"),
        tee=_build(TEEConfig, data.get("tee"), "tee"),
        strict=data.get("strict", False),
        base_lens=data.get("base_lens", "hardened"),
    )
    config.validate()
    return config


def load_config(path: Path) -> ScoringConfig:
    """Read a YAML configuration file.

    Args:
        path: Path to the YAML file.

    Returns:
        The validated configuration.

    Raises:
        ConfigError: If the file cannot be read, is not valid YAML, or
            holds invalid settings.
    """
    try:
        raw = Path(path).read_text(encoding="utf-8")
        data = yaml.safe_load(raw)
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Cannot read config {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in config {path}: {exc}") from exc

    try:
        config = config_from_dict(data)
    except ConfigError as exc:
        raise ConfigError(f"{path}: {exc}") from exc
    logger.debug("Loaded scoring configuration from %s", path)
    return config
