"""
===============================================================================
QUATROT - Batch Configuration
===============================================================================
Loads and validates the YAML file consumed by ``quatrot batch``.

Example
-------
    tolerance: 1.0e-6
    normalize_inputs: true
    quaternions:
      - [1, 2, 3, 4]
      - [0, 1, 0, 0]
    vectors:
      - [1, 2, 3]

``tolerance`` and ``quaternions`` are required. There is no default
tolerance: the person writing the file decides how strict the checks are.
===============================================================================
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Tuple, Union

import yaml

from quatrot.constants import QUATERNION_SIZE, VECTOR_SIZE
from quatrot.exceptions import ConfigError
from quatrot.tolerance import check_epsilon

logger = logging.getLogger(__name__)

DEFAULT_VECTORS = [(1.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, 0.0, 1.0)]


@dataclass
class BatchConfig:
    """Validated contents of a batch configuration file."""
    tolerance: float
    quaternions: List[Tuple[float, float, float, float]]
    vectors: List[Tuple[float, float, float]] = field(
        default_factory=lambda: list(DEFAULT_VECTORS)
    )
    normalize_inputs: bool = True


def _parse_rows(raw: Any, size: int, key: str) -> List[tuple]:
    if not isinstance(raw, list) or not raw:
        raise ConfigError(f"'{key}' must be a non-empty list")

    rows = []
    for i, row in enumerate(raw):
        if not isinstance(row, (list, tuple)) or len(row) != size:
            raise ConfigError(
                f"'{key}[{i}]' must have exactly {size} components, got {row!r}"
            )
        try:
            rows.append(tuple(float(c) for c in row))
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"'{key}[{i}]' has a non-numeric component") from exc
    return rows


def parse_config(raw: Dict[str, Any]) -> BatchConfig:
    """
    Validate an already-parsed configuration mapping.

    Raises
    ------
    ConfigError
        On any missing key or malformed value.
    """
    if not isinstance(raw, dict):
        raise ConfigError("Configuration root must be a mapping")

    if 'tolerance' not in raw:
        raise ConfigError("'tolerance' is required (there is no default)")
    if isinstance(raw['tolerance'], bool):
        raise ConfigError("Invalid 'tolerance': expected a number, got a boolean")
    try:
        tolerance = check_epsilon(raw['tolerance'])
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid 'tolerance': {exc}") from exc

    if 'quaternions' not in raw:
        raise ConfigError("'quaternions' is required")
    quaternions = _parse_rows(raw['quaternions'], QUATERNION_SIZE, 'quaternions')

    config = BatchConfig(tolerance=tolerance, quaternions=quaternions)

    if 'vectors' in raw:
        config.vectors = _parse_rows(raw['vectors'], VECTOR_SIZE, 'vectors')

    if 'normalize_inputs' in raw:
        if not isinstance(raw['normalize_inputs'], bool):
            raise ConfigError("'normalize_inputs' must be true or false")
        config.normalize_inputs = raw['normalize_inputs']

    return config


def load_config(config_path: Union[str, Path]) -> BatchConfig:
    """
    Load a batch configuration from a YAML file.

    Args:
        config_path: Path to the YAML file.

    Returns:
        Validated BatchConfig.
    """
    logger.info(f"Loading configuration from: {config_path}")
    try:
        with open(config_path, 'r') as f:
            raw = yaml.safe_load(f)
    except OSError as exc:
        raise ConfigError(f"Could not read {config_path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Could not parse {config_path}: {exc}") from exc

    config = parse_config(raw)
    logger.info(
        f"{len(config.quaternions)} quaternion(s), {len(config.vectors)} "
        f"vector(s), tolerance {config.tolerance:g}"
    )
    return config
