"""midi_timeline.config

Decoder configuration, optionally loaded from a YAML file.

Keys understood in the YAML mapping:
  - strict (bool): raise on unknown meta subtypes and status bytes.
    Default True.
  - default_tempo (int): microseconds per quarter note used until the first
    tempo event. Default 500000 (120 BPM).
"""
import logging
import os
from dataclasses import dataclass
from typing import Optional

import yaml

from .exceptions import ConfigurationError
from .models import DEFAULT_TEMPO
from .validators import validate_config_path, validate_tempo, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = os.path.join(os.path.dirname(os.path.dirname(__file__)), 'config', 'decoder_config.yaml')


@dataclass(frozen=True)
class DecoderConfig:
    strict: bool = True
    default_tempo: int = DEFAULT_TEMPO


def load_decoder_config(config_path: Optional[str] = None) -> DecoderConfig:
    """Load decoder settings from a YAML file.

    Args:
        config_path: Path to the YAML file. If None, config/decoder_config.yaml
            is used when it exists.

    Returns:
        A DecoderConfig. Missing keys keep their defaults; a missing file
        yields the default configuration.

    Raises:
        ConfigurationError: If the file cannot be parsed or holds bad values.
    """
    if config_path is None:
        if not os.path.exists(DEFAULT_CONFIG_PATH):
            return DecoderConfig()
        config_path = DEFAULT_CONFIG_PATH
    else:
        try:
            validate_config_path(config_path)
        except ValidationError as e:
            raise ConfigurationError(str(e)) from e
        if not os.path.exists(config_path):
            logger.debug("config file %s not found, using defaults", config_path)
            return DecoderConfig()

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            doc = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read {config_path}: {e}") from e

    if doc is None:
        return DecoderConfig()
    if not isinstance(doc, dict):
        raise ConfigurationError(f"{config_path} must contain a mapping, got {type(doc).__name__}")

    strict = doc.get('strict', True)
    if not isinstance(strict, bool):
        raise ConfigurationError(f"'strict' must be true or false, got {strict!r}")

    default_tempo = doc.get('default_tempo', DEFAULT_TEMPO)
    try:
        validate_tempo(default_tempo)
    except ValidationError as e:
        raise ConfigurationError(f"'default_tempo': {e}") from e

    unknown = set(doc) - {'strict', 'default_tempo'}
    if unknown:
        logger.warning("ignoring unknown config keys in %s: %s", config_path, ', '.join(sorted(map(str, unknown))))

    return DecoderConfig(strict=strict, default_tempo=default_tempo)
