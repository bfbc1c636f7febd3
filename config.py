import os
import logging
from typing import NamedTuple

from dotenv import load_dotenv

from errors import ConfigurationError
from schema import GeneratorVocab

logger = logging.getLogger(__name__)

# sentinel positions shared by the state, the features and the driver
ROOT = -1
NOT_FOUND = -2
UNSET = -1

ROOT_LABEL = "ROOT"
DEFAULT_ROOT_LABEL = -1  # root label id when "ROOT" is missing from the label map

DEFAULT_BEAM_SIZE = 8
MAX_GENERATION_STEPS = 400  # conservative upper bound for a single generation


class GeneratorConfig(NamedTuple):
  """search and bookkeeping options for a generation run."""

  beam_size: int = DEFAULT_BEAM_SIZE
  max_steps: int = MAX_GENERATION_STEPS
  keep_history: bool = False
  rewrite_root_labels: bool = True
  trace: bool = False
  n_history_features: int = 4

  # resolved from the label map
  root_label: int = DEFAULT_ROOT_LABEL


def _env_flag(name: str, default: bool) -> bool:
  value = os.getenv(name)
  if value is None:
    return default
  return value.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
  value = os.getenv(name)
  if value is None or not value.strip():
    return default
  try:
    return int(value)
  except ValueError as e:
    raise ConfigurationError(f"{name} must be an integer, got {value!r}") from e


def create_config(vocab: GeneratorVocab, **overrides) -> GeneratorConfig:
  """factory function to resolve the root label from the vocab, with validation."""
  unknown = set(overrides) - set(GeneratorConfig._fields)
  if unknown:
    raise ConfigurationError(f"unknown config fields: {sorted(unknown)}")

  config = GeneratorConfig(**overrides)

  if config.beam_size < 1:
    raise ConfigurationError(f"beam_size must be positive, got {config.beam_size}")
  if config.max_steps < 1:
    raise ConfigurationError(f"max_steps must be positive, got {config.max_steps}")
  if config.n_history_features < 0:
    raise ConfigurationError(
      f"n_history_features must be non-negative, got {config.n_history_features}"
    )

  root_label = vocab.label_map.lookup_index(ROOT_LABEL, DEFAULT_ROOT_LABEL)
  if root_label == DEFAULT_ROOT_LABEL:
    logger.debug("label map has no %s entry; using %d", ROOT_LABEL, root_label)

  return config._replace(root_label=root_label)


def load_config(vocab: GeneratorVocab) -> GeneratorConfig:
  """reads overrides from the environment (and a .env file, if present)."""
  load_dotenv()
  return create_config(
    vocab,
    beam_size=_env_int("BEAM_SIZE", DEFAULT_BEAM_SIZE),
    max_steps=_env_int("MAX_STEPS", MAX_GENERATION_STEPS),
    keep_history=_env_flag("KEEP_HISTORY", False),
    trace=_env_flag("TRACE", False),
  )
