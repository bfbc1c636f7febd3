from typing import List

import jax.numpy as jnp

from config import ROOT, NOT_FOUND, GeneratorConfig
from state import IncrementalState

# focus positions read off the state, in feature order
FOCUS_NAMES = (
  "s0",
  "s1",
  "s2",
  "lc_s0",
  "rc_s0",
  "lc_s1",
  "rc_s1",
  "lsib_s0",
  "rsib_s0",
  "p_s0",
)


def stack_locator(state: IncrementalState, position: int) -> int:
  return state.stack_at(position)


def head_locator(state: IncrementalState, focus: int, n: int = 1) -> int:
  if focus == NOT_FOUND:
    return NOT_FOUND
  return state.parent(focus, n)


def child_locator(state: IncrementalState, focus: int, n: int) -> int:
  """n > 0 walks leftmost children, n < 0 rightmost children."""
  if focus == NOT_FOUND:
    return NOT_FOUND
  if n < 0:
    return state.rightmost_child(focus, -n)
  return state.leftmost_child(focus, n)


def sibling_locator(state: IncrementalState, focus: int, n: int) -> int:
  """n < 0 finds left siblings, n > 0 right siblings."""
  if focus == NOT_FOUND:
    return NOT_FOUND
  if n < 0:
    return state.left_sibling(focus, -n)
  return state.right_sibling(focus, n)


def focus_positions(state: IncrementalState) -> List[int]:
  s0 = stack_locator(state, 0)
  s1 = stack_locator(state, 1)
  s2 = stack_locator(state, 2)
  return [
    s0,
    s1,
    s2,
    child_locator(state, s0, 1),
    child_locator(state, s0, -1),
    child_locator(state, s1, 1),
    child_locator(state, s1, -1),
    sibling_locator(state, s0, -1),
    sibling_locator(state, s0, 1),
    head_locator(state, s0, 1),
  ]


def _value(focus: int, attr: int, domain_size: int) -> int:
  # ROOT -> size, missing position or value -> size + 1
  if focus == ROOT:
    return domain_size
  if focus == NOT_FOUND or attr < 0:
    return domain_size + 1
  return attr


def last_action_features(state: IncrementalState, n: int) -> List[int]:
  """the n most recent actions as action + 1, 0 when there is no such action."""
  history = state.history
  return [history[-1 - i] + 1 if i < len(history) else 0 for i in range(n)]


def extract_features(state: IncrementalState, config: GeneratorConfig) -> jnp.ndarray:
  """
  extracts word, tag and label ids for each focus position, followed by the
  most recent actions. last-action features stay 0 unless the state keeps
  its history.
  """
  vocab = state.vocab
  n_words = vocab.word_map.size()
  n_tags = vocab.tag_map.size()
  n_labels = vocab.label_map.size()

  positions = focus_positions(state)

  word_features = [
    _value(p, state.get_word(p) if p != NOT_FOUND else -1, n_words) for p in positions
  ]
  tag_features = [
    _value(p, state.get_tag(p) if p != NOT_FOUND else -1, n_tags) for p in positions
  ]
  label_features = [
    _value(p, state.get_label(p) if p != NOT_FOUND else -1, n_labels)
    for p in positions
  ]
  history_features = last_action_features(state, config.n_history_features)

  return jnp.array(
    word_features + tag_features + label_features + history_features,
    dtype=jnp.int32,
  )


def num_features(config: GeneratorConfig) -> int:
  return 3 * len(FOCUS_NAMES) + config.n_history_features
