"""
transition systems for the incremental generator.

the generator system has three kinds of actions:
  - COLLAPSE pops the top token off the stack; it keeps its place in the tree
    and the next token down becomes the attachment point.
  - ADD(label, tag) creates a new token attached to the stack top and pushes it.
  - WORD(word) assigns the word of the most recently added token.
"""

import logging
from typing import Dict, Type

import jax.numpy as jnp

from actions import Action, ActionCodec, ActionType, Add, COLLAPSE, Word, make_codec
from errors import ConfigurationError, InvalidArgumentError, InvalidTransitionError
from schema import GeneratorVocab
from state import IncrementalState

logger = logging.getLogger(__name__)


class TransitionSystem:
  """interface shared by the transition-system variants."""

  def __init__(self, vocab: GeneratorVocab):
    self.vocab = vocab

  def num_action_types(self) -> int:
    raise NotImplementedError()

  def num_actions(self) -> int:
    raise NotImplementedError()

  def init_state(self, state: IncrementalState) -> None:
    raise NotImplementedError()

  def is_allowed(self, action: int, state: IncrementalState) -> bool:
    raise NotImplementedError()

  def perform_action_without_history(
    self, action: int, state: IncrementalState
  ) -> None:
    raise NotImplementedError()

  def is_final_state(self, state: IncrementalState) -> bool:
    raise NotImplementedError()

  def is_deterministic_state(self, state: IncrementalState) -> bool:
    raise NotImplementedError()

  def action_as_string(self, action: int, state: IncrementalState) -> str:
    raise NotImplementedError()

  def new_state(self, keep_history: bool = False) -> IncrementalState:
    state = IncrementalState(self.vocab, keep_history=keep_history)
    self.init_state(state)
    return state

  def perform_action(self, action: int, state: IncrementalState) -> None:
    """applies the action and, if enabled, records it in the state history."""
    self.perform_action_without_history(action, state)
    if state.keep_history:
      state.history.append(int(action))


class GeneratorTransitionSystem(TransitionSystem):
  def __init__(self, vocab: GeneratorVocab):
    super().__init__(vocab)
    self.codec: ActionCodec = make_codec(
      vocab.label_map.size(), vocab.tag_map.size(), vocab.word_map.size()
    )

  def num_action_types(self) -> int:
    return len(ActionType)

  def num_actions(self) -> int:
    return self.codec.size()

  def collapse_action(self) -> int:
    return self.codec.encode(COLLAPSE)

  def add_action(self, label: int, tag: int) -> int:
    return self.codec.encode(Add(label, tag))

  def word_action(self, word: int) -> int:
    return self.codec.encode(Word(word))

  def decode(self, action: int) -> Action:
    return self.codec.decode(action)

  def get_default_action(self, state: IncrementalState) -> int:
    return self.collapse_action()

  def init_state(self, state: IncrementalState) -> None:
    """pushes the root on the stack before the state is used for generation."""
    state.init()

  # -- legality --

  def is_allowed_collapse(self, state: IncrementalState) -> bool:
    return not state.missing_word() and state.stack_size() > 2

  def is_closing_collapse(self, state: IncrementalState) -> bool:
    """collapse of the last token above the root, which ends the sentence."""
    return not state.missing_word() and state.stack_size() == 2

  def is_allowed_add(self, state: IncrementalState) -> bool:
    return not state.missing_word()

  def is_allowed_word(self, state: IncrementalState) -> bool:
    return state.missing_word()

  def is_allowed(self, action: int, state: IncrementalState) -> bool:
    try:
      kind = self.codec.action_type(action)
    except InvalidArgumentError:
      return False
    if kind == ActionType.COLLAPSE:
      return self.is_allowed_collapse(state)
    if kind == ActionType.ADD:
      return self.is_allowed_add(state)
    return self.is_allowed_word(state)

  def legal_mask(
    self, state: IncrementalState, allow_closing: bool = False
  ) -> jnp.ndarray:
    """
    returns a mask over the whole action space: [COLLAPSE, ADD..., WORD...]
    - COLLAPSE: legal with no missing word and more than one token above the root
      (or exactly one, when allow_closing is set)
    - ADD: legal with no missing word
    - WORD: legal while the newest token is missing its word
    """
    can_collapse = self.is_allowed_collapse(state) or (
      allow_closing and self.is_closing_collapse(state)
    )
    can_add = self.is_allowed_add(state)
    can_word = self.is_allowed_word(state)

    return jnp.concatenate(
      [
        jnp.full((1,), can_collapse, dtype=jnp.float32),
        jnp.full((self.codec.num_adds,), can_add, dtype=jnp.float32),
        jnp.full((self.codec.num_words,), can_word, dtype=jnp.float32),
      ]
    )

  def predict_action(
    self, logits: jnp.ndarray, state: IncrementalState, allow_closing: bool = False
  ) -> int:
    """
    greedy selection of the best legal action.
    uses a large negative value to mask illegal actions.
    """
    mask = self.legal_mask(state, allow_closing=allow_closing)
    masked_logits = logits + (1.0 - mask) * -1e9
    return int(jnp.argmax(masked_logits))

  # -- application --

  def perform_action_without_history(
    self, action: int, state: IncrementalState
  ) -> None:
    kind = self.codec.action_type(action)
    if kind == ActionType.COLLAPSE:
      if not (self.is_allowed_collapse(state) or self.is_closing_collapse(state)):
        raise InvalidTransitionError(
          f"COLLAPSE not allowed: stack size {state.stack_size()}, "
          f"missing word: {state.missing_word()}"
        )
      state.collapse()
    elif kind == ActionType.ADD:
      if not self.is_allowed_add(state):
        raise InvalidTransitionError("ADD not allowed while a word is missing")
      state.add(self.codec.label(action), self.codec.tag(action))
    else:
      if not self.is_allowed_word(state):
        raise InvalidTransitionError("WORD not allowed: no token is missing a word")
      state.add_word(self.codec.word(action))

    logger.debug("applied %s -> %s", self.action_as_string(action, state), state)

  # -- terminal tests --

  def is_deterministic_state(self, state: IncrementalState) -> bool:
    return state.stack_size() < 2

  def is_final_state(self, state: IncrementalState) -> bool:
    return state.stack_size() < 2

  # -- rendering and action meta data --

  def action_as_string(self, action: int, state: IncrementalState) -> str:
    kind = self.codec.action_type(action)
    if kind == ActionType.COLLAPSE:
      return "COLLAPSE"
    if kind == ActionType.ADD:
      label = state.label_as_string(self.codec.label(action))
      tag = state.tag_as_string(self.codec.tag(action))
      return f"ADD({label}, {tag})"
    return f"WORD({state.word_as_string(self.codec.word(action))})"

  def supports_action_meta_data(self) -> bool:
    return True

  def child_index(self, state: IncrementalState, action: int) -> int:
    """stack top before an ADD; -1 for actions that create no edge."""
    if self.codec.action_type(action) == ActionType.ADD:
      return state.stack_at(0)
    return -1

  def parent_index(self, state: IncrementalState, action: int) -> int:
    if self.codec.action_type(action) == ActionType.ADD:
      return state.stack_at(1)
    return -1


TRANSITION_SYSTEMS: Dict[str, Type[TransitionSystem]] = {
  "generator": GeneratorTransitionSystem,
}


def create_transition_system(name: str, vocab: GeneratorVocab) -> TransitionSystem:
  try:
    cls = TRANSITION_SYSTEMS[name]
  except KeyError:
    raise ConfigurationError(
      f"unknown transition system {name!r}; choose from {sorted(TRANSITION_SYSTEMS)}"
    ) from None
  return cls(vocab)
