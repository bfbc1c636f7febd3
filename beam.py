import copy
import logging
from typing import Any, List, Optional, Sequence

import numpy as np

from config import UNSET
from errors import ConfigurationError
from state import IncrementalState

logger = logging.getLogger(__name__)


class Trace:
  """diagnostic record of the steps that produced a hypothesis."""

  def __init__(self, steps: Optional[List[Any]] = None):
    self.steps: List[Any] = steps if steps is not None else []

  def add_step(self, record: Any) -> None:
    self.steps.append(record)

  def __len__(self) -> int:
    return len(self.steps)


class BeamHypothesis:
  """
  one hypothesis of a beam: an owned generator state plus the score and
  beam back-pointers the search driver needs to rank, prune and backtrack.

  the per-token provenance arrays are sized to the external sentence and
  filled by the driver; the transition system never touches them.
  """

  def __init__(
    self,
    state: IncrementalState,
    num_tokens: Optional[int] = None,
    sentence: Optional[Sequence] = None,
    trace: Optional[Trace] = None,
  ):
    if sentence is not None:
      if num_tokens is not None and num_tokens != len(sentence):
        raise ConfigurationError(
          f"num_tokens={num_tokens} does not match sentence of {len(sentence)} tokens"
        )
      num_tokens = len(sentence)
    if num_tokens is None:
      num_tokens = 0
    if num_tokens < 0:
      raise ConfigurationError(f"negative token count: {num_tokens}")

    self.state = state
    self.score = 0.0
    self.current_beam_index = -1
    self.parent_beam_index = 0
    self.step_for_token = np.full(num_tokens, UNSET, dtype=np.int32)
    self.parent_for_token = np.full(num_tokens, UNSET, dtype=np.int32)
    self.parent_step_for_token = np.full(num_tokens, UNSET, dtype=np.int32)
    self.trace = trace

  def init_from_parent(self, parent: "BeamHypothesis") -> None:
    """attaches this hypothesis to a parent from the previous beam."""
    self.score = parent.get_score()
    self.parent_beam_index = parent.get_beam_index()

  def clone(self) -> "BeamHypothesis":
    new_hyp = BeamHypothesis.__new__(BeamHypothesis)
    new_hyp.state = self.state.clone()
    new_hyp.score = self.score
    new_hyp.current_beam_index = self.current_beam_index
    new_hyp.parent_beam_index = self.parent_beam_index
    new_hyp.step_for_token = self.step_for_token.copy()
    new_hyp.parent_for_token = self.parent_for_token.copy()
    new_hyp.parent_step_for_token = self.parent_step_for_token.copy()
    new_hyp.trace = copy.deepcopy(self.trace) if self.trace is not None else None
    return new_hyp

  def num_tokens(self) -> int:
    return len(self.step_for_token)

  def record_token(
    self, token: int, step: int, parent_index: int, parent_step: int
  ) -> bool:
    """stores provenance for a token; tokens past the sentence are ignored."""
    if token < 0 or token >= len(self.step_for_token):
      return False
    self.step_for_token[token] = step
    self.parent_for_token[token] = parent_index
    self.parent_step_for_token[token] = parent_step
    return True

  def is_final(self, system) -> bool:
    return system.is_final_state(self.state)

  def get_beam_index(self) -> int:
    return self.current_beam_index

  def set_beam_index(self, index: int) -> None:
    self.current_beam_index = index

  def get_parent_beam_index(self) -> int:
    return self.parent_beam_index

  def get_score(self) -> float:
    return self.score

  def set_score(self, score: float) -> None:
    self.score = score

  def __repr__(self) -> str:
    return (
      f"BeamHypothesis(slot={self.current_beam_index}, "
      f"parent={self.parent_beam_index}, score={self.score:.4f}, "
      f"state={self.state.to_string()})"
    )
