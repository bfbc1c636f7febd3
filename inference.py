import logging
from typing import Callable, List, NamedTuple, Optional, Sequence

import jax
import jax.numpy as jnp

from actions import ActionType
from beam import BeamHypothesis, Trace
from config import GeneratorConfig, ROOT, UNSET
from engine import GeneratorTransitionSystem
from errors import InvalidArgumentError, InvalidStateError
from state import IncrementalState

logger = logging.getLogger(__name__)

# scores one state: returns an array of length system.num_actions()
Scorer = Callable[[IncrementalState], jnp.ndarray]


class GenerationResult(NamedTuple):
  beam: List[BeamHypothesis]  # final beam, best first
  generations: List[List[BeamHypothesis]]  # every beam, initial one included


def initial_beam(
  system: GeneratorTransitionSystem,
  config: GeneratorConfig,
  num_tokens: Optional[int] = None,
  sentence: Optional[Sequence] = None,
) -> List[BeamHypothesis]:
  state = system.new_state(keep_history=config.keep_history)
  hyp = BeamHypothesis(
    state,
    num_tokens=num_tokens,
    sentence=sentence,
    trace=Trace() if config.trace else None,
  )
  hyp.set_beam_index(0)
  return [hyp]


def is_done(system: GeneratorTransitionSystem, hyp: BeamHypothesis) -> bool:
  """
  done when the hypothesis has generated something and returned to the root.
  the initial state satisfies the terminal test trivially, so it never counts.
  """
  return hyp.state.num_tokens() > 0 and hyp.is_final(system)


def _candidate_row(
  system: GeneratorTransitionSystem, hyp: BeamHypothesis, scorer: Scorer
) -> jnp.ndarray:
  """
  total scores for every action of one hypothesis, plus a trailing
  "carry over" column that is only finite for finished hypotheses.
  """
  n_actions = system.num_actions()
  if is_done(system, hyp):
    row = jnp.full((n_actions,), -jnp.inf, dtype=jnp.float32)
    return jnp.append(row, jnp.float32(hyp.get_score()))

  scores = jnp.asarray(scorer(hyp.state), dtype=jnp.float32)
  if scores.shape != (n_actions,):
    raise InvalidArgumentError(
      f"scorer returned shape {scores.shape}, expected ({n_actions},)"
    )
  mask = system.legal_mask(hyp.state, allow_closing=True)
  row = jnp.where(mask > 0, hyp.get_score() + scores, -jnp.inf)
  return jnp.append(row, -jnp.inf)


def _advance(
  system: GeneratorTransitionSystem,
  parent: BeamHypothesis,
  action: int,
  score: float,
  step: int,
) -> BeamHypothesis:
  child = parent.clone()
  child.init_from_parent(parent)

  if action is not None:
    state = child.state
    if system.codec.action_type(action) == ActionType.ADD:
      token, head = state.next, state.top()
    else:
      token = head = None
    if child.trace is not None:
      child.trace.add_step((step, system.action_as_string(action, state)))

    system.perform_action(action, state)

    if token is not None:
      parent_step = (
        int(child.step_for_token[head])
        if head != ROOT and head < child.num_tokens()
        else UNSET
      )
      child.record_token(token, step, parent.get_beam_index(), parent_step)

  child.set_score(score)
  return child


def beam_step(
  system: GeneratorTransitionSystem,
  beam: List[BeamHypothesis],
  scorer: Scorer,
  config: GeneratorConfig,
  step: int,
) -> List[BeamHypothesis]:
  """
  expands every hypothesis by its legal actions and keeps the best
  config.beam_size successors. finished hypotheses compete unchanged.
  """
  n_cols = system.num_actions() + 1
  totals = jnp.concatenate([_candidate_row(system, hyp, scorer) for hyp in beam])

  k = min(config.beam_size, int(totals.shape[0]))
  top_scores, top_indices = jax.lax.top_k(totals, k)

  new_beam: List[BeamHypothesis] = []
  for score, flat_index in zip(top_scores.tolist(), top_indices.tolist()):
    if score == float("-inf"):
      break
    b, a = divmod(int(flat_index), n_cols)
    action = None if a == n_cols - 1 else a
    child = _advance(system, beam[b], action, score, step)
    child.set_beam_index(len(new_beam))
    new_beam.append(child)

  if not new_beam:
    raise InvalidStateError(f"no legal successor at step {step}")

  logger.debug(
    "step %d: %d hypotheses, best score %.4f", step, len(new_beam), new_beam[0].score
  )
  return new_beam


def generate(
  system: GeneratorTransitionSystem,
  scorer: Scorer,
  config: GeneratorConfig,
  num_tokens: Optional[int] = None,
  sentence: Optional[Sequence] = None,
) -> GenerationResult:
  """
  runs beam search until every hypothesis is done or config.max_steps
  steps have been taken.
  """
  beam = initial_beam(system, config, num_tokens=num_tokens, sentence=sentence)
  generations = [beam]

  for step in range(config.max_steps):
    if all(is_done(system, hyp) for hyp in beam):
      break
    beam = beam_step(system, beam, scorer, config, step)
    generations.append(beam)

  n_done = sum(is_done(system, hyp) for hyp in beam)
  logger.info(
    "generation finished after %d steps: %d/%d hypotheses complete",
    len(generations) - 1,
    n_done,
    len(beam),
  )
  return GenerationResult(beam=beam, generations=generations)
