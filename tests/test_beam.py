import numpy as np
import pytest

from beam import BeamHypothesis, Trace
from config import ROOT, UNSET
from errors import ConfigurationError


def test_new_hypothesis_is_unattached(state):
  hyp = BeamHypothesis(state, num_tokens=3)
  assert hyp.get_score() == 0.0
  assert hyp.get_beam_index() == -1
  assert hyp.get_parent_beam_index() == 0
  assert hyp.num_tokens() == 3
  for arr in (hyp.step_for_token, hyp.parent_for_token, hyp.parent_step_for_token):
    assert arr.tolist() == [UNSET] * 3
  assert hyp.trace is None


def test_provenance_sized_from_sentence(state):
  hyp = BeamHypothesis(state, sentence=["the", "cat"])
  assert hyp.num_tokens() == 2


def test_sizing_mismatch_raises_at_construction(state):
  with pytest.raises(ConfigurationError):
    BeamHypothesis(state, num_tokens=3, sentence=["the", "cat"])
  with pytest.raises(ConfigurationError):
    BeamHypothesis(state, num_tokens=-1)


def test_init_from_parent(system):
  parent = BeamHypothesis(system.new_state())
  parent.set_score(1.5)
  parent.set_beam_index(4)

  child = BeamHypothesis(system.new_state())
  child.init_from_parent(parent)
  assert child.get_score() == 1.5
  assert child.get_parent_beam_index() == 4
  assert child.get_beam_index() == -1


def test_clone_copies_bookkeeping(state):
  hyp = BeamHypothesis(state, num_tokens=2, trace=Trace([(0, "ADD(A, X)")]))
  hyp.set_score(-2.25)
  hyp.set_beam_index(3)
  hyp.parent_beam_index = 1
  hyp.record_token(0, 5, 1, UNSET)

  clone = hyp.clone()
  assert clone.get_score() == -2.25
  assert clone.get_beam_index() == 3
  assert clone.get_parent_beam_index() == 1
  assert clone.step_for_token.tolist() == [5, UNSET]
  assert clone.parent_for_token.tolist() == [1, UNSET]
  assert clone.trace.steps == [(0, "ADD(A, X)")]
  assert clone.state is not hyp.state


def test_clone_is_independent(system, state):
  hyp = BeamHypothesis(state, num_tokens=2, trace=Trace())
  clone = hyp.clone()

  clone.record_token(1, 7, 0, 0)
  clone.trace.add_step((0, "COLLAPSE"))
  system.perform_action(1, clone.state)
  clone.set_score(9.0)

  assert hyp.step_for_token.tolist() == [UNSET, UNSET]
  assert len(hyp.trace) == 0
  assert hyp.state.stack == [ROOT]
  assert hyp.get_score() == 0.0


def test_clone_without_trace(state):
  assert BeamHypothesis(state).clone().trace is None


def test_record_token_ignores_tokens_past_the_sentence(state):
  hyp = BeamHypothesis(state, num_tokens=1)
  assert hyp.record_token(0, 2, 0, UNSET)
  assert not hyp.record_token(1, 3, 0, UNSET)
  assert hyp.step_for_token.dtype == np.int32
  assert hyp.step_for_token.tolist() == [2]


def test_is_final_queries_the_state(system, state):
  hyp = BeamHypothesis(state)
  assert hyp.is_final(system)
  system.perform_action(1, hyp.state)
  assert not hyp.is_final(system)
