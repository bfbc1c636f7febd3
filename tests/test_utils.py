import pytest

from beam import BeamHypothesis
from errors import InvalidArgumentError
from schema import OutputToken
from utils import format_output, reconstruct_path


def make_beam(state, parents):
  beam = []
  for slot, parent in enumerate(parents):
    hyp = BeamHypothesis(state.clone())
    hyp.set_beam_index(slot)
    hyp.parent_beam_index = parent
    beam.append(hyp)
  return beam


def test_reconstruct_path(state):
  generations = [
    make_beam(state, [0]),
    make_beam(state, [0, 0]),
    make_beam(state, [1, 0]),
  ]
  path = reconstruct_path(generations, 0)
  assert path == [generations[0][0], generations[1][1], generations[2][0]]


def test_reconstruct_path_rejects_bad_slots(state):
  generations = [make_beam(state, [0]), make_beam(state, [3])]
  with pytest.raises(InvalidArgumentError):
    reconstruct_path(generations, 1)
  with pytest.raises(InvalidArgumentError):
    reconstruct_path(generations, 0)


def test_reconstruct_empty():
  assert reconstruct_path([], 0) == []


def test_format_output():
  tokens = [
    OutputToken("saw", "VB", None, "ROOT"),
    OutputToken("cats", "NN", 0, "dobj"),
  ]
  assert format_output(tokens) == "1\tsaw\tVB\t0\tROOT\n2\tcats\tNN\t1\tdobj"
