import logging
from typing import List, Sequence

from beam import BeamHypothesis
from errors import InvalidArgumentError
from schema import OutputToken

logger = logging.getLogger(__name__)


def reconstruct_path(
  generations: Sequence[Sequence[BeamHypothesis]], slot: int
) -> List[BeamHypothesis]:
  """follows parent beam indices from `slot` in the last beam back to the first."""
  if not generations:
    return []
  if slot < 0 or slot >= len(generations[-1]):
    raise InvalidArgumentError(
      f"slot {slot} outside final beam of size {len(generations[-1])}"
    )

  path = [generations[-1][slot]]
  for beam in reversed(generations[:-1]):
    parent = path[-1].get_parent_beam_index()
    if parent < 0 or parent >= len(beam):
      raise InvalidArgumentError(
        f"parent index {parent} outside beam of size {len(beam)}"
      )
    path.append(beam[parent])
  path.reverse()
  return path


def format_output(tokens: Sequence[OutputToken]) -> str:
  """one tab-separated line per token: id, word, tag, head, label (1-based ids)."""
  lines = []
  for i, tok in enumerate(tokens):
    head = 0 if tok.head is None else tok.head + 1
    lines.append(f"{i + 1}\t{tok.word}\t{tok.tag}\t{head}\t{tok.label}")
  return "\n".join(lines)
