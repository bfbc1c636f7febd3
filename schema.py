from typing import NamedTuple, Optional, Any


class GeneratorVocab(NamedTuple):
  """read-only label/tag/word maps shared by every hypothesis."""

  label_map: Any  # size(), lookup_index(term, default), get_term(index)
  tag_map: Any
  word_map: Any


class OutputToken(NamedTuple):
  """a single materialized token of a generated sentence."""

  word: str
  tag: str
  head: Optional[int]  # None when attached to the root
  label: str
