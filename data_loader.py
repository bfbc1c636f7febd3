import os
import logging
from typing import Dict, Iterable, List

from dotenv import load_dotenv

from errors import ConfigurationError
from schema import GeneratorVocab

load_dotenv()

logger = logging.getLogger(__name__)


class TermFrequencyMap:
  """
  maps terms to contiguous ids in file order, and back.

  read-only after construction; a single instance is shared by all
  hypotheses of a generation run.
  """

  def __init__(self, terms: Iterable[str], frequencies: Iterable[int] = None):
    self._terms: List[str] = list(terms)
    self._frequencies: List[int] = (
      list(frequencies) if frequencies is not None else [0] * len(self._terms)
    )
    if len(self._frequencies) != len(self._terms):
      raise ConfigurationError(
        f"{len(self._terms)} terms but {len(self._frequencies)} frequencies"
      )
    self._index: Dict[str, int] = {}
    for i, term in enumerate(self._terms):
      if term in self._index:
        raise ConfigurationError(f"duplicate term in map: {term!r}")
      self._index[term] = i

  @classmethod
  def from_terms(cls, terms: Iterable[str]) -> "TermFrequencyMap":
    return cls(terms)

  @classmethod
  def from_file(cls, path: str) -> "TermFrequencyMap":
    """
    term map format:
    - first non-empty line is the number of terms
    - each following line is "<term> <frequency>" (tab or space separated)
    """
    terms: List[str] = []
    frequencies: List[int] = []

    with open(path, "r", encoding="utf-8") as f:
      header = f.readline().strip()
      try:
        expected = int(header)
      except ValueError as e:
        raise ConfigurationError(f"{path}: bad term count {header!r}") from e

      for lineno, line in enumerate(f, start=2):
        line = line.rstrip("\n")
        if not line.strip():
          continue
        sp = line.rsplit(None, 1)  # terms may contain spaces, frequency may not
        if len(sp) != 2:
          raise ConfigurationError(f"{path}:{lineno}: expected '<term> <freq>'")
        term, freq = sp
        try:
          frequencies.append(int(freq))
        except ValueError as e:
          raise ConfigurationError(f"{path}:{lineno}: bad frequency {freq!r}") from e
        terms.append(term)

    if len(terms) != expected:
      raise ConfigurationError(
        f"{path}: header says {expected} terms, found {len(terms)}"
      )

    logger.info("loaded %d terms from %s", len(terms), path)
    return cls(terms, frequencies)

  def size(self) -> int:
    return len(self._terms)

  def lookup_index(self, term: str, default: int) -> int:
    return self._index.get(term, default)

  def get_term(self, index: int) -> str:
    if index < 0 or index >= len(self._terms):
      raise IndexError(f"term index {index} outside [0, {len(self._terms)})")
    return self._terms[index]

  def frequency(self, index: int) -> int:
    return self._frequencies[index]

  def __len__(self) -> int:
    return len(self._terms)

  def __contains__(self, term) -> bool:
    return term in self._index


def load_term_map(file_name: str) -> TermFrequencyMap:
  """loads a term map from DATA_PATH (absolute paths are used as-is)."""
  data_path = os.getenv("DATA_PATH", "./data")
  return TermFrequencyMap.from_file(os.path.join(data_path, file_name))


def build_vocab(
  label_file: str = "label-map", tag_file: str = "tag-map", word_file: str = "word-map"
) -> GeneratorVocab:
  """loads the three maps; every map must be non-empty to size the action space."""
  vocab = GeneratorVocab(
    label_map=load_term_map(label_file),
    tag_map=load_term_map(tag_file),
    word_map=load_term_map(word_file),
  )
  for name, term_map in zip(GeneratorVocab._fields, vocab):
    if term_map.size() == 0:
      raise ConfigurationError(f"{name} is empty")
  return vocab


def vocab_from_terms(
  labels: Iterable[str], tags: Iterable[str], words: Iterable[str]
) -> GeneratorVocab:
  """in-memory vocab, mainly for tests and demos."""
  return GeneratorVocab(
    label_map=TermFrequencyMap.from_terms(labels),
    tag_map=TermFrequencyMap.from_terms(tags),
    word_map=TermFrequencyMap.from_terms(words),
  )
