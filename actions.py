"""
integer encoding of generator actions.

  COLLAPSE          <-> 0
  ADD(label, tag)   <-> 1 + label + L * tag          (1 .. L*T)
  WORD(word)        <-> 1 + L * T + word             (L*T + 1 .. L*T + W)
"""

import operator
from enum import IntEnum
from typing import NamedTuple, Union

from errors import ConfigurationError, InvalidArgumentError


class ActionType(IntEnum):
  COLLAPSE = 0
  ADD = 1
  WORD = 2


class Collapse(NamedTuple):
  pass


class Add(NamedTuple):
  label: int
  tag: int


class Word(NamedTuple):
  word: int


Action = Union[Collapse, Add, Word]

COLLAPSE = Collapse()


class ActionCodec(NamedTuple):
  """bijection between structured actions and integers, given the vocab sizes."""

  num_labels: int
  num_tags: int
  num_words: int

  @property
  def num_adds(self) -> int:
    return self.num_labels * self.num_tags

  def size(self) -> int:
    return 1 + self.num_adds + self.num_words

  def _check_code(self, code) -> int:
    try:
      code = operator.index(code)
    except TypeError as e:
      raise InvalidArgumentError(f"action code must be an integer, got {code!r}") from e
    if code < 0 or code >= self.size():
      raise InvalidArgumentError(
        f"action code {code} outside [0, {self.size()})"
      )
    return code

  def action_type(self, code) -> ActionType:
    code = self._check_code(code)
    if code == 0:
      return ActionType.COLLAPSE
    if code <= self.num_adds:
      return ActionType.ADD
    return ActionType.WORD

  def label(self, code) -> int:
    """label of an ADD action, -1 for any other kind."""
    if self.action_type(code) != ActionType.ADD:
      return -1
    return (int(code) - 1) % self.num_labels

  def tag(self, code) -> int:
    if self.action_type(code) != ActionType.ADD:
      return -1
    return (int(code) - 1) // self.num_labels

  def word(self, code) -> int:
    if self.action_type(code) != ActionType.WORD:
      return -1
    return int(code) - self.num_adds - 1

  def encode(self, action: Action) -> int:
    if isinstance(action, Collapse):
      return 0
    if isinstance(action, Add):
      if not 0 <= action.label < self.num_labels:
        raise InvalidArgumentError(
          f"label {action.label} outside [0, {self.num_labels})"
        )
      if not 0 <= action.tag < self.num_tags:
        raise InvalidArgumentError(f"tag {action.tag} outside [0, {self.num_tags})")
      return 1 + action.label + self.num_labels * action.tag
    if isinstance(action, Word):
      if not 0 <= action.word < self.num_words:
        raise InvalidArgumentError(
          f"word {action.word} outside [0, {self.num_words})"
        )
      return 1 + self.num_adds + action.word
    raise InvalidArgumentError(f"not a generator action: {action!r}")

  def decode(self, code) -> Action:
    kind = self.action_type(code)
    if kind == ActionType.COLLAPSE:
      return COLLAPSE
    if kind == ActionType.ADD:
      return Add(self.label(code), self.tag(code))
    return Word(self.word(code))


def make_codec(num_labels: int, num_tags: int, num_words: int) -> ActionCodec:
  """factory with size validation; every vocabulary needs at least one entry."""
  for name, value in (
    ("num_labels", num_labels),
    ("num_tags", num_tags),
    ("num_words", num_words),
  ):
    if value < 1:
      raise ConfigurationError(f"{name} must be at least 1, got {value}")
  return ActionCodec(num_labels, num_tags, num_words)
