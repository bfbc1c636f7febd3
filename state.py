"""
incremental state of the transition-based generator.

the state holds a stack of token positions (the root sentinel -1 at the
bottom) and the partial tree over the tokens generated so far. a token is
created by `add` with its head, label and tag; its word is filled in by a
later `add_word`, so `word` lags `head` by at most one entry.
"""

import logging
from typing import List

from config import ROOT, NOT_FOUND, ROOT_LABEL, DEFAULT_ROOT_LABEL
from errors import InvalidArgumentError, InvalidStateError
from schema import GeneratorVocab, OutputToken

logger = logging.getLogger(__name__)


class IncrementalState:
  def __init__(self, vocab: GeneratorVocab, keep_history: bool = False):
    # shared and read-only, never copied per hypothesis
    self.vocab = vocab
    self._root_label = vocab.label_map.lookup_index(ROOT_LABEL, DEFAULT_ROOT_LABEL)

    self.next = 0
    self.stack: List[int] = []
    self.head: List[int] = []
    self.label: List[int] = []
    self.tag: List[int] = []
    self.word: List[int] = []

    self.keep_history = keep_history
    self.history: List[int] = []

  def clone(self) -> "IncrementalState":
    new_state = IncrementalState.__new__(IncrementalState)
    new_state.vocab = self.vocab
    new_state._root_label = self._root_label
    new_state.next = self.next
    new_state.stack = list(self.stack)
    new_state.head = list(self.head)
    new_state.label = list(self.label)
    new_state.tag = list(self.tag)
    new_state.word = list(self.word)
    new_state.keep_history = self.keep_history
    new_state.history = list(self.history)
    return new_state

  def init(self) -> None:
    if self.stack:
      raise InvalidStateError(f"init on a non-empty stack: {self.stack}")
    self.push(ROOT)

  # -- stack --

  def push(self, index: int) -> None:
    self.stack.append(index)

  def pop(self) -> int:
    if not self.stack:
      raise InvalidStateError(f"pop from empty stack (history: {self.history})")
    return self.stack.pop()

  def top(self) -> int:
    if not self.stack:
      raise InvalidStateError(f"top of empty stack (history: {self.history})")
    return self.stack[-1]

  def stack_at(self, position: int) -> int:
    """element `position` places below the top (0 = top), or NOT_FOUND."""
    if position < 0:
      return NOT_FOUND
    index = len(self.stack) - 1 - position
    return NOT_FOUND if index < 0 else self.stack[index]

  def stack_size(self) -> int:
    return len(self.stack)

  def stack_empty(self) -> bool:
    return not self.stack

  # -- token attributes --

  def num_tokens(self) -> int:
    return len(self.head)

  def root_label(self) -> int:
    return self._root_label

  def num_labels(self) -> int:
    extra = 1 if self._root_label == DEFAULT_ROOT_LABEL else 0
    return self.vocab.label_map.size() + extra

  def _check_index(self, index: int) -> None:
    if index < ROOT or index >= len(self.head):
      raise InvalidArgumentError(
        f"token index {index} outside [{ROOT}, {len(self.head)})"
      )

  def get_head(self, index: int) -> int:
    self._check_index(index)
    return ROOT if index == ROOT else self.head[index]

  def get_label(self, index: int) -> int:
    self._check_index(index)
    return self._root_label if index == ROOT else self.label[index]

  def get_tag(self, index: int) -> int:
    self._check_index(index)
    return -1 if index == ROOT else self.tag[index]

  def get_word(self, index: int) -> int:
    """word id of a token; -1 for the root or a token still missing its word."""
    self._check_index(index)
    if index == ROOT or index >= len(self.word):
      return -1
    return self.word[index]

  def missing_word(self) -> bool:
    return len(self.head) > len(self.word)

  # -- mutations --

  def add(self, label: int, tag: int) -> None:
    """creates token `next` as a child of the stack top and pushes it."""
    if not self.stack:
      raise InvalidStateError("add needs an attachment point on the stack")
    if self.missing_word():
      raise InvalidStateError(f"add while token {len(self.word)} has no word")
    s0 = self.stack[-1]
    self.stack.append(self.next)
    self.head.append(s0)
    self.label.append(label)
    self.tag.append(tag)
    self.next += 1

  def add_word(self, word: int) -> None:
    if len(self.stack) <= 1:
      raise InvalidStateError("add_word with no generated token on the stack")
    if not self.missing_word():
      raise InvalidStateError("add_word with no token missing a word")
    self.word.append(word)

  def collapse(self) -> int:
    """pops the top token; it stays in the tree but takes no more children."""
    if self.missing_word():
      raise InvalidStateError(f"collapse while token {len(self.word)} has no word")
    if len(self.stack) <= 1:
      raise InvalidStateError("collapse would pop the root")
    return self.pop()

  # -- tree navigation over the partial tree --

  def parent(self, index: int, n: int) -> int:
    """applies the head function n times; NOT_FOUND above the root."""
    self._check_index(index)
    if n < 0:
      raise InvalidArgumentError(f"negative level count: {n}")
    while n > 0:
      if index == ROOT:
        return NOT_FOUND
      index = self.head[index]
      n -= 1
    return index

  def leftmost_child(self, index: int, n: int) -> int:
    self._check_index(index)
    if n < 0:
      raise InvalidArgumentError(f"negative level count: {n}")
    while n > 0:
      # children are always generated after their head
      for i in range(index + 1, len(self.head)):
        if self.head[i] == index:
          index = i
          break
      else:
        return NOT_FOUND
      n -= 1
    return index

  def rightmost_child(self, index: int, n: int) -> int:
    self._check_index(index)
    if n < 0:
      raise InvalidArgumentError(f"negative level count: {n}")
    while n > 0:
      for i in range(len(self.head) - 1, index, -1):
        if self.head[i] == index:
          index = i
          break
      else:
        return NOT_FOUND
      n -= 1
    return index

  def left_sibling(self, index: int, n: int) -> int:
    self._check_index(index)
    if n < 0:
      raise InvalidArgumentError(f"negative sibling count: {n}")
    if index == ROOT and n > 0:
      return NOT_FOUND
    head = self.head[index] if index != ROOT else ROOT
    i = index
    while n > 0:
      i -= 1
      if i == ROOT:
        return NOT_FOUND
      if self.head[i] == head:
        n -= 1
    return i

  def right_sibling(self, index: int, n: int) -> int:
    self._check_index(index)
    if n < 0:
      raise InvalidArgumentError(f"negative sibling count: {n}")
    if index == ROOT and n > 0:
      return NOT_FOUND
    head = self.head[index] if index != ROOT else ROOT
    i = index
    while n > 0:
      i += 1
      if i == len(self.head):
        return NOT_FOUND
      if self.head[i] == head:
        n -= 1
    return i

  # -- rendering --

  def label_as_string(self, label: int) -> str:
    if label == self._root_label:
      return ROOT_LABEL
    if 0 <= label < self.vocab.label_map.size():
      return self.vocab.label_map.get_term(label)
    return ""

  def tag_as_string(self, tag: int) -> str:
    if 0 <= tag < self.vocab.tag_map.size():
      return self.vocab.tag_map.get_term(tag)
    return ""

  def word_as_string(self, word: int) -> str:
    if 0 <= word < self.vocab.word_map.size():
      return self.vocab.word_map.get_term(word)
    return ""

  def create_output(self, rewrite_root_labels: bool = True) -> List[OutputToken]:
    """materializes the generated tokens in position order."""
    tokens = []
    for i in range(self.next):
      head = self.head[i]
      label = self.label_as_string(self.label[i])
      if head == ROOT and rewrite_root_labels:
        label = self.label_as_string(self._root_label)
      tokens.append(
        OutputToken(
          word=self.word_as_string(self.get_word(i)),
          tag=self.tag_as_string(self.tag[i]),
          head=None if head == ROOT else head,
          label=label,
        )
      )
    return tokens

  def to_string(self) -> str:
    items = []
    for index in self.stack:
      if index == ROOT:
        items.append(ROOT_LABEL)
      else:
        items.append(self.word_as_string(self.get_word(index)) or "_")
    return "[" + " ".join(items) + "]"

  def __repr__(self) -> str:
    return f"IncrementalState({self.to_string()}, next={self.next})"
