import pytest

from data_loader import TermFrequencyMap, build_vocab, load_term_map, vocab_from_terms
from errors import ConfigurationError


def write_map(path, lines):
  path.write_text("\n".join(lines) + "\n", encoding="utf-8")
  return path


def test_from_file(tmp_path):
  path = write_map(tmp_path / "label-map", ["3", "nsubj 10", "dobj\t5", "ROOT 1"])
  term_map = TermFrequencyMap.from_file(str(path))

  assert term_map.size() == 3
  assert len(term_map) == 3
  assert term_map.lookup_index("dobj", -1) == 1
  assert term_map.lookup_index("amod", -1) == -1
  assert term_map.get_term(2) == "ROOT"
  assert term_map.frequency(0) == 10
  assert "nsubj" in term_map


def test_terms_may_contain_spaces(tmp_path):
  path = write_map(tmp_path / "word-map", ["1", "New York 7"])
  assert TermFrequencyMap.from_file(str(path)).get_term(0) == "New York"


@pytest.mark.parametrize("lines", [
  ["two", "a 1"],
  ["2", "a 1"],
  ["1", "a lot"],
  ["1", "lonely"],
])
def test_malformed_files_raise(tmp_path, lines):
  path = write_map(tmp_path / "bad-map", lines)
  with pytest.raises(ConfigurationError):
    TermFrequencyMap.from_file(str(path))


def test_duplicate_terms_raise():
  with pytest.raises(ConfigurationError):
    TermFrequencyMap.from_terms(["a", "b", "a"])


def test_get_term_out_of_range():
  with pytest.raises(IndexError):
    TermFrequencyMap.from_terms(["a"]).get_term(1)


def test_load_term_map_uses_data_path(tmp_path, monkeypatch):
  write_map(tmp_path / "tag-map", ["2", "NN 3", "VB 2"])
  monkeypatch.setenv("DATA_PATH", str(tmp_path))
  assert load_term_map("tag-map").size() == 2


def test_build_vocab(tmp_path, monkeypatch):
  write_map(tmp_path / "label-map", ["2", "nsubj 4", "ROOT 2"])
  write_map(tmp_path / "tag-map", ["1", "NN 3"])
  write_map(tmp_path / "word-map", ["2", "cat 2", "dog 1"])
  monkeypatch.setenv("DATA_PATH", str(tmp_path))

  vocab = build_vocab()
  assert vocab.label_map.size() == 2
  assert vocab.tag_map.get_term(0) == "NN"
  assert vocab.word_map.lookup_index("dog", -1) == 1


def test_build_vocab_rejects_empty_maps(tmp_path, monkeypatch):
  write_map(tmp_path / "label-map", ["1", "nsubj 4"])
  write_map(tmp_path / "tag-map", ["0"])
  write_map(tmp_path / "word-map", ["1", "cat 2"])
  monkeypatch.setenv("DATA_PATH", str(tmp_path))
  with pytest.raises(ConfigurationError):
    build_vocab()


def test_vocab_from_terms():
  vocab = vocab_from_terms(["A"], ["X", "Y"], ["w"])
  assert vocab.tag_map.size() == 2
