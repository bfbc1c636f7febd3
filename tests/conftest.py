"""
Pytest configuration for the generator tests.
"""
import os
import sys

import pytest

# Add the repository root to the path so tests can import the flat modules
root_path = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, root_path)


# ==============================================================================
# Vocabulary / System Fixtures
# ==============================================================================

@pytest.fixture
def vocab():
  """Two labels, one tag, two words: L=2, T=1, W=2."""
  from data_loader import vocab_from_terms
  return vocab_from_terms(["A", "B"], ["X"], ["w0", "w1"])


@pytest.fixture
def system(vocab):
  from engine import GeneratorTransitionSystem
  return GeneratorTransitionSystem(vocab)


@pytest.fixture
def state(system):
  """Freshly initialized state: root sentinel only."""
  return system.new_state()


@pytest.fixture
def tree_state(system):
  """
  Partial tree with heads [-1, 0, 0, 2] and stack [-1, 0, 2, 3]:

    ADD(A,X) w0, ADD(B,X) w1, COLLAPSE, ADD(A,X) w0, ADD(B,X) w1
  """
  s = system.new_state()
  for action in (1, 3, 2, 4, 0, 1, 3, 2, 4):
    system.perform_action(action, s)
  return s
