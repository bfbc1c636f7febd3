import os
import logging

import jax
import jax.numpy as jnp
from dotenv import load_dotenv

from config import load_config
from data_loader import build_vocab
from engine import create_transition_system
from inference import generate
from utils import format_output, reconstruct_path

logger = logging.getLogger(__name__)


def make_random_scorer(rng, n_actions: int):
  """
  scores every action with fresh uniform noise.
  stands in for a trained model; useful to exercise the search end to end.
  """
  state = {"rng": rng}

  def scorer(_generator_state):
    state["rng"], subkey = jax.random.split(state["rng"])
    return jnp.log(jax.random.uniform(subkey, (n_actions,), minval=1e-6, maxval=1.0))

  return scorer


def main():
  logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
  )

  load_dotenv()
  data_path = os.getenv("DATA_PATH", "./data")
  logger.info("loading vocabularies from %s...", data_path)

  vocab = build_vocab(
    os.getenv("LABEL_MAP", "label-map"),
    os.getenv("TAG_MAP", "tag-map"),
    os.getenv("WORD_MAP", "word-map"),
  )
  config = load_config(vocab)
  system = create_transition_system(os.getenv("TRANSITION_SYSTEM", "generator"), vocab)

  logger.info(
    "labels: %d | tags: %d | words: %d | actions: %d | beam size: %d",
    vocab.label_map.size(),
    vocab.tag_map.size(),
    vocab.word_map.size(),
    system.num_actions(),
    config.beam_size,
  )

  rng = jax.random.PRNGKey(int(os.getenv("SEED", "0")))
  n_sentences = int(os.getenv("N_SENTENCES", "3"))

  for sent_idx in range(n_sentences):
    rng, scorer_rng = jax.random.split(rng)
    scorer = make_random_scorer(scorer_rng, system.num_actions())
    result = generate(system, scorer, config)

    best = result.beam[0]
    path = reconstruct_path(result.generations, 0)
    tokens = best.state.create_output(config.rewrite_root_labels)

    logger.info("")
    logger.info("=" * 60)
    logger.info(
      "sentence %d | score: %.4f | steps: %d", sent_idx + 1, best.score, len(path) - 1
    )
    for line in format_output(tokens).splitlines():
      logger.info("  %s", line)
    if best.trace is not None:
      for step, action in best.trace.steps:
        logger.info("  step %3d: %s", step, action)
    logger.info("=" * 60)


if __name__ == "__main__":
  main()
