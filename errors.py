class GeneratorError(Exception):
  """base class for all errors raised by the generator core."""


class InvalidArgumentError(GeneratorError, ValueError):
  """an argument lies outside the domain of the operation (codec or navigation)."""


class InvalidStateError(GeneratorError, RuntimeError):
  """the state does not satisfy the precondition of a mutation."""


class InvalidTransitionError(InvalidStateError):
  """an action was applied to a state that does not permit it."""


class ConfigurationError(GeneratorError, ValueError):
  """invalid configuration, sizing mismatch or malformed vocabulary input."""
