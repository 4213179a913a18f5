'''Errors raised by the valuation engine.'''

from typing import Sequence


class InsufficientDataError(ValueError):
  '''
  No valuation method could produce an estimate.

  Raised when neither a usable revenue nor a usable profit figure is
  available. Callers should surface this as a user-facing input error.

  Attributes:
    skipped: SkippedMethod records explaining why each method was skipped
  '''

  def __init__(self, message: str, skipped: Sequence = ()):
    super().__init__(message)
    self.skipped = tuple(skipped)

  def reasons(self) -> dict:
    '''Map method name to its skip reason code.'''
    return {s.method: s.reason for s in self.skipped}
