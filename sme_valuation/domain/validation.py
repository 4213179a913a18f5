"""
Caller-side validation of BusinessInputs.

The engine assumes pre-validated input and never calls these checks itself;
they exist for the collaborators that build inputs from user records (the CLI
and the batch runner). Each check returns a CheckResult so callers can report
every problem at once instead of failing on the first.
"""
from dataclasses import dataclass
from typing import List, Optional

from sme_valuation.domain.types import BusinessInputs
from sme_valuation.domain.types import OWNER_INVOLVEMENT
from sme_valuation.domain.types import PROFIT_TYPES

EARLIEST_YEAR = 1800


@dataclass(frozen=True)
class CheckResult:
  """Result of a single validation check."""

  name: str
  ok: bool
  details: str

  def __str__(self) -> str:
    status = '✓' if self.ok else '✗'
    return f'{status} {self.name}: {self.details}'


def pass_result(name: str, details: str) -> CheckResult:
  """Create a passing CheckResult."""
  return CheckResult(name=name, ok=True, details=details)


def fail_result(name: str, details: str) -> CheckResult:
  """Create a failing CheckResult."""
  return CheckResult(name=name, ok=False, details=details)


def _check_non_negative(name: str, value: Optional[float]) -> CheckResult:
  if value is not None and value < 0:
    return fail_result(name, f'must be non-negative, got {value}')
  return pass_result(name, 'ok')


def _check_percentage(name: str, value: Optional[float]) -> CheckResult:
  if value is not None and not 0 <= value <= 100:
    return fail_result(name, f'must be between 0 and 100, got {value}')
  return pass_result(name, 'ok')


def _check_choice(name: str, value: Optional[str],
                  choices: tuple) -> CheckResult:
  if value is not None and value not in choices:
    return fail_result(name, f'must be one of {list(choices)}, got {value!r}')
  return pass_result(name, 'ok')


def check_figures_present(inputs: BusinessInputs) -> CheckResult:
  """At least one of revenue or profit must be supplied."""
  has_revenue = inputs.annual_revenue is not None
  has_profit = (inputs.profit_value is not None or
                inputs.profit_margin is not None)
  if not has_revenue and not has_profit:
    return fail_result('figures', 'annual revenue or profit is required')
  return pass_result('figures', 'ok')


def check_year_established(inputs: BusinessInputs) -> CheckResult:
  """Year established must be plausible and not after the reference year."""
  year = inputs.year_established
  if year is None:
    return pass_result('year_established', 'not provided')
  if year < EARLIEST_YEAR:
    return fail_result('year_established', f'{year} is too early')
  if inputs.as_of_year is not None and year > inputs.as_of_year:
    return fail_result('year_established',
                       f'{year} is after reference year {inputs.as_of_year}')
  return pass_result('year_established', 'ok')


def validate_inputs(inputs: BusinessInputs) -> List[CheckResult]:
  """
  Run every input check.

  Args:
    inputs: Candidate inputs built from a user record

  Returns:
    One CheckResult per check, passing or failing
  """
  return [
      check_figures_present(inputs),
      _check_non_negative('annual_revenue', inputs.annual_revenue),
      _check_non_negative('profit_value', inputs.profit_value),
      _check_non_negative('employee_count', inputs.employee_count),
      _check_percentage('profit_margin', inputs.profit_margin),
      _check_percentage('customer_concentration',
                        inputs.customer_concentration),
      _check_percentage('recurring_revenue_pct', inputs.recurring_revenue_pct),
      _check_percentage('customer_retention', inputs.customer_retention),
      _check_choice('profit_type', inputs.profit_type, PROFIT_TYPES),
      _check_choice('owner_involvement', inputs.owner_involvement,
                    OWNER_INVOLVEMENT),
      check_year_established(inputs),
  ]


def ensure_valid(inputs: BusinessInputs) -> BusinessInputs:
  """
  Validate inputs and raise on the first batch of failures.

  Raises:
    ValueError: Listing every failed check
  """
  failures = [r for r in validate_inputs(inputs) if not r.ok]
  if failures:
    details = '; '.join(f'{r.name}: {r.details}' for r in failures)
    raise ValueError(f'Invalid business inputs: {details}')
  return inputs
