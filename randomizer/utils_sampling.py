# randomizer/utils_sampling.py
# ---------------------------------
# Condition selection: weighted draw over parameter sets, with optional
# age-bracketed weights.

import logging
import math
import random
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, List, Optional

from .errors import ConfigurationError, DataUnavailableWarning

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 60 * 60 * 24


def _check_weight(value, index: int) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError('weight %d is not a number: %r' % (index, value))
    if not math.isfinite(value):
        raise ConfigurationError('weight %d is not a finite number: %r' % (index, value))
    if value < 0:
        raise ConfigurationError('weight %d is negative: %r' % (index, value))
    return float(value)


def draw_weighted_index(weights: Sequence[float], rng: Optional[random.Random] = None) -> int:
    """
    Draw an index with probability weights[i] / sum(weights).

    Raises ConfigurationError if no index can be selected (empty list or
    all weights zero).
    """
    rng = rng or random.Random()
    checked = [_check_weight(w, i) for i, w in enumerate(weights)]
    total = sum(checked)
    if not checked or total <= 0:
        raise ConfigurationError('cannot draw from weights %r: no positive weight' % (list(weights),))

    u = rng.random() * total
    running = 0.0
    last_positive = 0
    for i, w in enumerate(checked):
        # zero weights are skipped so a draw of exactly 0.0 cannot select them;
        # strict < on [0, total) then picks the first positive index covering u
        if w <= 0:
            continue
        running += w
        last_positive = i
        if u < running:
            return i
    # float rounding can leave u just above the final running total
    return last_positive


def equal_weights(num_candidates: int) -> List[float]:
    return [1] * num_candidates


@dataclass(frozen=True)
class AgeBracket:
    min_age_days: float
    max_age_days: float
    weights: tuple

    @classmethod
    def from_config(cls, raw, index: int = 0) -> 'AgeBracket':
        if not isinstance(raw, Mapping):
            raise ConfigurationError('parameterSetWeights[%d] is not an age bracket: %r' % (index, raw))
        try:
            lo = raw['minAge']
            hi = raw['maxAge']
            weights = raw['weights']
        except KeyError as e:
            raise ConfigurationError('parameterSetWeights[%d] is missing %s' % (index, e)) from e
        for bound in (lo, hi):
            if isinstance(bound, bool) or not isinstance(bound, (int, float)):
                raise ConfigurationError('parameterSetWeights[%d] has a non-numeric age bound: %r' % (index, bound))
        if isinstance(weights, (str, bytes)) or not isinstance(weights, Sequence):
            raise ConfigurationError('parameterSetWeights[%d].weights is not a list' % index)
        return cls(min_age_days=lo, max_age_days=hi, weights=tuple(weights))

    def contains(self, age_days: float) -> bool:
        return self.min_age_days <= age_days <= self.max_age_days


def _as_naive_utc(value) -> Optional[datetime]:
    """Coerce a birthday value to a naive UTC datetime, or None if invalid."""
    if value is None:
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        try:
            dt = datetime.fromisoformat(value.strip())
        except ValueError:
            return None
    else:
        return None
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def child_age_days(birthday, now: Optional[datetime] = None, diagnostics: Optional[list] = None) -> float:
    """
    Child's age in (fractional) days at `now`.
    A missing or unparseable birthday counts as born today (age 0).
    """
    now_dt = _as_naive_utc(now) if now is not None else _utcnow()
    born = _as_naive_utc(birthday)
    if born is None:
        _warn(
            "No child birthday available for randomization (got %r). Using today's date." % (birthday,),
            diagnostics,
        )
        born = now_dt
    return (now_dt - born).total_seconds() / SECONDS_PER_DAY


def _warn(message: str, diagnostics: Optional[list]):
    logger.warning(message)
    if diagnostics is not None:
        diagnostics.append(DataUnavailableWarning(message))


def _is_bracketed(weight_spec) -> bool:
    return len(weight_spec) > 0 and isinstance(weight_spec[0], Mapping)


def _checked_length(weights: Sequence, num_candidates: int, where: str) -> List[float]:
    if len(weights) != num_candidates:
        raise ConfigurationError(
            '%s has %d weights but there are %d parameterSets' % (where, len(weights), num_candidates)
        )
    return [_check_weight(w, i) for i, w in enumerate(weights)]


def resolve_weights(
    weight_spec: Any,
    num_candidates: int,
    birthday=None,
    now: Optional[datetime] = None,
    diagnostics: Optional[list] = None,
) -> List[float]:
    """
    Turn `parameterSetWeights` into a flat weight list.

    - None: equal weights.
    - flat list: returned as-is (copied).
    - list of {minAge, maxAge, weights}: weights of the first bracket
      containing the child's age in days; equal weights if none matches.
    """
    if weight_spec is None:
        return equal_weights(num_candidates)
    if isinstance(weight_spec, (str, bytes, Mapping)) or not isinstance(weight_spec, Sequence):
        raise ConfigurationError('parameterSetWeights must be a list, got %r' % (weight_spec,))
    if not _is_bracketed(weight_spec):
        return _checked_length(weight_spec, num_candidates, 'parameterSetWeights')

    brackets = [AgeBracket.from_config(raw, i) for i, raw in enumerate(weight_spec)]
    age_days = child_age_days(birthday, now, diagnostics)
    for i, bracket in enumerate(brackets):
        if bracket.contains(age_days):
            logger.info('Using age-based randomization parameters (bracket %d, age %.1f days)', i, age_days)
            return _checked_length(bracket.weights, num_candidates, 'parameterSetWeights[%d].weights' % i)

    _warn(
        'Child (age %.1f days) does not fall into any designated age range for randomization. '
        'Weighting parameter sets equally.' % age_days,
        diagnostics,
    )
    return equal_weights(num_candidates)
