# randomizer/random_parameter_set.py
# ---------------------------------
# The "random-parameter-set" randomizer: pick one parameter set for the
# session (optionally weighted by child age), substitute it into every
# template of a frame list, and report which set was chosen.
#
# Frame config shape (one entry of a study's "frames"):
#
#   {
#       "sampler": "random-parameter-set",
#       "commonFrameProperties": {"kind": "exp-lookit-story-page", ...},
#       "frameList": [{"images": [{"src": "AGENTIMG1"}]}, ...],
#       "parameterSets": [{"AGENTIMG1": "flurpagent1.jpg"}, ...],
#       "parameterSetWeights": [1, 1]
#   }
#
# parameterSetWeights may instead be a list of
# {"minAge": days, "maxAge": days, "weights": [...]}.

import copy
import logging
import random
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from .errors import CallbackError, ConfigurationError
from .utils_sampling import draw_weighted_index, resolve_weights
from .utils_substitute import PermutationState, Substituter, merge_structures

logger = logging.getLogger(__name__)

SAMPLER_NAME = 'random-parameter-set'

FrameResolver = Callable[[str, Dict[str, Any]], Sequence[Dict[str, Any]]]


@dataclass(frozen=True)
class ConditionRecord:
    """Which parameter set was used for this session."""
    condition_num: int
    parameter_set: Mapping

    def as_dict(self) -> Dict[str, Any]:
        return {'conditionNum': self.condition_num, 'parameterSet': copy.deepcopy(dict(self.parameter_set))}


def get_child_birthday(child) -> Any:
    """
    Read the birthday from an opaque child provider: a mapping-like object
    with .get('birthday') (e.g. participant.vars) or an object with a
    `birthday` attribute. Returns None if unavailable.
    """
    if child is None:
        return None
    try:
        if hasattr(child, 'get'):
            return child.get('birthday')
        return getattr(child, 'birthday', None)
    except Exception:
        logger.warning('Could not read birthday from child %r', child, exc_info=True)
        return None


def _require_list(frame_config: Mapping, key: str) -> list:
    value = frame_config.get(key)
    if isinstance(value, (str, bytes, Mapping)) or not isinstance(value, (list, tuple)) or not value:
        raise ConfigurationError('%s must be a non-empty list' % key)
    return list(value)


class FrameListExpander:
    """
    One randomizer invocation: SelectParameterSet -> ExpandTemplate(i) for
    each template in frameList -> Done.

    The PermutationState is owned by this instance so #UNIQ cursors are
    shared across all templates of this expansion and nothing else.
    """

    def __init__(
        self,
        frame_id: str,
        frame_config: Mapping,
        resolve_frame: FrameResolver,
        child=None,
        rng: Optional[random.Random] = None,
        now: Optional[datetime] = None,
    ):
        if not isinstance(frame_config, Mapping):
            raise ConfigurationError('frame config for %r must be an object' % frame_id)
        self.frame_id = frame_id
        self.frame_config = frame_config
        self.resolve_frame = resolve_frame
        self.child = child
        self.rng = rng or random.Random()
        self.now = now
        self.perm_state = PermutationState(self.rng)
        self.diagnostics: List[Warning] = []

        self.frame_list = _require_list(frame_config, 'frameList')
        self.parameter_sets = _require_list(frame_config, 'parameterSets')
        common = frame_config.get('commonFrameProperties')
        if common is None:
            common = {}
        if not isinstance(common, Mapping):
            raise ConfigurationError('commonFrameProperties must be an object')
        self.common_frame_properties = common

    def select_parameter_set(self) -> ConditionRecord:
        weights = resolve_weights(
            self.frame_config.get('parameterSetWeights'),
            len(self.parameter_sets),
            birthday=get_child_birthday(self.child),
            now=self.now,
            diagnostics=self.diagnostics,
        )
        condition_num = draw_weighted_index(weights, self.rng)
        logger.info('%s: selected parameter set %d of %d (weights %r)',
                    self.frame_id, condition_num, len(self.parameter_sets), weights)
        return ConditionRecord(condition_num, copy.deepcopy(self.parameter_sets[condition_num]))

    def expand_template(self, index: int, substituter: Substituter) -> list:
        merged = merge_structures(self.common_frame_properties, self.frame_list[index])
        try:
            resolved = substituter.substitute(copy.deepcopy(merged))
        except ConfigurationError as e:
            if e.frame_index is None:
                e.frame_index = index
            raise

        try:
            frames = self.resolve_frame(self.frame_id, resolved)
        except Exception as e:
            raise CallbackError('resolving frameList[%d] of %r failed: %s' % (index, self.frame_id, e),
                                frame_index=index) from e
        if isinstance(frames, (str, bytes, Mapping)) or not isinstance(frames, (list, tuple)):
            raise ConfigurationError(
                'frame resolver must return a list of frames, got %s' % type(frames).__name__,
                frame_index=index,
            )
        return list(frames)

    def expand(self) -> Tuple[List[Dict[str, Any]], ConditionRecord]:
        record = self.select_parameter_set()
        substituter = Substituter(record.parameter_set, self.perm_state, self.rng)
        frames = []
        for index in range(len(self.frame_list)):
            frames.extend(self.expand_template(index, substituter))
        return frames, record


def generate(
    frame_id: str,
    frame_config: Mapping,
    past_sessions,
    resolve_frame: FrameResolver,
    child=None,
    rng: Optional[random.Random] = None,
    now: Optional[datetime] = None,
) -> Tuple[List[Dict[str, Any]], ConditionRecord]:
    """
    Run the randomizer for one session.

    :param frame_id: id of the randomizer frame in the study
    :param frame_config: commonFrameProperties / frameList / parameterSets /
                         parameterSetWeights
    :param past_sessions: accepted for interface compatibility; unused
    :param resolve_frame: callback(frame_id, template) -> list of frames
    :param child: provider of the child's birthday (see get_child_birthday)
    :return: (frames, ConditionRecord)
    """
    expander = FrameListExpander(frame_id, frame_config, resolve_frame, child=child, rng=rng, now=now)
    return expander.expand()
