# randomizer/utils_substitute.py
# ---------------------------------
# Parameter substitution into frame templates.
#
# A string leaf in a template is either a literal, the exact name of a
# parameter, or NAME#SELECTOR where SELECTOR is one of:
#   N     element N (0-indexed) of the list NAME
#   RAND  a uniformly random element of NAME
#   PERM  a random permutation of NAME
#   UNIQ  the next element of one permutation of NAME shared by every
#         NAME#UNIQ in the session (wraps around when exhausted)

import copy
import random
from collections.abc import Mapping
from typing import Any, Dict, List, Optional, Tuple, Union

from .errors import ConfigurationError

RAND = 'RAND'
PERM = 'PERM'
UNIQ = 'UNIQ'
SELECTOR_KEYWORDS = (RAND, PERM, UNIQ)

Selector = Union[int, str]


def parse_reference(text: str) -> Optional[Tuple[str, Optional[Selector]]]:
    """
    Split 'NAME#SELECTOR' on the last '#'.

    :return: (name, selector) where selector is an int, one of
             SELECTOR_KEYWORDS, or None if the suffix is not a selector.
             None if the string contains no '#' or has an empty name.
    """
    name, sep, token = text.rpartition('#')
    if not sep or not name:
        return None
    if token.isdigit() and token.isascii():
        return name, int(token)
    if token in SELECTOR_KEYWORDS:
        return name, token
    return name, None


def merge_structures(base: Any, override: Any) -> Any:
    """
    Deep structural merge returning a new value; `override` wins.

    Mappings are merged key by key at every depth, lists index by index
    (override elements win, extra base elements are kept). Neither input
    is mutated and no container from either input is shared with the result.
    """
    if isinstance(base, Mapping) and isinstance(override, Mapping):
        merged = {key: copy.deepcopy(value) for key, value in base.items()}
        for key, value in override.items():
            if key in merged:
                merged[key] = merge_structures(merged[key], value)
            else:
                merged[key] = copy.deepcopy(value)
        return merged
    if isinstance(base, list) and isinstance(override, list):
        merged = [merge_structures(b, o) for b, o in zip(base, override)]
        if len(override) > len(base):
            merged.extend(copy.deepcopy(override[len(base):]))
        else:
            merged.extend(copy.deepcopy(base[len(override):]))
        return merged
    return copy.deepcopy(override)


class PermutationState:
    """
    Per-session cursors for NAME#UNIQ: one random permutation per list
    name, drawn on first use and consumed in order, wrapping at the end.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()
        self._state: Dict[str, List] = {}

    def __contains__(self, name):
        return name in self._state

    def permutation(self, name: str) -> Optional[list]:
        entry = self._state.get(name)
        return list(entry[0]) if entry else None

    def next_unique(self, name: str, values: list):
        if name not in self._state:
            if not values:
                raise ConfigurationError('cannot draw #UNIQ from an empty list', parameter=name)
            self._state[name] = [self.rng.sample(list(values), len(values)), 0]
        entry = self._state[name]
        permutation, cursor = entry
        entry[1] = (cursor + 1) % len(permutation)
        return copy.deepcopy(permutation[cursor])


class Substituter:
    """
    Replaces parameter references in a template with values from one
    parameter set. One instance (and its PermutationState) should be used
    for all templates of a session so that #UNIQ draws are shared.
    """

    def __init__(self, parameter_set: Mapping, perm_state: Optional[PermutationState] = None,
                 rng: Optional[random.Random] = None):
        if not isinstance(parameter_set, Mapping):
            raise ConfigurationError('parameter set must be an object, got %r' % (parameter_set,))
        self.parameter_set = parameter_set
        self.rng = rng or random.Random()
        self.perm_state = perm_state if perm_state is not None else PermutationState(self.rng)

    def substitute(self, template: Any) -> Any:
        if isinstance(template, Mapping):
            return {key: self.substitute(value) for key, value in template.items()}
        if isinstance(template, (list, tuple)):
            return [self.substitute(value) for value in template]
        if isinstance(template, str):
            return self.resolve_string(template)
        return template

    def resolve_string(self, text: str) -> Any:
        if text in self.parameter_set:
            return copy.deepcopy(self.parameter_set[text])

        reference = parse_reference(text)
        if reference is None:
            return text
        name, selector = reference
        if name not in self.parameter_set:
            if selector is None:
                # e.g. a URL fragment or '#ff0000'
                return text
            raise ConfigurationError('%r refers to an undefined parameter' % text, parameter=name)
        if selector is None:
            raise ConfigurationError(
                '%r: unknown selector, expected #<index>, #RAND, #PERM or #UNIQ' % text, parameter=name
            )
        return self._select(name, selector)

    def _select(self, name: str, selector: Selector) -> Any:
        values = self.parameter_set[name]
        if isinstance(values, (str, bytes, Mapping)) or not isinstance(values, (list, tuple)):
            raise ConfigurationError(
                'selector #%s needs a list value, got %s' % (selector, type(values).__name__), parameter=name
            )

        if isinstance(selector, int):
            if selector >= len(values):
                raise ConfigurationError(
                    'index %d out of range for list of length %d' % (selector, len(values)), parameter=name
                )
            return copy.deepcopy(values[selector])
        if selector == RAND:
            if not values:
                raise ConfigurationError('cannot draw #RAND from an empty list', parameter=name)
            return copy.deepcopy(self.rng.choice(values))
        if selector == PERM:
            return copy.deepcopy(self.rng.sample(list(values), len(values)))
        return self.perm_state.next_unique(name, values)


def substitute(template: Any, parameter_set: Mapping, perm_state: Optional[PermutationState] = None,
               rng: Optional[random.Random] = None) -> Any:
    """Convenience wrapper: substitute one template with a fresh Substituter."""
    return Substituter(parameter_set, perm_state, rng).substitute(template)
