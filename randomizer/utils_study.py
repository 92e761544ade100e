# randomizer/utils_study.py
# ---------------------------------
# Helpers between the oTree app and the randomizer: study file loading,
# frame resolution, frame report parsing and export rows.
# No oTree imports here so everything can be tested on its own.

import json
import os
from typing import Dict, List, Optional, Tuple

from .errors import ConfigurationError
from .random_parameter_set import SAMPLER_NAME, ConditionRecord, FrameListExpander

EXPORT_HEADER = ['session', 'participant', 'child_id', 'condition_num', 'frame_index', 'frame_id', 'data']


def load_study(path) -> Dict:
    """
    Read a study JSON file of the shape {"frames": {frame_id: frame_config}}.
    """
    if not os.path.exists(path):
        raise ConfigurationError('study file %s does not exist' % path)
    with open(path, encoding='utf-8') as f:
        try:
            study = json.load(f)
        except ValueError as e:
            raise ConfigurationError('study file %s is not valid JSON: %s' % (path, e)) from e
    if not isinstance(study, dict) or not isinstance(study.get('frames'), dict):
        raise ConfigurationError('study file %s has no "frames" object' % path)
    return study


def get_randomizer_config(study: Dict, frame_id: str, source: str = 'study') -> Dict:
    """Return the random-parameter-set frame config `frame_id` of a study."""
    frame_config = study.get('frames', {}).get(frame_id)
    if frame_config is None:
        raise ConfigurationError('%s has no frame %r' % (source, frame_id))
    sampler = frame_config.get('sampler', SAMPLER_NAME)
    if sampler != SAMPLER_NAME:
        raise ConfigurationError('frame %r uses sampler %r, expected %r' % (frame_id, sampler, SAMPLER_NAME))
    return frame_config


def resolve_frame(frame_id, template):
    """
    Turn one resolved template into playable frames. The browser-side
    player only needs an id and the frame kind.
    """
    frame = dict(template)
    frame.setdefault('kind', 'exp-lookit-text')
    frame['id'] = frame_id
    return [frame]


def build_session_frames(frame_id, frame_config, child=None, rng=None, now=None
                         ) -> Tuple[List[Dict], ConditionRecord, List[Warning]]:
    """
    Run the randomizer for one participant. Frame ids are prefixed with
    their position ('0-test-trials', '1-test-trials', ...) so each is unique.

    :return: (frames, ConditionRecord, warnings)
    """
    expander = FrameListExpander(frame_id, frame_config, resolve_frame, child=child, rng=rng, now=now)
    frames, record = expander.expand()
    for i, frame in enumerate(frames):
        frame['id'] = '%d-%s' % (i, frame['id'])
    return frames, record, expander.diagnostics


def parse_frame_report(payload) -> Optional[Dict]:
    """
    Validate a frame report sent by the front end.
    Returns dict(frame_id, frame_index, data) with data as JSON text, or
    None if the payload is unusable.
    """
    if not isinstance(payload, dict):
        return None
    try:
        frame_index = int(payload['frame_index'])
    except (KeyError, TypeError, ValueError):
        return None
    if frame_index < 0:
        return None
    data = payload.get('data', {})
    if data is None:
        data = {}
    return dict(
        frame_id=str(payload.get('frame_id', '')),
        frame_index=frame_index,
        data=json.dumps(data),
    )


def frame_export_row(session_code, participant_code, child_id, condition_num, frame_index, frame_id, data):
    return [session_code, participant_code, child_id or '', condition_num, frame_index, frame_id, data]
