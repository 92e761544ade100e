import copy
import random
from datetime import date, datetime

import pytest

from randomizer.errors import CallbackError, ConfigurationError, DataUnavailableWarning
from randomizer.random_parameter_set import ConditionRecord, FrameListExpander, generate, get_child_birthday

NOW = datetime(2024, 6, 1)


def one_frame(frame_id, template):
    return [dict(template, id=frame_id)]


def make_config(**overrides):
    config = {
        'commonFrameProperties': {'kind': 'exp-lookit-story-page', 'parentTextBlock': {'title': 'Parents!'}},
        'frameList': [
            {'images': [{'id': 'agent', 'src': 'AGENTIMG'}]},
            {'kind': 'exp-lookit-text', 'text': 'QUESTION'},
        ],
        'parameterSets': [
            {'AGENTIMG': 'flurp.jpg', 'QUESTION': 'Who was mean?'},
            {'AGENTIMG': 'zazz.jpg', 'QUESTION': 'Who was nice?'},
        ],
    }
    config.update(overrides)
    return config


def test_end_to_end_frame_count_and_condition():
    calls = []

    def resolve_frame(frame_id, template):
        calls.append((frame_id, template))
        # first template expands into a pre-screen plus the trial
        if len(calls) == 1:
            return [{'kind': 'exp-lookit-text', 'id': 'pre'}, template]
        return [template]

    config = make_config()
    frames, record = generate('test-trials', config, [], resolve_frame, None, rng=random.Random(0))

    assert len(frames) == 3
    assert [frame_id for frame_id, _ in calls] == ['test-trials', 'test-trials']
    assert record.condition_num in (0, 1)
    assert record.parameter_set == config['parameterSets'][record.condition_num]

    chosen = config['parameterSets'][record.condition_num]
    assert frames[1] == {
        'kind': 'exp-lookit-story-page',
        'parentTextBlock': {'title': 'Parents!'},
        'images': [{'id': 'agent', 'src': chosen['AGENTIMG']}],
    }
    assert frames[2] == {
        'kind': 'exp-lookit-text',
        'parentTextBlock': {'title': 'Parents!'},
        'text': chosen['QUESTION'],
    }


def test_both_conditions_are_drawn():
    seen = set()
    rng = random.Random(2)
    for _ in range(100):
        _, record = generate('t', make_config(), None, one_frame, None, rng=rng)
        seen.add(record.condition_num)
    assert seen == {0, 1}


def test_inputs_are_not_mutated():
    config = make_config(parameterSetWeights=[{'minAge': 0, 'maxAge': 100, 'weights': [1, 1]}])
    before = copy.deepcopy(config)

    def mutating_resolver(frame_id, template):
        template['parentTextBlock']['title'] = 'changed'
        template.setdefault('images', []).append('extra')
        return [template]

    generate('t', config, [], mutating_resolver, {'birthday': date(2024, 5, 1)}, rng=random.Random(1), now=NOW)

    assert config == before


def test_seeded_runs_are_reproducible():
    config = make_config(
        frameList=[{'order': 'L#PERM', 'pick': 'L#RAND', 'next': 'L#UNIQ'}] * 3,
        parameterSets=[{'L': list(range(10))}, {'L': list(range(10, 20))}],
    )

    first = generate('t', config, [], one_frame, None, rng=random.Random(42))
    second = generate('t', config, [], one_frame, None, rng=random.Random(42))

    assert first == second


def test_uniq_cursor_is_shared_across_templates():
    config = make_config(
        commonFrameProperties={},
        frameList=[{'stim': 'STIM#UNIQ'} for _ in range(4)],
        parameterSets=[{'STIM': ['a.jpg', 'b.jpg', 'c.jpg']}],
    )

    frames, _ = generate('t', config, [], one_frame, None, rng=random.Random(8))
    stims = [f['stim'] for f in frames]

    assert sorted(stims[:3]) == ['a.jpg', 'b.jpg', 'c.jpg']
    assert stims[3] == stims[0]


def test_uniq_state_does_not_leak_between_calls():
    config = make_config(
        commonFrameProperties={},
        frameList=[{'stim': 'STIM#UNIQ'}],
        parameterSets=[{'STIM': ['a', 'b', 'c', 'd', 'e']}],
    )
    firsts = set()
    for seed in range(30):
        frames, _ = generate('t', config, [], one_frame, None, rng=random.Random(seed))
        firsts.add(frames[0]['stim'])
    assert len(firsts) > 1


def test_zero_weight_condition_is_never_chosen():
    rng = random.Random(4)
    for _ in range(50):
        _, record = generate('t', make_config(parameterSetWeights=[0, 1]), [], one_frame, None, rng=rng)
        assert record.condition_num == 1


@pytest.mark.parametrize(
    'birthday, expected',
    [
        (date(2024, 5, 22), 0),
        (date(2022, 6, 1), 1),
    ],
)
def test_age_based_weights(birthday, expected):
    config = make_config(parameterSetWeights=[
        {'minAge': 0, 'maxAge': 365, 'weights': [1, 0]},
        {'minAge': 365, 'maxAge': 10000, 'weights': [0, 1]},
    ])
    expander = FrameListExpander('t', config, one_frame, child={'birthday': birthday},
                                 rng=random.Random(0), now=NOW)

    _, record = expander.expand()

    assert record.condition_num == expected
    assert expander.diagnostics == []


class ChildRecord:
    def __init__(self, birthday):
        self.birthday = birthday


class BrokenChild:
    def get(self, key):
        raise LookupError(key)


def test_child_providers():
    assert get_child_birthday(None) is None
    assert get_child_birthday({'birthday': '2020-01-01'}) == '2020-01-01'
    assert get_child_birthday(ChildRecord(date(2020, 1, 1))) == date(2020, 1, 1)
    assert get_child_birthday(BrokenChild()) is None


def test_unavailable_birthday_is_recoverable():
    config = make_config(parameterSetWeights=[{'minAge': 100, 'maxAge': 200, 'weights': [1, 0]}])
    expander = FrameListExpander('t', config, one_frame, child=BrokenChild(), rng=random.Random(0), now=NOW)

    frames, record = expander.expand()

    assert len(frames) == 2
    assert record.condition_num in (0, 1)
    # missing birthday, then no bracket for age 0
    assert len(expander.diagnostics) == 2
    assert all(isinstance(w, DataUnavailableWarning) for w in expander.diagnostics)


@pytest.mark.parametrize(
    'overrides',
    [
        dict(parameterSets=[]),
        dict(frameList=[]),
        dict(frameList={'a': 1}),
        dict(commonFrameProperties=['not', 'a', 'dict']),
        dict(parameterSetWeights=[1, 1, 1]),
        dict(parameterSetWeights=[0, 0]),
    ],
)
def test_bad_configuration(overrides):
    with pytest.raises(ConfigurationError):
        generate('t', make_config(**overrides), [], one_frame, None, rng=random.Random(0))


def test_missing_required_keys():
    with pytest.raises(ConfigurationError):
        generate('t', {'frameList': [{}]}, [], one_frame, None)
    with pytest.raises(ConfigurationError):
        generate('t', {'parameterSets': [{}]}, [], one_frame, None)


def test_configuration_error_reports_template_index_and_aborts():
    calls = []

    def resolve_frame(frame_id, template):
        calls.append(template)
        return [template]

    config = make_config(
        frameList=[{'src': 'L#0'}, {'src': 'L#9'}, {'src': 'L#1'}],
        parameterSets=[{'L': ['a', 'b']}],
    )

    with pytest.raises(ConfigurationError) as excinfo:
        generate('t', config, [], resolve_frame, None, rng=random.Random(0))

    assert excinfo.value.frame_index == 1
    assert excinfo.value.parameter == 'L'
    assert 'frameList[1]' in str(excinfo.value)
    assert len(calls) == 1


def test_callback_errors_are_wrapped():
    def resolve_frame(frame_id, template):
        if template.get('kind') == 'exp-lookit-text':
            raise KeyError('unknown frame kind')
        return [template]

    with pytest.raises(CallbackError) as excinfo:
        generate('t', make_config(), [], resolve_frame, None, rng=random.Random(0))

    assert excinfo.value.frame_index == 1
    assert isinstance(excinfo.value.__cause__, KeyError)


def test_callback_must_return_a_list():
    with pytest.raises(ConfigurationError):
        generate('t', make_config(), [], lambda frame_id, template: template, None, rng=random.Random(0))


def test_callback_may_return_no_frames():
    frames, _ = generate('t', make_config(), [], lambda frame_id, template: [], None, rng=random.Random(0))
    assert frames == []


def test_condition_record_as_dict():
    record = ConditionRecord(1, {'X': [1, 2]})

    data = record.as_dict()

    assert data == {'conditionNum': 1, 'parameterSet': {'X': [1, 2]}}
    data['parameterSet']['X'].append(3)
    assert record.parameter_set == {'X': [1, 2]}


def test_condition_record_does_not_share_the_parameter_set():
    config = make_config(parameterSets=[{'AGENTIMG': 'a.jpg', 'QUESTION': 'q', 'LIST': [1, 2]}])

    _, record = generate('t', config, [], one_frame, None, rng=random.Random(0))
    record.parameter_set['LIST'].append(3)
    record.parameter_set['AGENTIMG'] = 'changed.jpg'

    assert config['parameterSets'][0] == {'AGENTIMG': 'a.jpg', 'QUESTION': 'q', 'LIST': [1, 2]}
