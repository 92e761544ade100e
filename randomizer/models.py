import json
import os
import random
from otree.api import (
    models,
    BaseConstants,
    BaseSubsession,
    BaseGroup,
    BasePlayer,
    ExtraModel,
)

from .utils_study import (
    EXPORT_HEADER,
    build_session_frames,
    frame_export_row,
    get_randomizer_config,
    load_study,
    parse_frame_report,
)

author = 'Developmental Science Lab'

doc = """
Frame player for Lookit-style studies.
Selects one parameter set per participant (optionally weighted by the
child's age), expands the study's frame list with it, and records the
condition and every frame response.
"""


class Constants(BaseConstants):
    name_in_url = 'frames'
    players_per_group = None
    num_rounds = 1


class Subsession(BaseSubsession):

    def creating_session(self):
        """
        Load and check the study before any participant starts, so a
        malformed study fails at session creation.
        """
        self.get_frame_config()

    def get_frame_config(self):
        cfg = self.session.config
        path = os.path.join(cfg['study_filepath'], cfg['study_filename'])
        return get_randomizer_config(load_study(path), cfg['randomizer_frame_id'], source=path)

    def get_rng(self, participant):
        """
        Seeded per participant when the session config sets randomizer_seed,
        so demo sessions are reproducible.
        """
        seed = self.session.config.get('randomizer_seed')
        if seed in (None, ''):
            return random.Random()
        return random.Random('%s-%s' % (seed, participant.code))


class Group(BaseGroup):
    pass


class Player(BasePlayer):
    condition_num = models.IntegerField()
    parameter_set = models.LongStringField(blank=True)
    frame_count = models.IntegerField(initial=0)
    randomizer_warnings = models.LongStringField(blank=True)

    def ensure_frames(self):
        """
        Run the randomizer once per participant and cache the result in
        participant.vars; later calls return the cached frames.
        """
        pvars = self.participant.vars
        if 'frames' in pvars:
            return pvars['frames']

        frames, record, warnings = build_session_frames(
            self.session.config['randomizer_frame_id'],
            self.subsession.get_frame_config(),
            child=pvars,
            rng=self.subsession.get_rng(self.participant),
        )

        self.condition_num = record.condition_num
        self.parameter_set = json.dumps(record.as_dict()['parameterSet'])
        self.frame_count = len(frames)
        self.randomizer_warnings = '\n'.join(str(w) for w in warnings)

        pvars['conditionNum'] = record.condition_num
        pvars['frames'] = frames
        return frames

    def live_frame_report(self, payload):
        """
        Accepts frame data sent by the front end when a frame ends and
        stores it; replies with the index of the next frame.
        :param payload: {'frame_id': str, 'frame_index': int, 'data': dict}
        """
        report = parse_frame_report(payload)
        if report is None:
            return {self.id_in_group: dict(ok=False, error='frame_index missing')}

        FrameResponse.create(player=self, **report)
        return {self.id_in_group: dict(ok=True, next_index=report['frame_index'] + 1)}


class FrameResponse(ExtraModel):
    """
    Data recorded by one frame. Each row is linked to the player who
    produced it.
    """
    player = models.Link(Player)
    frame_id = models.StringField()
    frame_index = models.IntegerField()
    data = models.LongStringField()


def custom_export(players):
    """
    Custom export with one row per frame response.
    """
    # header row
    yield EXPORT_HEADER
    # data content
    for p in players:
        child_id = p.participant.vars.get('CHILD_ID')
        for fr in FrameResponse.filter(player=p):
            yield frame_export_row(p.session.code, p.participant.code, child_id,
                                   p.field_maybe_none('condition_num'), fr.frame_index, fr.frame_id, fr.data)
