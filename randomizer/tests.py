from otree.api import Bot, Submission

from . import pages


class PlayerBot(Bot):
    def play_round(self):
        yield pages.InstructionPage

        pvars = self.participant.vars
        frames = pvars['frames']
        assert self.player.frame_count == len(frames) > 0
        assert [f['id'].split('-', 1)[0] for f in frames] == [str(i) for i in range(len(frames))]
        assert self.player.condition_num == pvars['conditionNum']

        if self.session.config['study_filename'] == 'age_weighted_stimuli.json':
            # the Init bot enters a 100-day-old child: weights [1, 0, 1]
            assert pvars['conditionNum'] in (0, 2)
            assert self.player.randomizer_warnings == ''

        yield Submission(pages.FramePlayer, check_html=False)

        # cached: a second call must not redraw the condition
        assert self.player.ensure_frames() == frames


def call_live_method(method, **kwargs):
    reply = method(1, dict(frame_id='0-test-trials', frame_index=0, data={'looked': 'left'}))
    assert reply[1] == dict(ok=True, next_index=1)

    reply = method(1, dict(frame_id='1-test-trials'))
    assert reply[1]['ok'] is False
