from otree.api import Bot, SubmissionMustFail
from datetime import date, timedelta

from . import pages

# Falls in the first age bracket of age_weighted_stimuli.json (0-365 days)
BOT_CHILD_AGE_DAYS = 100


class PlayerBot(Bot):
    def play_round(self):
        born = date.today() - timedelta(days=BOT_CHILD_AGE_DAYS)
        yield SubmissionMustFail(pages.InitIDs, dict(child_birthday='not a date'))
        yield SubmissionMustFail(pages.InitIDs, dict(child_birthday=(date.today() + timedelta(days=3)).isoformat()))
        yield pages.InitIDs, dict(child_birthday=born.isoformat())

        assert self.participant.vars['birthday'] == born.isoformat()
        assert self.participant.vars['CHILD_ID']
