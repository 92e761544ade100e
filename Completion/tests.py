from otree.api import Bot, Submission

from . import pages


class PlayerBot(Bot):
    def play_round(self):
        yield Submission(pages.WrapUpRedirect, check_html=False)
