from otree.api import *

doc = """
Captures the child's id and birth date before the study frames are generated.
"""


class Constants(BaseConstants):
    name_in_url = 'init'
    players_per_group = None
    num_rounds = 1


class Subsession(BaseSubsession):
    pass


class Group(BaseGroup):
    pass


class Player(BasePlayer):
    child_birthday = models.StringField(label="Your child's date of birth (YYYY-MM-DD)")
