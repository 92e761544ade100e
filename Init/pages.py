from otree.api import *

from .utils_child import parse_birthday


class InitIDs(Page):
    form_model = 'player'
    form_fields = ['child_birthday']

    def vars_for_template(self):
        p = self.participant
        # Child id from room join (participant_label), or leave NA
        p.vars['CHILD_ID'] = p.label or 'NA'
        return dict(child_id=p.vars['CHILD_ID'])

    def error_message(self, values):
        if parse_birthday(values['child_birthday']) is None:
            return 'Please enter a valid date of birth as YYYY-MM-DD.'

    def before_next_page(self):
        born = parse_birthday(self.player.child_birthday)
        # Stored as ISO text; the randomizer reads participant.vars['birthday']
        self.participant.vars['birthday'] = born.isoformat()


page_sequence = [InitIDs]
