from otree.api import *
from urllib.parse import urlencode


class WrapUpRedirect(Page):
    def vars_for_template(self):
        p = self.participant
        s = self.session
        wrap_base = s.config.get('survey_link')  # final wrap-up survey link from settings
        params = dict(
            CHILD_ID=p.vars.get('CHILD_ID', 'NA'),
            session=p.code,
            conditionNum=p.vars.get('conditionNum', 'NA'),
        )
        q_url = f"{wrap_base}?{urlencode(params)}"
        return dict(q_url=q_url)


page_sequence = [WrapUpRedirect]
