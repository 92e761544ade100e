from otree.api import *


class InstructionPage(Page):
    def is_displayed(self):
        return self.round_number == 1

    def vars_for_template(self):
        # Generate here so a configuration error shows up before the first frame
        frames = self.player.ensure_frames()
        return dict(frame_count=len(frames))


class FramePlayer(Page):
    live_method = 'live_frame_report'

    def js_vars(self):
        """
        Pass the generated frames to the javascript frame player
        """
        frames = self.player.ensure_frames()
        return dict(
            frames=frames,
            conditionNum=self.player.condition_num,
        )


page_sequence = [
    InstructionPage,
    FramePlayer,
]
