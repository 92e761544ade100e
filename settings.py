from os import environ

# ---------------------------------------------------------------------
# Defaults inherited by all sessions unless overridden in SESSION_CONFIGS
# ---------------------------------------------------------------------
SESSION_CONFIG_DEFAULTS = dict(
    # label shown in admin
    session_name='frame_player_session',

    # Final wrap-up survey (Completion app redirects here at the very end)
    survey_link=environ.get('WRAPUP_SURVEY_URL', 'https://YOUR-SURVEY-DOMAIN/jfe/form/SV_WRAPUP'),

    # ===== Study definition =====
    # JSON file of the shape {"frames": {frame_id: frame_config}}
    study_filepath='_static/randomizer/studies/',
    study_filename='ingroup_obligations.json',
    # Which entry of "frames" is the random-parameter-set randomizer
    randomizer_frame_id='test-trials',
    # Set to an int to make condition assignment reproducible per participant
    randomizer_seed=environ.get('RANDOMIZER_SEED', ''),

    real_world_currency_per_point=1,
    participation_fee=0.00,
    doc='',
)

# ---------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------
SESSION_CONFIGS = [
    # Full flow: child info -> generated frames -> wrap-up survey
    dict(
        name='frame_player',
        display_name='Frame player (random parameter set)',
        num_demo_participants=1,
        app_sequence=['Init', 'randomizer', 'Completion'],
    ),

    # Minimal smoke test (no redirect; fixed seed)
    dict(
        name='frame_player_min',
        display_name='Frame player (Minimal, seeded)',
        num_demo_participants=2,
        app_sequence=['Init', 'randomizer'],
        randomizer_seed='1234',
    ),

    # Age-bracketed condition weights
    dict(
        name='frame_player_age_weighted',
        display_name='Frame player (age-based weights)',
        num_demo_participants=1,
        app_sequence=['Init', 'randomizer', 'Completion'],
        study_filename='age_weighted_stimuli.json',
    ),
]

# Persisted participant fields (accessible across apps)
PARTICIPANT_FIELDS = [
    # Child identifiers (participant label from the room link)
    'CHILD_ID', 'birthday',
    # Randomizer output
    'conditionNum', 'frames',
]

# ---------------------------------------------------------------------
# Localization & currency
# ---------------------------------------------------------------------
LANGUAGE_CODE = 'en'
REAL_WORLD_CURRENCY_CODE = 'USD'
USE_POINTS = True

# ---------------------------------------------------------------------
# Rooms
# ---------------------------------------------------------------------
ROOMS = [
    # Production room:
    # https://<otree-host>/room/frame_player_room/?participant_label=<child id>
    dict(name='frame_player_room', display_name='Frame Player Room', participant_label_file=None),
    dict(name='live_demo', display_name='Room for live demo (no participant labels)'),
]

# ---------------------------------------------------------------------
# Admin & secrets
# ---------------------------------------------------------------------
ADMIN_USERNAME = 'admin'
ADMIN_PASSWORD = environ.get('OTREE_ADMIN_PASSWORD')
SECRET_KEY = environ.get('SECRET_KEY', 'dev-only-fallback-change-me')

DEMO_PAGE_INTRO_HTML = """
<b>Frame Player</b>
<p>Online developmental-science studies built from declarative frame lists,
with randomized, optionally age-weighted condition assignment.</p>
"""
