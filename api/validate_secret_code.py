from api._shared import SETTINGS, Settings, make_code_validator


def make_handler(settings: Settings):
    return make_code_validator('Validate secret code', settings.secret_code,
                               'Invalid secret code', settings)


handler = make_handler(SETTINGS)
