from api._shared import SETTINGS, Settings, make_code_validator


def make_handler(settings: Settings):
    return make_code_validator('Validate guest code', settings.guest_access_code,
                               'Invalid access code', settings)


handler = make_handler(SETTINGS)
