from api._shared import GET_METHODS, SETTINGS, Settings, guarded, json_response


def make_handler(settings: Settings):
    # Ultra-light health check, never touches upstream or secrets
    @guarded('Ping', settings, GET_METHODS)
    def handler(request):
        return json_response({"ok": True}, 200, GET_METHODS)

    return handler


handler = make_handler(SETTINGS)
