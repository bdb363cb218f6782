# --- utils/api.py ---
from flask import request


def api_ok(message=None, data=None):
    body = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = data
    return body


def api_error(message, error=None):
    body = {"success": False, "message": message}
    if error:
        body["error"] = error
    return body


def json_body():
    # a JSON array or scalar body is treated like an empty object
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}
