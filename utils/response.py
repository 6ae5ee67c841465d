from flask import jsonify


def json_response(message="success", data=None, code=200, details=None):
    body = {"code": code, "message": message, "data": data}
    if code >= 400:
        body["error"] = message
        if details:
            body["details"] = list(details)
    resp = jsonify(body)
    resp.status_code = code
    return resp
