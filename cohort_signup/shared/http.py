import base64
import binascii
import json

REGISTER_METHODS = "GET,POST,OPTIONS"
REGISTER_HEADERS = "Content-Type, Authorization"
WEBHOOK_METHODS = "POST,OPTIONS"
WEBHOOK_HEADERS = "Content-Type"


def cors_headers(methods=REGISTER_METHODS, allow_headers=REGISTER_HEADERS):
    return {
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Methods": methods,
        "Access-Control-Allow-Headers": allow_headers,
    }


def respond(status, body, **cors):
    headers = {"Content-Type": "application/json", **cors_headers(**cors)}
    return {
        "statusCode": status,
        "headers": headers,
        "body": json.dumps(body),
    }


def ok(body=None, **cors):
    return respond(200, {"ok": True, **(body or {})}, **cors)


def fail(status, body, **cors):
    return respond(status, {"ok": False, **body}, **cors)


def preflight(**cors):
    return {
        "statusCode": 204,
        "headers": cors_headers(**cors),
        "body": "",
    }


### Request normalization
#
# API Gateway REST events carry httpMethod/queryStringParameters/body,
# HTTP API and function URL events put the method under requestContext.http,
# and OpenWhisk web actions use __ow_method with a base64 __ow_body and the
# query parameters as top-level arguments.

def request_method(event):
    method = (event.get("httpMethod")
              or ((event.get("requestContext") or {}).get("http") or {}).get("method")
              or event.get("__ow_method")
              or "")
    return method.lower()


def query_params(event):
    if "__ow_method" in event:
        return {k: v for k, v in event.items() if not k.startswith("__ow_")}
    return dict(event.get("queryStringParameters") or {})


def raw_body(event):
    """Returns the request body as text, or None when there is none."""
    if event.get("__ow_body"):
        return base64.b64decode(event["__ow_body"], validate=True).decode("utf-8")
    body = event.get("body")
    if not body:
        return None
    if event.get("isBase64Encoded"):
        return base64.b64decode(body, validate=True).decode("utf-8")
    return body


def json_body(event):
    """Decodes and parses the body. Returns None if it is missing or malformed."""
    try:
        text = raw_body(event)
        if text is None:
            return None
        return json.loads(text or "{}")
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return None


def has_body(event):
    return bool(event.get("__ow_body") or event.get("body"))


def normalize(event):
    """
    Flattens a request into a field mapping.

    GET requests (and POSTs without a body) use the query parameters. POST
    bodies are decoded and parsed as JSON; anything that fails to decode,
    or does not decode to an object, becomes an empty mapping so that the
    caller reports missing fields instead of an error.
    """
    if request_method(event) == "post" and has_body(event):
        data = json_body(event)
        return data if isinstance(data, dict) else {}
    return query_params(event)
