from flask import current_app, request

from roomportal.errors import InvalidInterval, InvalidRequest
from roomportal.utils.dates import parse_timestamp
from roomportal.utils.pagination import normalize_page


def json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidRequest('No input data provided')
    return data


def timestamp_field(data, key, required=True):
    try:
        value = parse_timestamp(data.get(key))
    except (TypeError, ValueError):
        raise InvalidInterval(f"'{key}' is not a valid ISO-8601 timestamp")
    if value is None and required:
        raise InvalidInterval(f"'{key}' is required")
    return value


def int_field(data, key, required=True):
    value = data.get(key)
    if value is None or value == '':
        if required:
            raise InvalidRequest(f"'{key}' is required")
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidRequest(f"'{key}' must be an integer")


def page_args():
    """offset/limit from the query string, clamped to the configured page sizes."""
    return normalize_page(
        request.args.get('offset', 0),
        request.args.get('limit', current_app.config['DEFAULT_PAGE_SIZE']),
        default_limit=current_app.config['DEFAULT_PAGE_SIZE'],
        max_limit=current_app.config['MAX_PAGE_SIZE'],
    )
