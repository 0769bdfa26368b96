import math

from flask import request


def json_body():
    """Request JSON as a dict; anything else (missing, list, malformed) becomes {}."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def int_arg(name, default, minimum=1, maximum=None):
    """Integer query arg; values that don't parse or fall outside the range use ``default``."""
    value = to_number(request.args.get(name))
    if value is None:
        return default
    value = int(value)
    if value < minimum or (maximum is not None and value > maximum):
        return default
    return value


def to_number(value, default=None):
    if value is None or value == "" or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


def positive_id(value):
    number = to_number(value)
    if number is None or number <= 0 or number != int(number):
        return None
    return int(number)
