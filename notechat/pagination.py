MAX_PAGE_SIZE = 100


def _positive_int(value, default):
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


def parse_page_params(params, default_limit):
    """
    Read ``page`` and ``limit`` from a query dict.

    Missing or malformed values fall back to page 1 and ``default_limit``;
    the limit is capped at MAX_PAGE_SIZE.
    """
    page = _positive_int(params.get('page'), 1)
    limit = min(_positive_int(params.get('limit'), default_limit), MAX_PAGE_SIZE)
    return page, limit
