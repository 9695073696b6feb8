def normalize_page(offset, limit, default_limit=10, max_limit=100):
    """Clamp caller-supplied offset/limit into a usable window."""
    try:
        offset = int(offset)
    except (TypeError, ValueError):
        offset = 0
    try:
        limit = int(limit)
    except (TypeError, ValueError):
        limit = default_limit
    if offset < 0:
        offset = 0
    if limit < 1:
        limit = default_limit
    return offset, min(limit, max_limit)


def pagination_meta(total, offset, limit):
    return {
        'total': total,
        'limit': limit,
        'offset': offset,
        'hasMore': offset + limit < total
    }
