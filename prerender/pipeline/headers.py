from typing import Iterable, Mapping, Optional, Sequence, Tuple, Union

HeaderCollection = Union[Mapping[str, str], Iterable[Tuple[str, str]]]

RENDERER_HEADER = "X-Renderer"


def _pairs(headers: Optional[HeaderCollection]) -> Iterable[Tuple[str, str]]:
    if headers is None:
        return ()
    items = getattr(headers, "items", None)
    if callable(items):
        return items()
    return headers


def get_header(headers: Optional[HeaderCollection], name: str) -> Optional[str]:
    """
    Case-insensitive header lookup.

    Repeated fields are combined with ", " in the order they appear. Returns
    None when the header is absent.
    """
    wanted = name.lower()
    values = [value for key, value in _pairs(headers) if key.lower() == wanted]
    if not values:
        return None
    return ", ".join(values)


def forward_headers(
    request_headers: Optional[HeaderCollection], allowlist: Sequence[str]
) -> Tuple[Tuple[str, str], ...]:
    """Copy allowlisted inbound request headers, in allowlist order, verbatim."""
    forwarded = []
    for name in allowlist:
        value = get_header(request_headers, name)
        if value is None:
            continue
        forwarded.append((name, value))
    return tuple(forwarded)


def filter_response_headers(
    render_headers: Optional[HeaderCollection],
    allowlist: Sequence[str],
    renderer_id: str,
) -> Tuple[Tuple[str, str], ...]:
    """
    Project allowlisted renderer response headers onto the client response.

    The X-Renderer marker always comes first. Newlines in values become a
    single space so an upstream value cannot split the response headers.
    """
    filtered = [(RENDERER_HEADER, renderer_id)]
    for name in allowlist:
        value = get_header(render_headers, name)
        if value is None:
            continue
        filtered.append((name, value.replace("\n", " ")))
    return tuple(filtered)
