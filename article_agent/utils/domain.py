from __future__ import annotations

import re
from urllib.parse import urlparse

_host_re = re.compile(r"(?:https?://)?(?:www\.)?([^/]+)")


def extract_domain(url: str) -> str:
    """Return the hostname of ``url`` without a leading ``www.``.

    URLs without a scheme are accepted ("example.com/path" -> "example.com").
    """
    url = (url or "").strip()
    if not url:
        return ""
    with_scheme = url if url.startswith("http") else f"https://{url}"
    try:
        host = urlparse(with_scheme).hostname or ""
    except ValueError:
        host = ""
    if host:
        return host[4:] if host.startswith("www.") else host

    match = _host_re.match(url)
    if match and match.group(1):
        return re.sub(r"^www\.", "", match.group(1))
    return re.sub(r"^(?:https?://)?(?:www\.)?", "", url).split("/")[0]
