from __future__ import annotations

from collections.abc import Iterable


# Ad-serving / ad-SDK / analytics hostname fragments. Matched as plain
# case-insensitive substrings of the candidate URL.
BLOCKED_URL_FRAGMENTS: tuple[str, ...] = (
    "googlesyndication",
    "doubleclick",
    "googleads",
    "adservice",
    "imasdk",
)


def allow(target_url: str, *, blocked: Iterable[str] = BLOCKED_URL_FRAGMENTS) -> bool:
    """Return False when the URL should not be loaded by a surface.

    Pure textual test: no network, no state. Consulted for every navigation and
    sub-resource request a surface asks about, not only the initial document.
    """

    url = target_url.lower()
    return not any(fragment.lower() in url for fragment in blocked)


def blocked_fragments(extra: Iterable[str] = ()) -> tuple[str, ...]:
    """Built-in deny-list plus any configured additions, without duplicates."""

    out = list(BLOCKED_URL_FRAGMENTS)
    for fragment in extra:
        f = fragment.strip().lower()
        if f and f not in out:
            out.append(f)
    return tuple(out)
