"""
HTML sanitization for user-supplied free text.

Only a small set of formatting tags survives. Disallowed tags are unwrapped
(their text is kept) except for tags whose content is executable or embedded,
which are removed entirely.
"""

from typing import Optional

from bs4 import BeautifulSoup, Comment

ALLOWED_TAGS = frozenset(
    {"b", "i", "em", "strong", "p", "br", "a", "ul", "ol", "li", "h1", "h2", "h3"}
)
ALLOWED_ATTRIBUTES = frozenset({"href", "target"})

# Dropped along with everything inside them
DROPPED_TAGS = frozenset(
    {"script", "style", "iframe", "object", "embed", "noscript", "template", "svg", "math"}
)

SAFE_URL_SCHEMES = ("http:", "https:", "mailto:", "#", "/")


def _is_safe_href(value: str) -> bool:
    compact = "".join(value.split()).lower()
    if ":" not in compact.split("/")[0]:
        # Relative reference
        return True
    return compact.startswith(SAFE_URL_SCHEMES)


def sanitize_html(html: Optional[str]) -> str:
    """
    Strip disallowed markup from ``html``.

    Returns an empty string for ``None`` or empty input.
    """
    if not html:
        return ""

    soup = BeautifulSoup(html, "html.parser")

    for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
        comment.extract()

    for tag in soup.find_all(list(DROPPED_TAGS)):
        # Nested dropped tags go away with their parent
        if not getattr(tag, "decomposed", False):
            tag.decompose()

    for tag in soup.find_all(True):
        if tag.name not in ALLOWED_TAGS:
            tag.unwrap()
            continue

        for attr in list(tag.attrs):
            if attr not in ALLOWED_ATTRIBUTES:
                del tag.attrs[attr]

        href = tag.attrs.get("href")
        if href is not None and not _is_safe_href(str(href)):
            del tag.attrs["href"]

    return str(soup)
