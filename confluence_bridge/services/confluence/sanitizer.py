"""Storage-format fragment → plain text.

Rich-content blocks are removed whole before text extraction so their
nested markup cannot leak partial text into the result.
"""
import re

from bs4 import BeautifulSoup

# Removed entirely, in this order
BLOCK_TAGS = ("ac:task-list", "ac:link")

_NBSP = ("\xa0", "&nbsp;")
_WHITESPACE = re.compile(r"\s+")


def remove_blocks(soup: BeautifulSoup) -> BeautifulSoup:
    """Drop task-list and link blocks including everything nested in them."""
    for name in BLOCK_TAGS:
        for block in soup.find_all(name):
            # Already gone if it sat inside an earlier block
            if not block.decomposed:
                block.decompose()
    return soup


def sanitize_fragment(fragment: str) -> str:
    """Return the cleaned plain text of a markup fragment.

    Never raises. An unclosed block runs to the end of the fragment.
    """
    if not fragment:
        return ""
    soup = remove_blocks(BeautifulSoup(fragment, "html.parser"))
    text = soup.get_text()
    for nbsp in _NBSP:
        text = text.replace(nbsp, " ")
    return _WHITESPACE.sub(" ", text).strip()
