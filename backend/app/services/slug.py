"""Slug generation for category names and post titles"""
import re

# Whitespace as JavaScript defines \s, so slugs match the ones the front-end
# generates. Python's \s also takes \x1c-\x1f and \x85 but not \ufeff.
_SPACE = r"\t\n\v\f\r \u00a0\u1680\u2000-\u200a\u2028\u2029\u202f\u205f\u3000\ufeff"

_DISALLOWED = re.compile(rf"[^a-z0-9{_SPACE}-]")
_WHITESPACE = re.compile(rf"[{_SPACE}]+")
_HYPHENS = re.compile(r"-+")
_EDGE_HYPHENS = re.compile(r"^-+|-+$")

MAX_SLUG_LENGTH = 255


def slugify(text: str) -> str:
    """Turn arbitrary text into a lowercase, hyphen-delimited URL segment.

    Characters other than a-z, 0-9, whitespace and hyphens are dropped (not
    transliterated), so "Café Culture" becomes "caf-culture". The result is
    empty when nothing survives.
    """
    slug = text.lower()
    slug = _DISALLOWED.sub("", slug)
    slug = _WHITESPACE.sub("-", slug)
    slug = _HYPHENS.sub("-", slug)
    return _EDGE_HYPHENS.sub("", slug)
