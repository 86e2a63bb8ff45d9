"""Case preservation for replacement text."""

__version__ = "1.0.0"


def match_case(replacement: str, original: str) -> str:
    """
    Shape replacement after the casing of the token it replaces.

    Fully upper-case original -> upper-case replacement; capitalized
    original -> capitalize only the replacement's first letter; anything
    else leaves the replacement as given.

    A one-letter upper-case original ("A") is fully upper-case. Callers
    that replace a sentence-initial article shape it themselves.
    """
    if not replacement or not original:
        return replacement
    if original.isupper():
        return replacement.upper()
    if original[0].isupper():
        return replacement[0].upper() + replacement[1:]
    return replacement
