"""
Lorem ipsum filler shaped like existing text.
"""

import random
import re

LOREM_WORDS = (
    "lorem ipsum dolor sit amet consectetur adipiscing elit sed do eiusmod tempor "
    "incididunt ut labore et dolore magna aliqua enim ad minim veniam quis nostrud "
    "exercitation ullamco laboris nisi aliquip ex ea commodo consequat duis aute irure "
    "in reprehenderit voluptate velit esse cillum fugiat nulla pariatur excepteur sint "
    "occaecat cupidatat non proident sunt culpa qui officia deserunt mollit anim id est "
    "laborum"
).split()

_TOKEN = re.compile(r"(\s+)")
_TRAILING_PUNCTUATION = re.compile(r"[^\w]+$")


class LoremGenerator:
    """Produces filler text mirroring the shape of the text it replaces.

    Args:
        seed: Seed for reproducible output (None for random)
    """

    def __init__(self, seed: int | None = None) -> None:
        self._random = random.Random(seed)

    def word(self) -> str:
        """A single random lorem ipsum word."""
        return self._random.choice(LOREM_WORDS)

    def _shaped_word(self, original: str) -> str:
        if not any(ch.isalnum() for ch in original):
            return original

        punctuation = _TRAILING_PUNCTUATION.search(original)
        word = self.word()
        if original[0].isupper():
            word = word.capitalize()
        if punctuation:
            word += punctuation.group(0)
        return word

    def shaped_like(self, text: str) -> str:
        """Replace every word of ``text`` with a lorem ipsum word.

        Whitespace (including leading and trailing whitespace) is kept
        as-is, so the word count and spacing of the original survive.
        Capitalized words stay capitalized and trailing punctuation is
        carried over.
        """
        if not text.strip():
            return text

        return "".join(
            token if not token or token.isspace() else self._shaped_word(token)
            for token in _TOKEN.split(text)
        )
