"""Word frequency over a fixed sentence."""
import re
from collections import Counter

SENTENCE = "Belajar Golang adalah belajar membuat backend yang scalable dengan Golang"

_NON_WORD_RE = re.compile(r"\W", re.ASCII)


def count_word_frequency(text: str) -> dict[str, int]:
    """
    Count lowercase words in *text*, in order of first appearance.

    Punctuation is stripped from each whitespace-separated token; tokens
    left empty are skipped.
    """
    words = (_NON_WORD_RE.sub("", token) for token in text.lower().split())
    return dict(Counter(word for word in words if word))


def main():
    print(count_word_frequency(SENTENCE))


if __name__ == "__main__":
    main()
