"""Text normalisation shared by the matcher and the resolver."""

import re

_TOKEN_RE = re.compile(r"[^\W_]+")

STOP_WORDS: frozenset[str] = frozenset(
    {
        "a", "about", "all", "an", "and", "any", "are", "as", "at", "be",
        "been", "but", "by", "can", "could", "do", "does", "for", "from",
        "has", "have", "how", "i", "if", "in", "into", "is", "it", "its",
        "me", "my", "of", "on", "or", "our", "please", "should", "so",
        "that", "the", "their", "them", "then", "there", "these", "this",
        "to", "up", "us", "use", "used", "using", "was", "we", "what",
        "when", "where", "which", "while", "who", "will", "with", "would",
        "you", "your",
    }
)


def tokenize(text: str, stop_words: frozenset[str] = STOP_WORDS) -> list[str]:
    """Casefold ``text``, strip punctuation and drop stop words.

    Token order and repetition are preserved; callers that need a term
    set dedupe themselves.

    >>> tokenize("Deploy to AWS, using ECS!")
    ['deploy', 'aws', 'ecs']
    """
    return [tok for tok in _TOKEN_RE.findall(text.casefold()) if tok not in stop_words]


def identifier_terms(identifier: str) -> frozenset[str]:
    """Split a skill identifier like ``aws-architect`` into its terms."""
    return frozenset(_TOKEN_RE.findall(identifier.casefold()))


def mention_pattern(identifier: str) -> re.Pattern[str]:
    """Build a pattern that finds ``identifier`` as a whole word in a request.

    Identifier characters (letters, digits, ``-``, ``_``, ``.``) may not
    touch the match on either side, so ``react-expert`` is not found inside
    ``react-expert-v2``.
    """
    return re.compile(
        rf"(?<![\w.-]){re.escape(identifier.lower())}(?![\w-]|\.\w)",
    )


def find_mention(request: str, identifier: str) -> int:
    """Return the offset of the first explicit mention of ``identifier``.

    Returns:
        The character offset in ``request``, or -1 when not mentioned.
    """
    match = mention_pattern(identifier).search(request.lower())
    return match.start() if match else -1
