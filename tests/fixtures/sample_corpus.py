"""Synthetic corpora with known style statistics."""

from typing import List, Tuple

# 18 words, no passive construction
ACTIVE_SENTENCE = (
    "Teams ship small changes every week because steady feedback keeps product {n} "
    "honest and the roadmap grounded today."
)

# 18 words, passive ("was written", "was checked")
PASSIVE_SENTENCE = (
    "The quarterly report was written by the finance team after every number "
    "was checked against the ledger twice."
)


def style_document(n: int) -> str:
    """Ten sentences of 18 words in two paragraphs, 80% active."""
    first = [ACTIVE_SENTENCE.format(n=n)] * 4 + [PASSIVE_SENTENCE]
    second = [ACTIVE_SENTENCE.format(n=n)] * 4 + [PASSIVE_SENTENCE]
    return " ".join(first) + "\n\n" + " ".join(second)


def style_corpus(count: int = 50) -> List[Tuple[str, str]]:
    """(source, text) pairs of the 18-word, 80%-active corpus."""
    return [(f"essays/essay-{n}.md", style_document(n)) for n in range(count)]


TOPIC_DOCUMENTS = [
    (
        "defi.md",
        "# Decentralized finance\n\n"
        "Lending pools pay depositors interest from borrower fees.\n\n"
        "## Yield farming risks\n\n"
        "Smart contract bugs, impermanent loss and token inflation can erase returns quickly.",
    ),
    (
        "gardening.md",
        "# Spring gardening\n\n"
        "Tomatoes need warm soil and steady watering.\n\n"
        "Mulch keeps weeds down and holds moisture through dry weeks.",
    ),
    (
        "cooking.md",
        "# Weeknight cooking\n\n"
        "A sharp knife and a hot pan make dinner fast.\n\n"
        "Season vegetables early so the salt draws out water before roasting.",
    ),
]
