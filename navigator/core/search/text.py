"""Tokenizing free-text queries the way the full-text index sees them"""

import re
from typing import FrozenSet, List

_TERM_RE = re.compile(r"\w+", re.UNICODE)

# PostgreSQL's 'english' configuration drops these (snowball english.stop)
STOP_WORDS: FrozenSet[str] = frozenset("""
i me my myself we our ours ourselves you your yours yourself yourselves he
him his himself she her hers herself it its itself they them their theirs
themselves what which who whom this that these those am is are was were be
been being have has had having do does did doing a an the and but if or
because as until while of at by for with about against between into through
during before after above below to from up down in out on off over under
again further then once here there when where why how all any both each few
more most other some such no nor not only own same so than too very s t can
will just don should now
""".split())


def text_terms(query: str) -> List[str]:
    """Lower-cased word terms of a free-text query, stop words removed."""
    return [
        term
        for term in (t.lower() for t in _TERM_RE.findall(query or ""))
        if term not in STOP_WORDS
    ]
