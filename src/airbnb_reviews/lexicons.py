"""Static word -> label lexicons (Bing polarity, NRC emotions)."""

from __future__ import annotations
import logging
from typing import Dict, FrozenSet, Iterable, Iterator, Mapping, Optional, Union
import pandas as pd

logger = logging.getLogger(__name__)

POSITIVE = "positive"
NEGATIVE = "negative"
NRC_EMOTIONS = (
    "anger", "anticipation", "disgust", "fear",
    "joy", "sadness", "surprise", "trust",
)

_EMPTY: FrozenSet[str] = frozenset()


class Lexicon:
    """
    Immutable mapping of lowercase word -> set of labels.

    Lookups are plain dict hits; a word outside the lexicon maps to the empty
    set, so it contributes nothing to any count.
    """

    def __init__(self, name: str, entries: Mapping[str, Union[str, Iterable[str]]]):
        table: Dict[str, FrozenSet[str]] = {}
        for word, labels in entries.items():
            if isinstance(labels, str):
                labels = (labels,)
            key = str(word).strip().lower()
            if not key:
                continue
            table[key] = table.get(key, _EMPTY) | frozenset(str(l).strip().lower() for l in labels)
        if not table:
            raise ValueError(f"Lexicon '{name}' has no entries")
        self.name = name
        self._table = table

    @classmethod
    def from_frame(cls, df: pd.DataFrame, name: str,
                   word_col: str = "word", label_col: str = "sentiment") -> "Lexicon":
        miss = {word_col, label_col} - set(df.columns)
        if miss:
            raise ValueError(f"Lexicon frame missing columns: {miss}. Found: {list(df.columns)}")
        sub = df[[word_col, label_col]].dropna()
        entries: Dict[str, set] = {}
        for word, label in zip(sub[word_col].astype(str), sub[label_col].astype(str)):
            entries.setdefault(word, set()).add(label)
        return cls(name, entries)

    def labels(self, word: str) -> FrozenSet[str]:
        return self._table.get(word, _EMPTY)

    def words_for(self, label: str) -> FrozenSet[str]:
        return frozenset(w for w, ls in self._table.items() if label in ls)

    @property
    def label_set(self) -> FrozenSet[str]:
        out = set()
        for ls in self._table.values():
            out |= ls
        return frozenset(out)

    def to_frame(self) -> pd.DataFrame:
        rows = [(w, l) for w, ls in self._table.items() for l in sorted(ls)]
        return pd.DataFrame(rows, columns=["word", "label"])

    def __contains__(self, word) -> bool:
        return word in self._table

    def __len__(self) -> int:
        return len(self._table)

    def __iter__(self) -> Iterator[str]:
        return iter(self._table)

    def __repr__(self) -> str:
        return f"Lexicon({self.name!r}, words={len(self)}, labels={sorted(self.label_set)})"


def load_lexicon_csv(path, name: str, word_col: str = "word", label_col: str = "sentiment") -> Lexicon:
    """Load a tidy `word,<label>` CSV such as a tidytext `get_sentiments()` export."""
    lex = Lexicon.from_frame(pd.read_csv(path), name, word_col=word_col, label_col=label_col)
    logger.info("Loaded %s lexicon: %d words from %s", name, len(lex), path)
    return lex


def load_bing(path: Optional[str] = None) -> Lexicon:
    """
    Bing (Hu & Liu) polarity lexicon.

    With a path, reads a `word,sentiment` CSV. Without one, reads NLTK's
    `opinion_lexicon` corpus; a missing corpus raises LookupError
    (run `nltk.download("opinion_lexicon")`).
    """
    if path is not None:
        return load_lexicon_csv(path, "bing")

    from nltk.corpus import opinion_lexicon

    entries: Dict[str, set] = {}
    for w in opinion_lexicon.positive():
        entries.setdefault(w, set()).add(POSITIVE)
    for w in opinion_lexicon.negative():
        entries.setdefault(w, set()).add(NEGATIVE)
    lex = Lexicon("bing", entries)
    logger.info("Loaded bing lexicon from NLTK corpus: %d words", len(lex))
    return lex


def load_nrc(path) -> Lexicon:
    """
    NRC Emotion Lexicon, word-level file: `word<TAB>emotion<TAB>0|1`.
    Only associations flagged 1 are kept.
    """
    df = pd.read_csv(path, sep="\t", header=None, names=["word", "emotion", "flag"],
                     keep_default_na=False, dtype={"word": str, "emotion": str})
    df = df[pd.to_numeric(df["flag"], errors="coerce") == 1]
    lex = Lexicon.from_frame(df, "nrc", word_col="word", label_col="emotion")
    logger.info("Loaded nrc lexicon: %d words from %s", len(lex), path)
    return lex
