from __future__ import annotations
import logging
from typing import List, Optional, Sequence, Union
import numpy as np
import pandas as pd
from sklearn.feature_extraction.text import CountVectorizer

from .lexicons import Lexicon, NEGATIVE, POSITIVE

logger = logging.getLogger(__name__)

Keys = Union[str, Sequence[str]]
SCORE_COLUMNS = [POSITIVE, NEGATIVE, "sentiment_score", "n_matched", "n_tokens"]


def _keys(by: Keys) -> List[str]:
    return [by] if isinstance(by, str) else list(by)


def match_tokens(tokens: pd.DataFrame, lexicon: Lexicon) -> pd.DataFrame:
    """
    Tag tokens with lexicon labels: one row per (token, label).
    Tokens with no entry are dropped; a word with several labels yields several rows.
    """
    labels = tokens["word"].map(lambda w: sorted(lexicon.labels(w)))
    out = tokens.assign(label=labels).explode("label")
    return out[out["label"].notna()].reset_index(drop=True)


def sentiment_scores(tokens: pd.DataFrame, bing: Lexicon, by: Keys = "year_month") -> pd.DataFrame:
    """
    Positive / negative counts per group and sentiment_score = positive - negative.

    Every group present in `tokens` gets a row, so a group whose tokens matched
    nothing scores 0 with n_matched == 0. Rows with a null key are excluded.
    """
    keys = _keys(by)
    base = tokens.dropna(subset=keys)
    n_tokens = base.groupby(keys).size().rename("n_tokens")

    matched = match_tokens(base, bing)
    matched[POSITIVE] = (matched["label"] == POSITIVE).astype(int)
    matched[NEGATIVE] = (matched["label"] == NEGATIVE).astype(int)
    counts = matched.groupby(keys)[[POSITIVE, NEGATIVE]].sum()

    out = n_tokens.to_frame().join(counts, how="left").fillna(0)
    out[[POSITIVE, NEGATIVE, "n_tokens"]] = out[[POSITIVE, NEGATIVE, "n_tokens"]].astype(int)
    out["sentiment_score"] = out[POSITIVE] - out[NEGATIVE]
    out["n_matched"] = out[POSITIVE] + out[NEGATIVE]
    return out[SCORE_COLUMNS].reset_index().sort_values(keys).reset_index(drop=True)


def emotion_counts(tokens: pd.DataFrame, nrc: Lexicon, by: Optional[Keys] = None,
                   emotions_only: bool = True) -> pd.DataFrame:
    """Count NRC-tagged tokens per emotion (and per key when `by` is given)."""
    keys = [] if by is None else _keys(by)
    base = tokens.dropna(subset=keys) if keys else tokens
    matched = match_tokens(base, nrc)
    if emotions_only:
        matched = matched[~matched["label"].isin([POSITIVE, NEGATIVE])]
    out = (matched.groupby(keys + ["label"]).size()
                  .rename("n")
                  .reset_index()
                  .rename(columns={"label": "emotion"}))
    return out.sort_values(keys + ["n"], ascending=[True] * len(keys) + [False]).reset_index(drop=True)


def review_sentiment(reviews: pd.DataFrame, tokens: pd.DataFrame, bing: Lexicon) -> pd.DataFrame:
    """Per-review scores for every review, including ones that produced no tokens."""
    scores = sentiment_scores(tokens, bing, by="review_id").drop(columns="n_tokens")
    keep = [c for c in ["review_id", "listing_id", "reviewer_id", "year_month", "review_length"]
            if c in reviews.columns]
    out = reviews[keep].merge(scores, on="review_id", how="left")
    cols = [POSITIVE, NEGATIVE, "sentiment_score", "n_matched"]
    out[cols] = out[cols].fillna(0).astype(int)
    return out


def monthly_volume(reviews: pd.DataFrame) -> pd.DataFrame:
    return (reviews.dropna(subset=["year_month"])
                   .groupby("year_month").size()
                   .rename("reviews")
                   .reset_index())


def word_counts(tokens: pd.DataFrame, top_n: int = 20) -> pd.DataFrame:
    counts = tokens["word"].value_counts()
    return counts.head(top_n).rename_axis("word").reset_index(name="n")


def sentiment_word_counts(tokens: pd.DataFrame, bing: Lexicon, top_n: int = 10) -> pd.DataFrame:
    """Top contributing words per polarity."""
    matched = match_tokens(tokens, bing)
    matched = matched[matched["label"].isin([POSITIVE, NEGATIVE])]
    counts = matched.groupby(["label", "word"]).size().rename("n").reset_index()
    counts = counts.sort_values(["label", "n", "word"], ascending=[True, False, True])
    out = counts.groupby("label").head(top_n).rename(columns={"label": "sentiment"})
    return out.reset_index(drop=True)


def _as_is(doc):
    return doc


def tf_idf(tokens: pd.DataFrame, by: str = "year_month", top_n: Optional[int] = None) -> pd.DataFrame:
    """
    Term weights per document, one document per value of `by`:
      tf = n / terms in document, idf = ln(documents / documents containing term)
    A term used in every document gets tf_idf == 0.
    """
    base = tokens.dropna(subset=[by])
    docs = base.groupby(by)["word"].agg(list)
    if docs.empty:
        return pd.DataFrame(columns=[by, "word", "n", "tf", "idf", "tf_idf"])

    vec = CountVectorizer(analyzer=_as_is)
    X = vec.fit_transform(docs.tolist()).tocoo()
    vocab = vec.get_feature_names_out()

    out = pd.DataFrame({
        by: np.asarray(docs.index)[X.row],
        "word": vocab[X.col],
        "n": X.data.astype(int),
    })
    total = out.groupby(by)["n"].transform("sum")
    doc_freq = out.groupby("word")[by].transform("size")
    out["tf"] = out["n"] / total
    out["idf"] = np.log(len(docs) / doc_freq)
    out["tf_idf"] = out["tf"] * out["idf"]

    out = out.sort_values([by, "tf_idf", "word"], ascending=[True, False, True])
    if top_n is not None:
        out = out.groupby(by).head(top_n)
    return out.reset_index(drop=True)
