from __future__ import annotations
import logging
import re
from typing import Iterable, Optional
import pandas as pd
from sklearn.feature_extraction.text import ENGLISH_STOP_WORDS

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ["listing_id", "reviewer_id", "date", "comments"]
TOKEN_KEYS = ["review_id", "listing_id", "reviewer_id", "year_month"]

_APOSTROPHE_RX = re.compile(r"['’`]")
_NON_WORD_RX = re.compile(r"[^\w\s]|[_\d]")
_SPACE_RX = re.compile(r"\s+")

# Airbnb inserts these when a host cancels; they are not guest opinions.
AUTOMATED_RX = re.compile(
    r"(?i)(?:this is an automated posting|^\s*the host canceled (?:this|the) reservation)"
)


def normalize_text(s) -> str:
    """Lowercase, drop apostrophes, blank out punctuation and numerals, collapse spaces."""
    if s is None or (not isinstance(s, str) and pd.isna(s)):
        return ""
    s = str(s).lower()
    s = _APOSTROPHE_RX.sub("", s)
    # \d misses superscripts and vulgar fractions (², ½)
    s = "".join(" " if ch.isnumeric() else ch for ch in s)
    s = _NON_WORD_RX.sub(" ", s)
    return _SPACE_RX.sub(" ", s).strip()


def load_reviews(path) -> pd.DataFrame:
    """
    Load the reviews CSV and normalize required column names:
      listing_id, reviewer_id, date, comments
    (case-insensitive). Adds a stable `review_id` before any row is dropped.
    """
    df = pd.read_csv(path)
    cols = {str(c).strip().lower(): c for c in df.columns}
    missing = [r for r in REQUIRED_COLUMNS if r not in cols]
    if missing:
        raise ValueError(f"CSV is missing required columns: {missing}. Found: {list(df.columns)}")
    df = df.rename(columns={cols[r]: r for r in REQUIRED_COLUMNS})
    df.insert(0, "review_id", range(len(df)))
    logger.info("Loaded %d reviews from %s", len(df), path)
    return df


def drop_missing_comments(df: pd.DataFrame) -> pd.DataFrame:
    """Drop rows whose comment is null or only whitespace. Idempotent."""
    txt = df["comments"]
    keep = txt.notna() & txt.fillna("").astype(str).str.strip().ne("")
    dropped = int((~keep).sum())
    if dropped:
        logger.info("Dropped %d reviews with no comment text", dropped)
    return df.loc[keep].copy()


def drop_automated_postings(df: pd.DataFrame) -> pd.DataFrame:
    """Drop system-generated host-cancellation notices."""
    is_auto = df["comments"].fillna("").astype(str).str.contains(AUTOMATED_RX, na=False)
    dropped = int(is_auto.sum())
    if dropped:
        logger.info("Dropped %d automated postings", dropped)
    return df.loc[~is_auto].copy()


def enrich(df: pd.DataFrame) -> pd.DataFrame:
    """
    Add derived columns:
      review_date (NaT when unparseable), year_month ("YYYY-MM" or null),
      comment_clean (normalized text), review_length (characters in the raw comment)
    """
    out = df.copy()

    date_norm = out["date"].astype(str).str.strip()
    out["review_date"] = pd.to_datetime(date_norm, format="%Y-%m-%d", errors="coerce")
    out["year_month"] = out["review_date"].dt.strftime("%Y-%m")
    bad_dates = int(out["review_date"].isna().sum())
    if bad_dates:
        logger.warning("%d reviews have an unparseable date; year_month left null", bad_dates)

    out["comment_clean"] = out["comments"].map(normalize_text).astype(str)
    out["review_length"] = out["comments"].fillna("").astype(str).str.len().astype(float)
    return out


def prepare_reviews(df: pd.DataFrame, drop_automated: bool = True) -> pd.DataFrame:
    out = drop_missing_comments(df)
    if drop_automated:
        out = drop_automated_postings(out)
    return enrich(out)


def tokenize(df: pd.DataFrame, stop_words: Optional[Iterable[str]] = ENGLISH_STOP_WORDS) -> pd.DataFrame:
    """
    One row per word of `comment_clean`, carrying review_id / listing_id /
    reviewer_id / year_month back-references. Stop words are removed.
    """
    if "comment_clean" not in df.columns:
        raise ValueError("tokenize() needs enriched reviews; call enrich() first")
    stop = frozenset(stop_words) if stop_words is not None else frozenset()

    tok = df[TOKEN_KEYS + ["comment_clean"]].copy()
    tok["word"] = tok["comment_clean"].astype(str).str.split()
    tok = tok.drop(columns="comment_clean").explode("word")
    tok = tok[tok["word"].notna() & ~tok["word"].isin(stop)]
    tok = tok.reset_index(drop=True)
    logger.info("Tokenized %d reviews into %d tokens", len(df), len(tok))
    return tok
