"""Tests for lexicon scoring and aggregation."""

import math

import numpy as np
import pandas as pd
import pytest

from airbnb_reviews.data_prep import enrich, tokenize
from airbnb_reviews.lexicons import Lexicon
from airbnb_reviews.metrics import (
    emotion_counts,
    match_tokens,
    monthly_volume,
    review_sentiment,
    sentiment_scores,
    sentiment_word_counts,
    tf_idf,
    word_counts,
)

BING = Lexicon("bing", {
    "clean": "positive",
    "quiet": "positive",
    "safe": "positive",
    "great": "positive",
    "dirty": "negative",
    "noisy": "negative",
})

NRC = Lexicon("nrc", {
    "happy": ["joy", "positive", "trust"],
    "abandon": ["fear", "sadness", "negative"],
    "clean": ["positive"],
})


def make_tokens(rows):
    """rows: list of (review_id, listing_id, reviewer_id, year_month, word)."""
    return pd.DataFrame(rows, columns=["review_id", "listing_id", "reviewer_id", "year_month", "word"])


def make_reviews(rows):
    df = pd.DataFrame(rows, columns=["listing_id", "reviewer_id", "date", "comments"])
    df.insert(0, "review_id", range(len(df)))
    return df


class TestMatchTokens:
    """Tests for match_tokens()."""

    def test_unmatched_tokens_dropped(self):
        tokens = make_tokens([(0, 1, 1, "2020-01", w) for w in ["clean", "sofa", "dirty"]])
        matched = match_tokens(tokens, BING)
        assert matched["word"].tolist() == ["clean", "dirty"]
        assert matched["label"].tolist() == ["positive", "negative"]

    def test_multi_label_word_yields_one_row_per_label(self):
        tokens = make_tokens([(0, 1, 1, "2020-01", "happy")])
        matched = match_tokens(tokens, NRC)
        assert sorted(matched["label"]) == ["joy", "positive", "trust"]


class TestSentimentScores:
    """Tests for sentiment_scores()."""

    def test_example_comment_scores_three(self):
        reviews = enrich(make_reviews([(1, 10, "2019-05-03", "Clean, quiet, and SAFE!!")]))
        scores = sentiment_scores(tokenize(reviews), BING, by="review_id")
        row = scores.iloc[0]
        assert row["positive"] == 3
        assert row["negative"] == 0
        assert row["sentiment_score"] == 3

    def test_score_is_positive_minus_negative(self):
        words = ["great"] * 10 + ["dirty"] * 3 + ["house"] * 5
        tokens = make_tokens([(0, 1, 1, "2020-01", w) for w in words])
        row = sentiment_scores(tokens, BING, by="year_month").iloc[0]
        assert row["positive"] == 10
        assert row["negative"] == 3
        assert row["sentiment_score"] == 7
        assert row["n_matched"] == 13
        assert row["n_tokens"] == 18

    def test_group_without_matches_scores_zero(self):
        tokens = make_tokens([
            (0, 1, 1, "2020-01", "clean"),
            (1, 2, 2, "2020-01", "sofa"),
        ])
        scores = sentiment_scores(tokens, BING, by="listing_id").set_index("listing_id")
        assert scores.loc[2, "sentiment_score"] == 0
        assert scores.loc[2, "n_matched"] == 0
        assert scores.loc[2, "n_tokens"] == 1
        assert not scores.isna().any().any()

    def test_null_time_bucket_excluded(self):
        tokens = make_tokens([
            (0, 1, 1, "2020-01", "clean"),
            (1, 1, 2, None, "dirty"),
        ])
        monthly = sentiment_scores(tokens, BING, by="year_month")
        assert monthly["year_month"].tolist() == ["2020-01"]
        # the same token still counts for its listing
        listing = sentiment_scores(tokens, BING, by="listing_id").iloc[0]
        assert listing["positive"] == 1
        assert listing["negative"] == 1
        assert listing["sentiment_score"] == 0

    def test_multiple_keys(self):
        tokens = make_tokens([
            (0, 1, 1, "2020-01", "clean"),
            (1, 1, 2, "2020-02", "noisy"),
            (2, 2, 3, "2020-01", "great"),
        ])
        scores = sentiment_scores(tokens, BING, by=["listing_id", "year_month"])
        assert len(scores) == 3
        assert scores["sentiment_score"].tolist() == [1, -1, 1]

    def test_empty_tokens(self):
        scores = sentiment_scores(make_tokens([]), BING, by="year_month")
        assert scores.empty
        assert "sentiment_score" in scores.columns


class TestEmotionCounts:
    """Tests for emotion_counts()."""

    def setup_method(self):
        self.tokens = make_tokens([
            (0, 1, 1, "2020-01", "happy"),
            (1, 1, 2, "2020-01", "happy"),
            (2, 2, 3, "2020-02", "abandon"),
            (3, 2, 3, "2020-02", "clean"),
        ])

    def test_totals_exclude_polarity_labels(self):
        out = emotion_counts(self.tokens, NRC).set_index("emotion")["n"]
        assert out.to_dict() == {"joy": 2, "trust": 2, "fear": 1, "sadness": 1}

    def test_include_polarity_labels(self):
        out = emotion_counts(self.tokens, NRC, emotions_only=False).set_index("emotion")["n"]
        assert out["positive"] == 3
        assert out["negative"] == 1

    def test_grouped_by_key(self):
        out = emotion_counts(self.tokens, NRC, by="year_month")
        feb = out[out["year_month"] == "2020-02"]
        assert set(feb["emotion"]) == {"fear", "sadness"}


class TestReviewSentiment:
    """Tests for review_sentiment()."""

    def test_every_review_scored(self):
        reviews = enrich(make_reviews([
            (1, 10, "2020-01-01", "Clean and quiet"),
            (1, 11, "2020-01-05", "Dirty, noisy, but great"),
            (2, 10, "2020-02-01", "The the the"),
        ]))
        out = review_sentiment(reviews, tokenize(reviews), BING)
        assert out["sentiment_score"].tolist() == [2, -1, 0]
        assert out["n_matched"].tolist() == [2, 3, 0]
        assert "review_length" in out.columns


def test_monthly_volume_skips_null_bucket():
    reviews = enrich(make_reviews([
        (1, 10, "2020-01-01", "a"),
        (1, 11, "2020-01-09", "b"),
        (1, 12, "bad", "c"),
        (1, 13, "2020-03-01", "d"),
    ]))
    vol = monthly_volume(reviews)
    assert vol.to_dict("records") == [
        {"year_month": "2020-01", "reviews": 2},
        {"year_month": "2020-03", "reviews": 1},
    ]


def test_word_counts_top_n():
    tokens = make_tokens([(0, 1, 1, "2020-01", w) for w in ["host", "host", "view", "host", "view", "bed"]])
    out = word_counts(tokens, top_n=2)
    assert out["word"].tolist() == ["host", "view"]
    assert out["n"].tolist() == [3, 2]


def test_sentiment_word_counts_per_polarity():
    words = ["great"] * 3 + ["clean"] * 2 + ["quiet"] + ["dirty"] * 2 + ["noisy"]
    tokens = make_tokens([(0, 1, 1, "2020-01", w) for w in words])
    out = sentiment_word_counts(tokens, BING, top_n=2)
    pos = out[out["sentiment"] == "positive"]
    neg = out[out["sentiment"] == "negative"]
    assert pos["word"].tolist() == ["great", "clean"]
    assert neg["word"].tolist() == ["dirty", "noisy"]


class TestTfIdf:
    """Tests for tf_idf()."""

    def setup_method(self):
        self.tokens = make_tokens([
            (0, 1, 1, "2020-01", "beach"),
            (0, 1, 1, "2020-01", "host"),
            (1, 1, 2, "2020-02", "host"),
            (1, 1, 2, "2020-02", "host"),
            (2, 1, 3, None, "ignored"),
        ])
        self.out = tf_idf(self.tokens, by="year_month")

    def test_term_in_every_document_scores_zero(self):
        host = self.out[self.out["word"] == "host"]
        assert np.allclose(host["tf_idf"], 0.0)

    def test_distinctive_term(self):
        beach = self.out[self.out["word"] == "beach"].iloc[0]
        assert beach["year_month"] == "2020-01"
        assert beach["n"] == 1
        assert beach["tf"] == pytest.approx(0.5)
        assert beach["idf"] == pytest.approx(math.log(2))
        assert beach["tf_idf"] == pytest.approx(0.5 * math.log(2))

    def test_null_documents_skipped(self):
        assert "ignored" not in set(self.out["word"])

    def test_top_n_per_document(self):
        out = tf_idf(self.tokens, by="year_month", top_n=1)
        assert out.groupby("year_month").size().max() == 1
        assert out.iloc[0]["word"] == "beach"

    def test_empty(self):
        assert tf_idf(make_tokens([]), by="year_month").empty
