from __future__ import annotations
import os
from typing import Optional, Tuple
import numpy as np
import pandas as pd
import matplotlib.pyplot as plt

from .segment import Segmentation


def _ensure_dir(p: Optional[str]) -> None:
    if p:
        d = os.path.dirname(p)
        if d:
            os.makedirs(d, exist_ok=True)


def _finish(fig: plt.Figure, out_path: Optional[str], show: bool) -> Optional[str]:
    fig.tight_layout()
    saved = None
    if out_path:
        _ensure_dir(out_path)
        fig.savefig(out_path, dpi=150, bbox_inches="tight")
        saved = out_path
    if show:
        plt.show()
    else:
        plt.close(fig)
    return saved


def _require(df: pd.DataFrame, cols, name: str) -> None:
    missing = set(cols) - set(df.columns)
    if missing:
        raise ValueError(f"{name} is missing columns: {missing}")


def _month_ticks(ax: plt.Axes, labels) -> None:
    # thin out monthly labels so multi-year ranges stay readable
    labels = list(labels)
    step = max(1, len(labels) // 24)
    ax.set_xticks(range(0, len(labels), step))
    ax.set_xticklabels(labels[::step], rotation=90, fontsize=8)


def plot_monthly_volume(
    volume: pd.DataFrame,
    out_path: Optional[str] = None,
    show: bool = False,
) -> Tuple[plt.Figure, plt.Axes, Optional[str]]:
    """Bar chart of reviews per month. Expects ['year_month','reviews']."""
    _require(volume, {"year_month", "reviews"}, "volume")
    fig, ax = plt.subplots(figsize=(12, 4))
    ax.bar(range(len(volume)), volume["reviews"].to_numpy())
    _month_ticks(ax, volume["year_month"])
    ax.set_title("Reviews per month")
    ax.set_ylabel("Reviews")
    return fig, ax, _finish(fig, out_path, show)


def plot_sentiment_over_time(
    monthly: pd.DataFrame,
    out_path: Optional[str] = None,
    show: bool = False,
) -> Tuple[plt.Figure, plt.Axes, Optional[str]]:
    """
    Line chart of positive, negative and net sentiment per month.
    Expects the output of metrics.sentiment_scores(..., by="year_month").
    """
    _require(monthly, {"year_month", "positive", "negative", "sentiment_score"}, "monthly")
    x = np.arange(len(monthly))
    fig, ax = plt.subplots(figsize=(12, 4))
    ax.plot(x, monthly["positive"].to_numpy(), label="positive", linewidth=1.2)
    ax.plot(x, monthly["negative"].to_numpy(), label="negative", linewidth=1.2)
    ax.plot(x, monthly["sentiment_score"].to_numpy(), label="net (pos - neg)", linewidth=2.0)
    ax.axhline(0, color="grey", linewidth=0.8)
    _month_ticks(ax, monthly["year_month"])
    ax.set_title("Bing sentiment by month")
    ax.set_ylabel("Tagged words")
    ax.legend()
    return fig, ax, _finish(fig, out_path, show)


def plot_top_words(
    words: pd.DataFrame,
    out_path: Optional[str] = None,
    show: bool = False,
    *,
    title: str = "Most frequent words",
) -> Tuple[plt.Figure, plt.Axes, Optional[str]]:
    """Horizontal bar chart of ['word','n'], largest on top."""
    _require(words, {"word", "n"}, "words")
    w = words.sort_values("n")
    fig, ax = plt.subplots(figsize=(7, max(3, 0.3 * len(w))))
    ax.barh(w["word"].to_numpy(), w["n"].to_numpy())
    ax.set_title(title)
    ax.set_xlabel("Occurrences")
    return fig, ax, _finish(fig, out_path, show)


def plot_sentiment_words(
    words: pd.DataFrame,
    out_path: Optional[str] = None,
    show: bool = False,
) -> Tuple[plt.Figure, Tuple[plt.Axes, plt.Axes], Optional[str]]:
    """Side-by-side bars of the top positive and negative words (metrics.sentiment_word_counts)."""
    _require(words, {"sentiment", "word", "n"}, "words")
    fig, axes = plt.subplots(1, 2, figsize=(12, 5))
    for ax, label in zip(axes, ("negative", "positive")):
        sub = words[words["sentiment"] == label].sort_values("n")
        ax.barh(sub["word"].to_numpy(), sub["n"].to_numpy(),
                color="tab:red" if label == "negative" else "tab:green")
        ax.set_title(f"Top {label} words")
        ax.set_xlabel("Contribution to sentiment")
    return fig, tuple(axes), _finish(fig, out_path, show)


def plot_emotion_counts(
    emotions: pd.DataFrame,
    out_path: Optional[str] = None,
    show: bool = False,
) -> Tuple[plt.Figure, plt.Axes, Optional[str]]:
    """Bar chart of total NRC emotion counts. Expects ['emotion','n']."""
    _require(emotions, {"emotion", "n"}, "emotions")
    totals = emotions.groupby("emotion")["n"].sum().sort_values(ascending=False)
    fig, ax = plt.subplots(figsize=(8, 4))
    ax.bar(totals.index.to_numpy(), totals.to_numpy())
    ax.set_title("NRC emotions across all reviews")
    ax.set_ylabel("Tagged words")
    ax.tick_params(axis="x", rotation=45)
    return fig, ax, _finish(fig, out_path, show)


def plot_listing_sentiment(
    listing_scores: pd.DataFrame,
    out_path: Optional[str] = None,
    show: bool = False,
    *,
    bins: int = 40,
) -> Tuple[plt.Figure, plt.Axes, Optional[str]]:
    """Histogram of per-listing net sentiment."""
    _require(listing_scores, {"listing_id", "sentiment_score"}, "listing_scores")
    fig, ax = plt.subplots(figsize=(8, 4))
    ax.hist(listing_scores["sentiment_score"].to_numpy(), bins=bins)
    ax.set_title("Net sentiment per listing")
    ax.set_xlabel("Sentiment score (pos - neg)")
    ax.set_ylabel("Listings")
    return fig, ax, _finish(fig, out_path, show)


def plot_tf_idf(
    weights: pd.DataFrame,
    out_path: Optional[str] = None,
    show: bool = False,
    *,
    doc_col: str = "year_month",
    top_n: int = 5,
    max_docs: int = 6,
) -> Tuple[plt.Figure, np.ndarray, Optional[str]]:
    """Top TF-IDF words for the most recent `max_docs` documents, one panel each."""
    _require(weights, {doc_col, "word", "tf_idf"}, "weights")
    docs = sorted(weights[doc_col].unique())[-max_docs:]
    ncols = min(3, max(1, len(docs)))
    nrows = int(np.ceil(max(1, len(docs)) / ncols))
    fig, axes = plt.subplots(nrows, ncols, figsize=(4.5 * ncols, 3.2 * nrows), squeeze=False)
    for ax, doc in zip(axes.ravel(), docs):
        sub = (weights[weights[doc_col] == doc]
               .sort_values("tf_idf", ascending=False)
               .head(top_n)
               .sort_values("tf_idf"))
        ax.barh(sub["word"].to_numpy(), sub["tf_idf"].to_numpy())
        ax.set_title(str(doc), fontsize=10)
    for ax in axes.ravel()[len(docs):]:
        ax.axis("off")
    fig.suptitle("Highest TF-IDF words")
    return fig, axes, _finish(fig, out_path, show)


def plot_elbow(
    sse: pd.DataFrame,
    out_path: Optional[str] = None,
    show: bool = False,
) -> Tuple[plt.Figure, plt.Axes, Optional[str]]:
    _require(sse, {"k", "inertia"}, "sse")
    fig, ax = plt.subplots(figsize=(8, 4))
    ax.plot(sse["k"].to_numpy(), sse["inertia"].to_numpy(), marker="o")
    ax.set_title("Elbow method: within-cluster sum of squares")
    ax.set_xlabel("Number of clusters (k)")
    ax.set_ylabel("Inertia")
    ax.grid(True)
    return fig, ax, _finish(fig, out_path, show)


def plot_reviewer_segments(
    seg: Segmentation,
    out_path: Optional[str] = None,
    show: bool = False,
    *,
    x: str = "avg_sentiment",
    y: str = "avg_review_length",
) -> Tuple[plt.Figure, plt.Axes, Optional[str]]:
    """Scatter of two standardized profile features, coloured by cluster."""
    Z = seg.scaled()
    xi, yi = seg.features.index(x), seg.features.index(y)
    labels = seg.assignments["cluster"].to_numpy()

    fig, ax = plt.subplots(figsize=(8, 6))
    sc = ax.scatter(Z[:, xi], Z[:, yi], c=labels, cmap="viridis", alpha=0.6, s=12)
    centers = seg.model.cluster_centers_
    ax.scatter(centers[:, xi], centers[:, yi], c="red", marker="x", s=80, label="centres")
    ax.set_title("Reviewer segments (k-means)")
    ax.set_xlabel(f"{x} (z-score)")
    ax.set_ylabel(f"{y} (z-score)")
    fig.colorbar(sc, ax=ax, label="Cluster")
    ax.legend()
    return fig, ax, _finish(fig, out_path, show)
