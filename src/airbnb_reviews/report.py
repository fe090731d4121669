"""End-to-end review analysis: load, clean, score, segment, chart."""

from __future__ import annotations
import argparse
import logging
import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import pandas as pd

from .config import Settings, settings as default_settings
from .data_prep import load_reviews, prepare_reviews, tokenize
from .lexicons import Lexicon, load_bing, load_nrc
from .metrics import (
    emotion_counts,
    monthly_volume,
    review_sentiment,
    sentiment_scores,
    sentiment_word_counts,
    tf_idf,
    word_counts,
)
from .segment import Segmentation, cluster_summary, elbow_curve, reviewer_profiles, segment_reviewers
from . import viz

logger = logging.getLogger(__name__)


def setup_logging(level: Optional[str] = None) -> None:
    level = level or default_settings.log_level
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@dataclass
class ReportResult:
    reviews: pd.DataFrame
    tokens: pd.DataFrame
    volume: pd.DataFrame
    monthly: pd.DataFrame
    listings: pd.DataFrame
    review_scores: pd.DataFrame
    profiles: pd.DataFrame
    emotions: pd.DataFrame
    top_words: pd.DataFrame
    sentiment_words: pd.DataFrame
    tfidf: pd.DataFrame
    elbow: pd.DataFrame
    segmentation: Optional[Segmentation]
    clusters: Optional[pd.DataFrame]
    charts: Dict[str, str] = field(default_factory=dict)


def _print_table(title: str, df: pd.DataFrame) -> None:
    print(f"\n=== {title} ===")
    print(df.to_string(index=False) if not df.empty else "(empty)")


def run_report(
    csv_path: str,
    bing: Lexicon,
    nrc: Lexicon,
    out_dir: Optional[str] = None,
    show: bool = False,
    settings: Optional[Settings] = None,
) -> ReportResult:
    """
    Run the whole analysis once. Load errors propagate; a reviewer population
    too small to cluster only skips the segmentation step.
    """
    cfg = settings or default_settings

    logger.info("Loading reviews")
    raw = load_reviews(csv_path)

    logger.info("Cleaning and tokenizing")
    reviews = prepare_reviews(raw, drop_automated=cfg.drop_automated)
    tokens = tokenize(reviews)

    logger.info("Scoring against %s and %s lexicons", bing.name, nrc.name)
    volume = monthly_volume(reviews)
    monthly = sentiment_scores(tokens, bing, by="year_month")
    listings = sentiment_scores(tokens, bing, by="listing_id")
    scores = review_sentiment(reviews, tokens, bing)
    emotions = emotion_counts(tokens, nrc)
    top = word_counts(tokens, top_n=cfg.top_n_words)
    sent_words = sentiment_word_counts(tokens, bing, top_n=cfg.top_n_words // 2 or 1)
    weights = tf_idf(tokens, by="year_month", top_n=cfg.top_n_words)

    logger.info("Segmenting reviewers")
    profiles = reviewer_profiles(scores)
    elbow = elbow_curve(profiles, range(1, cfg.elbow_max_k + 1), seed=cfg.kmeans_seed)
    seg: Optional[Segmentation] = None
    clusters: Optional[pd.DataFrame] = None
    try:
        seg = segment_reviewers(profiles, k=cfg.kmeans_k, seed=cfg.kmeans_seed,
                                n_init=cfg.kmeans_n_init, max_iter=cfg.kmeans_max_iter)
        clusters = cluster_summary(seg)
    except ValueError as e:
        logger.warning("Skipping segmentation: %s", e)

    _print_table("Sentiment by month", monthly)
    ranked = listings[listings["n_matched"] > 0]
    _print_table(f"Top {cfg.top_n_listings} listings by net sentiment",
                 ranked.nlargest(cfg.top_n_listings, "sentiment_score"))
    _print_table(f"Bottom {cfg.top_n_listings} listings by net sentiment",
                 ranked.nsmallest(cfg.top_n_listings, "sentiment_score"))
    _print_table("NRC emotions", emotions)
    if clusters is not None:
        _print_table("Reviewer segments", clusters)

    result = ReportResult(
        reviews=reviews, tokens=tokens, volume=volume, monthly=monthly,
        listings=listings, review_scores=scores, profiles=profiles,
        emotions=emotions, top_words=top, sentiment_words=sent_words,
        tfidf=weights, elbow=elbow, segmentation=seg, clusters=clusters,
    )
    result.charts = render_charts(result, out_dir, show)
    return result


def render_charts(result: ReportResult, out_dir: Optional[str], show: bool = False) -> Dict[str, str]:
    def path(name: str) -> Optional[str]:
        return os.path.join(out_dir, f"{name}.png") if out_dir else None

    jobs = [
        ("monthly_volume", viz.plot_monthly_volume, result.volume),
        ("sentiment_over_time", viz.plot_sentiment_over_time, result.monthly),
        ("top_words", viz.plot_top_words, result.top_words),
        ("sentiment_words", viz.plot_sentiment_words, result.sentiment_words),
        ("emotions", viz.plot_emotion_counts, result.emotions),
        ("listing_sentiment", viz.plot_listing_sentiment, result.listings),
        ("tf_idf", viz.plot_tf_idf, result.tfidf),
        ("elbow", viz.plot_elbow, result.elbow),
    ]
    if result.segmentation is not None:
        jobs.append(("reviewer_segments", viz.plot_reviewer_segments, result.segmentation))

    saved: Dict[str, str] = {}
    for name, fn, data in jobs:
        _, _, p = fn(data, out_path=path(name), show=show)
        if p:
            saved[name] = p
    if saved:
        logger.info("Saved %d charts to %s", len(saved), out_dir)
    return saved


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="airbnb_reviews",
        description="Lexicon sentiment and reviewer segmentation for Airbnb reviews",
    )
    p.add_argument("csv", help="Reviews CSV with listing_id, reviewer_id, date, comments")
    p.add_argument("--nrc", required=True, help="NRC Emotion Lexicon word-level file")
    p.add_argument("--bing", default=None, help="Bing word,sentiment CSV (default: NLTK opinion_lexicon)")
    p.add_argument("--out-dir", default="figures", help="Directory for PNG charts")
    p.add_argument("--show", action="store_true", help="Display charts interactively")
    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging()
    try:
        bing = load_bing(args.bing)
        nrc = load_nrc(args.nrc)
        run_report(args.csv, bing, nrc, out_dir=args.out_dir, show=args.show)
    except (OSError, LookupError, ValueError) as e:
        logger.error("Review analysis failed: %s", e)
        return 1
    return 0

