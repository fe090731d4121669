"""Reviewer profiles and k-means segmentation."""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence
import numpy as np
import pandas as pd
from sklearn.cluster import KMeans
from sklearn.preprocessing import StandardScaler

from .config import settings

logger = logging.getLogger(__name__)

PROFILE_FEATURES = [
    "total_reviews",
    "avg_sentiment",
    "avg_review_length",
    "positive_review_count",
    "negative_review_count",
]


@dataclass
class Segmentation:
    """Result of one k-means run over reviewer profiles."""
    assignments: pd.DataFrame   # finite profiles + `cluster`
    centers: pd.DataFrame       # cluster centres in original feature units
    inertia: float
    scaler: StandardScaler
    model: KMeans
    features: List[str]

    def scaled(self) -> np.ndarray:
        return self.scaler.transform(self.assignments[self.features].to_numpy(dtype=float))


def reviewer_profiles(review_scores: pd.DataFrame) -> pd.DataFrame:
    """
    Roll per-review scores (see metrics.review_sentiment) up to one row per reviewer:
    total_reviews, avg_sentiment, avg_review_length, positive/negative_review_count.
    """
    need = {"reviewer_id", "sentiment_score", "review_length"}
    miss = need - set(review_scores.columns)
    if miss:
        raise ValueError(f"review_scores missing columns: {miss}")

    s = review_scores["sentiment_score"]
    prof = (review_scores.assign(is_pos=(s > 0).astype(int), is_neg=(s < 0).astype(int))
                         .groupby("reviewer_id")
                         .agg(total_reviews=("sentiment_score", "size"),
                              avg_sentiment=("sentiment_score", "mean"),
                              avg_review_length=("review_length", "mean"),
                              positive_review_count=("is_pos", "sum"),
                              negative_review_count=("is_neg", "sum"))
                         .reset_index())
    logger.info("Built %d reviewer profiles", len(prof))
    return prof


def drop_nonfinite(profiles: pd.DataFrame, columns: Sequence[str] = PROFILE_FEATURES) -> pd.DataFrame:
    """Drop profiles with NaN or +/-inf in any feature column."""
    values = profiles[list(columns)].to_numpy(dtype=float)
    keep = np.isfinite(values).all(axis=1)
    dropped = int((~keep).sum())
    if dropped:
        logger.warning("Excluded %d reviewer profiles with non-finite features", dropped)
    return profiles.loc[keep].copy()


def segment_reviewers(
    profiles: pd.DataFrame,
    *,
    k: Optional[int] = None,
    seed: Optional[int] = None,
    n_init: Optional[int] = None,
    max_iter: Optional[int] = None,
    features: Sequence[str] = PROFILE_FEATURES,
) -> Segmentation:
    """
    Standardize the features and partition reviewers with k-means.
    Deterministic for a fixed input, k and seed; cluster numbering itself is arbitrary.
    """
    k = settings.kmeans_k if k is None else k
    seed = settings.kmeans_seed if seed is None else seed
    n_init = settings.kmeans_n_init if n_init is None else n_init
    max_iter = settings.kmeans_max_iter if max_iter is None else max_iter
    features = list(features)

    clean = drop_nonfinite(profiles, features)
    if len(clean) < k:
        raise ValueError(f"Need at least {k} finite reviewer profiles to form {k} clusters; got {len(clean)}")

    X = clean[features].to_numpy(dtype=float)
    scaler = StandardScaler()
    Z = scaler.fit_transform(X)

    model = KMeans(n_clusters=k, random_state=seed, n_init=n_init, max_iter=max_iter)
    labels = model.fit_predict(Z)

    clean["cluster"] = labels
    centers = pd.DataFrame(scaler.inverse_transform(model.cluster_centers_), columns=features)
    centers.index.name = "cluster"
    logger.info("Segmented %d reviewers into %d clusters (inertia %.2f)", len(clean), k, model.inertia_)
    return Segmentation(
        assignments=clean.reset_index(drop=True),
        centers=centers,
        inertia=float(model.inertia_),
        scaler=scaler,
        model=model,
        features=features,
    )


def cluster_summary(seg: Segmentation) -> pd.DataFrame:
    """Mean feature values and size per cluster."""
    df = seg.assignments
    summary = df.groupby("cluster")[seg.features].mean().round(2)
    summary.insert(0, "size", df.groupby("cluster").size())
    return summary.reset_index()


def elbow_curve(
    profiles: pd.DataFrame,
    ks: Optional[Iterable[int]] = None,
    *,
    seed: Optional[int] = None,
    n_init: int = 10,
    features: Sequence[str] = PROFILE_FEATURES,
) -> pd.DataFrame:
    """Within-cluster sum of squares for each k (for choosing k by the elbow)."""
    seed = settings.kmeans_seed if seed is None else seed
    features = list(features)
    ks = range(1, settings.elbow_max_k + 1) if ks is None else ks
    clean = drop_nonfinite(profiles, features)
    sse = []
    if clean.empty:
        return pd.DataFrame(sse, columns=["k", "inertia"])
    Z = StandardScaler().fit_transform(clean[features].to_numpy(dtype=float))

    for kk in ks:
        if kk > len(Z):
            break
        km = KMeans(n_clusters=kk, random_state=seed, n_init=n_init)
        km.fit(Z)
        sse.append({"k": kk, "inertia": float(km.inertia_)})
    return pd.DataFrame(sse, columns=["k", "inertia"])
