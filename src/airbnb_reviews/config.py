"""Configuration for the review analysis."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Analysis settings, overridable via AIRBNB_REVIEWS_* env vars."""

    model_config = SettingsConfigDict(
        env_prefix="AIRBNB_REVIEWS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging
    log_level: str = Field("INFO", description="Logging level")

    # Cleaning
    drop_automated: bool = Field(True, description="Drop automated host-cancellation postings")

    # Segmentation
    kmeans_k: int = Field(3, description="Number of reviewer segments")
    kmeans_seed: int = Field(1234, description="Random seed for k-means")
    kmeans_n_init: int = Field(25, description="Random restarts for k-means")
    kmeans_max_iter: int = Field(300, description="Iteration cap per k-means run")
    elbow_max_k: int = Field(10, description="Largest k tried for the elbow chart")

    # Summaries
    top_n_words: int = Field(20, description="Words shown in frequency charts")
    top_n_listings: int = Field(10, description="Listings shown in printed summaries")


settings = Settings()
