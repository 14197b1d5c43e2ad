"""Configuration models and YAML loader for the ranking engine."""

import math
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, model_validator


class ScoringConfig(BaseModel):
    """Weights for combining the four sub-scores. Must sum to 1.0."""

    skills_weight: float = Field(default=0.35, ge=0.0, le=1.0)
    semantic_weight: float = Field(default=0.25, ge=0.0, le=1.0)
    experience_weight: float = Field(default=0.25, ge=0.0, le=1.0)
    location_weight: float = Field(default=0.15, ge=0.0, le=1.0)

    @model_validator(mode="after")
    def weights_sum_to_one(self) -> "ScoringConfig":
        total = (
            self.skills_weight
            + self.semantic_weight
            + self.experience_weight
            + self.location_weight
        )
        if not math.isclose(total, 1.0, abs_tol=1e-6):
            msg = f"scoring weights must sum to 1.0, got {total:.4f}"
            raise ValueError(msg)
        return self


class RankingConfig(BaseModel):
    """Batch execution limits for the ranking orchestrator."""

    max_concurrency: int = Field(default=8, ge=1)
    persist_timeout_s: float = Field(default=5.0, gt=0.0)
    batch_timeout_s: float | None = Field(default=None, gt=0.0)
    top_k: int = Field(default=10, ge=1)


class DatabaseConfig(BaseModel):
    """Database configuration."""

    path: str = "data/matches.db"


class Settings(BaseModel):
    """Top-level settings loaded from YAML."""

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    ranking: RankingConfig = Field(default_factory=RankingConfig)
    lexicon_path: str | None = None

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)
