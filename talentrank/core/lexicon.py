"""Skill lexicon: canonical skills, technical keywords and level table.

The data lives in YAML (``talentrank/data/lexicon.yaml`` by default) so the
vocabulary can grow without touching scoring code.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_LEXICON_PATH = Path(__file__).resolve().parent.parent / "data" / "lexicon.yaml"


def _normalize_terms(values: list[str]) -> list[str]:
    terms = [v.lower().strip() for v in values]
    return [t for t in terms if t]


class LevelRule(BaseModel):
    """Maps any of several level labels to a target number of years."""

    model_config = ConfigDict(frozen=True)

    labels: list[str]
    years: int = Field(ge=0)

    @field_validator("labels")
    @classmethod
    def labels_not_empty(cls, v: list[str]) -> list[str]:
        v = _normalize_terms(v)
        if not v:
            msg = "level rule must have at least one label"
            raise ValueError(msg)
        return v


class Lexicon(BaseModel):
    """Read-only lookup data for the feature extractors and explainer."""

    model_config = ConfigDict(frozen=True)

    skills: dict[str, list[str]] = Field(default_factory=dict)
    tech_keywords: list[str] = Field(default_factory=list)
    level_years: list[LevelRule] = Field(default_factory=list)
    default_target_years: int = Field(default=3, ge=0)

    @field_validator("skills")
    @classmethod
    def skill_variants_not_empty(cls, v: dict[str, list[str]]) -> dict[str, list[str]]:
        normalized: dict[str, list[str]] = {}
        for skill, variants in v.items():
            terms = _normalize_terms(variants)
            if not terms:
                msg = f"skill '{skill}' has no variants"
                raise ValueError(msg)
            normalized[skill] = terms
        return normalized

    @field_validator("tech_keywords")
    @classmethod
    def keywords_normalized(cls, v: list[str]) -> list[str]:
        # dict.fromkeys dedupes while keeping file order
        return list(dict.fromkeys(_normalize_terms(v)))

    def target_years(self, level: str | None) -> int | None:
        """Return target years for a level label, or None when no level is given.

        Unrecognized labels fall back to ``default_target_years``.
        """
        if level is None or not level.strip():
            return None
        level_lower = level.lower()
        for rule in self.level_years:
            if any(label in level_lower for label in rule.labels):
                return rule.years
        return self.default_target_years

    def variants(self, skill: str) -> list[str]:
        return self.skills.get(skill, [])

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Lexicon":
        """Load a lexicon from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Lexicon file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)


_default_lexicon: Lexicon | None = None


def load_lexicon(path: str | Path | None = None) -> Lexicon:
    """Load the lexicon at ``path``, or the packaged default (cached) when None."""
    global _default_lexicon
    if path is not None:
        return Lexicon.from_yaml(path)
    if _default_lexicon is None:
        _default_lexicon = Lexicon.from_yaml(DEFAULT_LEXICON_PATH)
    return _default_lexicon
