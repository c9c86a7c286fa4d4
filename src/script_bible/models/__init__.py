"""Data models for extracted setting-bible records."""

from script_bible.models.entities import (
    Category,
    Character,
    LightingCue,
    Prop,
    Relationship,
    Role,
    Scene,
    SceneType,
    Skill,
)
from script_bible.models.lines import ClassifiedLine, LineKind, RawLine
from script_bible.models.result import COLLECTIONS, AnalysisResult

__all__ = [
    "AnalysisResult",
    "COLLECTIONS",
    "Category",
    "Character",
    "ClassifiedLine",
    "LightingCue",
    "LineKind",
    "Prop",
    "RawLine",
    "Relationship",
    "Role",
    "Scene",
    "SceneType",
    "Skill",
]
