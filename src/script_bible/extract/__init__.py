"""Local extraction pipeline for Script Bible."""

from .classifier import LineClassifier
from .extractor import ExtractionStats, LocalExtractor
from .patterns import CHINESE_SCRIPT, PatternTable
from .relationships import RelationshipInferencer
from .resolver import CharacterResolver, classify_category
from .roles import FixedRoleAssigner, LeadByOrderRoleAssigner, RoleAssigner
from .state_machine import ExtractionMachine, ExtractionState
from .visual import extract_visual_states

__all__ = [
    "CHINESE_SCRIPT",
    "CharacterResolver",
    "ExtractionMachine",
    "ExtractionState",
    "ExtractionStats",
    "FixedRoleAssigner",
    "LeadByOrderRoleAssigner",
    "LineClassifier",
    "LocalExtractor",
    "PatternTable",
    "RelationshipInferencer",
    "RoleAssigner",
    "classify_category",
    "extract_visual_states",
]
