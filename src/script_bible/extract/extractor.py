"""Local (heuristic) extraction coordinator.

Orchestrates line splitting, classification, the extraction pass and
relationship inference to turn a manuscript into an AnalysisResult.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

from ..ingest.loader import load_manuscript
from ..ingest.splitter import split_into_lines
from ..models.result import AnalysisResult
from .classifier import LineClassifier
from .patterns import CHINESE_SCRIPT, PatternTable
from .relationships import RelationshipInferencer
from .resolver import CharacterResolver
from .roles import RoleAssigner
from .state_machine import ExtractionMachine


@dataclass
class ExtractionStats:
    """Statistics from one local pass."""

    total_lines: int = 0
    lines_by_kind: dict[str, int] = field(default_factory=dict)


class LocalExtractor:
    """Extracts a setting bible from a manuscript without any model.

    Usage:
        extractor = LocalExtractor()
        result = extractor.extract(text)
    """

    def __init__(
        self,
        table: Optional[PatternTable] = None,
        role_assigner: Optional[RoleAssigner] = None,
        relationship_policy: Optional[str] = None,
        progress_callback: Optional[Callable[[str], None]] = None,
    ):
        """Initialize the extractor.

        Args:
            table: Keyword/pattern table (default: Chinese screenplay table)
            role_assigner: Role policy for new characters
            relationship_policy: "first_pair" or "scene_cooccurrence"
            progress_callback: Optional callback for progress updates
        """
        self.table = table or CHINESE_SCRIPT
        self.progress = progress_callback or (lambda x: None)
        self.classifier = LineClassifier(table=self.table)
        self.resolver = CharacterResolver(table=self.table, role_assigner=role_assigner)
        self.machine = ExtractionMachine(table=self.table, resolver=self.resolver)
        self.inferencer = RelationshipInferencer(policy=relationship_policy, table=self.table)
        self.last_stats = ExtractionStats()

    def extract(self, text: str) -> AnalysisResult:
        """Extract a setting bible from manuscript text.

        An empty or whitespace-only manuscript yields an empty result.
        """
        if not text.strip():
            self.last_stats = ExtractionStats()
            return AnalysisResult(style=self.table.style_label)

        self.progress("Splitting into lines...")
        lines = split_into_lines(text)

        self.progress(f"Classifying {len(lines)} lines...")
        classified = self.classifier.classify_all(lines)

        self.progress("Extracting entities...")
        state = self.machine.run(classified)

        self.progress("Inferring relationships...")
        relationships = self.inferencer.infer(state.characters, state.scenes, state.scene_mentions)

        self.last_stats = self._stats(classified)
        return AnalysisResult(
            style=self.table.style_label,
            characters=state.characters,
            scenes=state.scenes,
            props=state.props,
            lighting=state.lighting,
            skills=(),
            relationships=tuple(relationships),
        )

    def extract_from_file(self, file_path: Path | str) -> AnalysisResult:
        """Extract a setting bible from a manuscript file."""
        file_path = Path(file_path)
        self.progress(f"Loading {file_path.name}...")
        return self.extract(load_manuscript(file_path))

    def _stats(self, classified) -> ExtractionStats:
        counts: dict[str, int] = {}
        for line in classified:
            counts[line.kind.value] = counts.get(line.kind.value, 0) + 1

        return ExtractionStats(total_lines=len(classified), lines_by_kind=counts)
