"""Workspace token analysis and savings recommendations."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from pathlib import Path

from ..logging_config import logger
from ..utils.patterns import assess_compression_potential
from ..utils.tokenizer import TokenCounter, approximate_token_count
from .config import Config, get_config
from .errors import SourceUnavailable
from .pricing import PricingCatalog, SessionCosts
from .workspace import discover_files, load_documents

SYSTEM_PROMPT_LARGE = 10000
AGGRESSIVE_COMPRESSION_RATIO = 0.4
MODEL_SWITCH_MIN_SAVINGS = 5.0
MODEL_SWITCH_HIGH_SAVINGS = 50.0


@dataclass
class FileStats:
    """Size and token figures for one workspace file."""

    path: Path
    size: int
    tokens: int
    compression_potential: int


@dataclass
class Recommendation:
    """A suggested change with its estimated savings."""

    kind: str
    priority: str
    target: str
    potential: str
    description: str
    tokens_saved: int | None = None
    monthly_savings: float | None = None
    from_model: str | None = None

    @property
    def annual_savings(self) -> float | None:
        if self.monthly_savings is None:
            return None
        return self.monthly_savings * 12


@dataclass
class WorkspaceAnalysis:
    """Token usage across a workspace's context files."""

    workspace: Path
    files: dict[str, FileStats] = field(default_factory=dict)
    skipped: dict[str, str] = field(default_factory=dict)
    recommendations: list[Recommendation] = field(default_factory=list)

    @property
    def total_tokens(self) -> int:
        return sum(stats.tokens for stats in self.files.values())

    @property
    def system_prompt_size(self) -> int:
        # Every workspace file is injected into the system prompt
        return self.total_tokens


@dataclass
class CostProjection:
    """Monthly cost on one model now and after aggressive compression."""

    model_id: str
    current: SessionCosts
    optimized: SessionCosts

    @property
    def monthly_savings(self) -> float:
        return self.current.monthly - self.optimized.monthly

    @property
    def savings_percent(self) -> int:
        if self.current.monthly <= 0:
            return 0
        return math.floor(self.monthly_savings / self.current.monthly * 100 + 0.5)


class Analyzer:
    """Measures workspace files and prices the result."""

    def __init__(
        self,
        config: Config | None = None,
        catalog: PricingCatalog | None = None,
        token_counter: TokenCounter = approximate_token_count,
    ):
        self.config = config or get_config()
        self.catalog = catalog or PricingCatalog.from_config(self.config)
        self.token_counter = token_counter

    @property
    def usage(self) -> dict[str, int]:
        """Usage assumptions passed to the session cost model."""
        return {
            "calls_per_session": self.config.get("analysis.calls_per_session", 20),
            "sessions_per_week": self.config.get("analysis.sessions_per_week", 7),
            "avg_session_tokens": self.config.get("analysis.avg_session_tokens", 150000),
            "avg_output_tokens": self.config.get("analysis.avg_output_tokens", 15000),
        }

    @property
    def current_model(self) -> str:
        return self.config.get("analysis.current_model", "anthropic/claude-opus-4-5")

    def analyze_workspace(self, workspace: Path) -> WorkspaceAnalysis:
        """Measure every context file and build recommendations."""
        analysis = WorkspaceAnalysis(workspace=workspace)

        for path, document in load_documents(discover_files(workspace, self.config)):
            if isinstance(document, SourceUnavailable):
                analysis.skipped[path.name] = document.reason
                continue
            analysis.files[path.name] = FileStats(
                path=path,
                size=len(document.content),
                tokens=self.token_counter(document.content),
                compression_potential=assess_compression_potential(document.content),
            )
            logger.debug(f"{path.name}: {analysis.files[path.name].tokens} tokens")

        analysis.recommendations = self.generate_recommendations(analysis)
        return analysis

    def monthly_savings(self, tokens_saved: int) -> float | None:
        """Monthly value of removing tokens from the system prompt."""
        model_id = self.config.get("analysis.savings_model", "anthropic/claude-sonnet-4-20250514")
        return self.catalog.monthly_cost(
            model_id,
            tokens_saved,
            self.usage["calls_per_session"],
            self.usage["sessions_per_week"],
        )

    def session_costs(self, analysis: WorkspaceAnalysis, model_id: str | None = None) -> SessionCosts | None:
        """What the workspace costs per month on a model; None if unpriced."""
        return self.catalog.session_costs(
            model_id or self.current_model, analysis.system_prompt_size, **self.usage
        )

    def generate_recommendations(self, analysis: WorkspaceAnalysis) -> list[Recommendation]:
        """Build compression, system and model-switch recommendations."""
        recommendations = []
        threshold = self.config.get("compression.recommend_threshold", 30)

        for filename, stats in analysis.files.items():
            if stats.compression_potential > threshold:
                tokens_saved = math.floor(stats.tokens * stats.compression_potential / 100)
                recommendations.append(
                    Recommendation(
                        kind="compression",
                        priority="high",
                        target=filename,
                        potential=f"{stats.compression_potential}%",
                        description=f"Compress {filename} using AI notation",
                        tokens_saved=tokens_saved,
                        monthly_savings=self.monthly_savings(tokens_saved),
                    )
                )

        recommendations.extend(self.model_switch_recommendations(analysis))

        if analysis.system_prompt_size > SYSTEM_PROMPT_LARGE:
            tokens_saved = math.floor(analysis.system_prompt_size * AGGRESSIVE_COMPRESSION_RATIO)
            recommendations.append(
                Recommendation(
                    kind="system",
                    priority="medium",
                    target="system-prompt",
                    potential=f"{int(AGGRESSIVE_COMPRESSION_RATIO * 100)}%",
                    description="System prompt is large - consider aggressive compression",
                    tokens_saved=tokens_saved,
                    monthly_savings=self.monthly_savings(tokens_saved),
                )
            )

        # Unpriced recommendations sort last
        return sorted(
            recommendations,
            key=lambda r: (r.monthly_savings is None, -(r.monthly_savings or 0)),
        )

    def model_switch_recommendations(self, analysis: WorkspaceAnalysis) -> list[Recommendation]:
        """Suggest cheaper models that save more than a few dollars a month."""
        recommendations = []
        comparisons = self.catalog.cheaper_alternatives(
            self.current_model, analysis.system_prompt_size, **self.usage
        )
        for comparison in comparisons:
            if comparison.monthly_savings <= MODEL_SWITCH_MIN_SAVINGS:
                continue
            recommendations.append(
                Recommendation(
                    kind="model-switch",
                    priority="high" if comparison.monthly_savings > MODEL_SWITCH_HIGH_SAVINGS else "medium",
                    target=comparison.to_model,
                    from_model=comparison.from_model,
                    potential=f"{round(comparison.savings_percentage)}%",
                    description=(
                        f"Switch from {self.catalog.display_name(comparison.from_model)} "
                        f"to {self.catalog.display_name(comparison.to_model)}"
                    ),
                    monthly_savings=comparison.monthly_savings,
                )
            )
        return recommendations

    def cost_projections(self, analysis: WorkspaceAnalysis) -> list[CostProjection]:
        """Current vs. compressed monthly cost for every priced model."""
        optimized_size = math.floor(analysis.system_prompt_size * AGGRESSIVE_COMPRESSION_RATIO)
        projections = []
        for entry in self.catalog:
            current = self.catalog.session_costs(entry.model_id, analysis.system_prompt_size, **self.usage)
            optimized = self.catalog.session_costs(entry.model_id, optimized_size, **self.usage)
            if current and optimized:
                projections.append(CostProjection(entry.model_id, current, optimized))
        return projections
