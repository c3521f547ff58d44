"""Model pricing catalog and cost arithmetic."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..logging_config import logger
from .config import Config, get_config
from .errors import ConfigError, UnknownPricingModel

WEEKS_PER_MONTH = 4.33
PER_MILLION = 1_000_000


class PricingTier(str, Enum):
    """Coarse price class, used only to group models for display."""

    FREE = "free"
    BUDGET = "budget"
    STANDARD = "standard"
    PREMIUM = "premium"


@dataclass(frozen=True)
class PricingEntry:
    """Per-million-token prices for one model."""

    model_id: str
    input_price: float
    output_price: float
    tier: PricingTier
    label: str = ""

    @property
    def display_name(self) -> str:
        return self.label or self.model_id.split("/")[-1]


@dataclass
class SessionCosts:
    """Estimated spend for a workspace on one model."""

    model_id: str
    system_prompt_per_session: float
    session: float
    weekly: float
    monthly: float


@dataclass
class ModelComparison:
    """Monthly cost of moving from one model to a cheaper one."""

    from_model: str
    to_model: str
    current_cost: float
    new_cost: float

    @property
    def monthly_savings(self) -> float:
        return self.current_cost - self.new_cost

    @property
    def savings_percentage(self) -> float:
        if self.current_cost <= 0:
            return 0.0
        return self.monthly_savings / self.current_cost * 100


def monthly_cost(
    tokens_per_call: int,
    calls_per_session: int,
    sessions_per_week: int,
    model: PricingEntry | None,
) -> float | None:
    """Monthly input cost of sending tokens_per_call on every call.

    Returns:
        Cost in USD, or None when the model could not be priced
    """
    if model is None:
        return None
    monthly_tokens = tokens_per_call * calls_per_session * sessions_per_week * WEEKS_PER_MONTH
    return monthly_tokens * model.input_price / PER_MILLION


class PricingCatalog:
    """Read-only lookup of pricing entries keyed by model id."""

    def __init__(self, entries: Mapping[str, PricingEntry]):
        self._entries = dict(entries)

    @classmethod
    def from_mapping(cls, models: Mapping[str, Mapping[str, Any]]) -> PricingCatalog:
        """Build a catalog from the ``pricing.models`` config mapping."""
        entries = {}
        for model_id, info in models.items():
            try:
                entries[model_id] = PricingEntry(
                    model_id=model_id,
                    input_price=float(info["input"]),
                    output_price=float(info["output"]),
                    tier=PricingTier(info.get("tier", "standard")),
                    label=info.get("label", ""),
                )
            except (KeyError, TypeError, ValueError) as e:
                raise ConfigError(f"Invalid pricing entry for {model_id}: {e}") from e
        return cls(entries)

    @classmethod
    def from_config(cls, config: Config | None = None) -> PricingCatalog:
        config = config or get_config()
        return cls.from_mapping(config.get("pricing.models", {}))

    def __contains__(self, model_id: object) -> bool:
        return model_id in self._entries

    def __iter__(self):
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, model_id: str) -> PricingEntry | None:
        """Look up a model; None when it is not in the catalog."""
        entry = self._entries.get(model_id)
        if entry is None:
            logger.warning(f"No pricing for model {model_id}")
        return entry

    def require(self, model_id: str) -> PricingEntry:
        """Look up a model that must be priced."""
        entry = self._entries.get(model_id)
        if entry is None:
            raise UnknownPricingModel(model_id)
        return entry

    def display_name(self, model_id: str) -> str:
        entry = self._entries.get(model_id)
        return entry.display_name if entry else model_id.split("/")[-1]

    def by_tier(self) -> dict[PricingTier, list[PricingEntry]]:
        """Group entries by tier, cheapest tier first."""
        grouped: dict[PricingTier, list[PricingEntry]] = {tier: [] for tier in PricingTier}
        for entry in self._entries.values():
            grouped[entry.tier].append(entry)
        return grouped

    def monthly_cost(
        self,
        model_id: str,
        tokens_per_call: int,
        calls_per_session: int,
        sessions_per_week: int,
    ) -> float | None:
        """Monthly cost for a model id; None for an unknown model."""
        return monthly_cost(
            tokens_per_call, calls_per_session, sessions_per_week, self.get(model_id)
        )

    def session_costs(
        self,
        model_id: str,
        system_prompt_tokens: int,
        calls_per_session: int = 20,
        sessions_per_week: int = 7,
        avg_session_tokens: int = 150000,
        avg_output_tokens: int = 15000,
    ) -> SessionCosts | None:
        """Estimate what running a workspace costs on a model.

        The system prompt is resent on every call; on top of that each
        session consumes an average amount of conversation input and output.
        """
        entry = self.get(model_id)
        if entry is None:
            return None

        system_cost = system_prompt_tokens * calls_per_session * entry.input_price / PER_MILLION
        session_cost = (
            avg_session_tokens * entry.input_price / PER_MILLION
            + avg_output_tokens * entry.output_price / PER_MILLION
        )
        weekly = (system_cost + session_cost) * sessions_per_week

        return SessionCosts(
            model_id=model_id,
            system_prompt_per_session=system_cost,
            session=session_cost,
            weekly=weekly,
            monthly=weekly * WEEKS_PER_MONTH,
        )

    def cheaper_alternatives(
        self, current_model: str, system_prompt_tokens: int, **usage: int
    ) -> list[ModelComparison]:
        """Models that would cost less than current_model, biggest saving first."""
        current = self.session_costs(current_model, system_prompt_tokens, **usage)
        if current is None:
            return []

        comparisons = []
        for entry in self._entries.values():
            if entry.model_id == current_model:
                continue
            costs = self.session_costs(entry.model_id, system_prompt_tokens, **usage)
            if costs and costs.monthly < current.monthly:
                comparisons.append(
                    ModelComparison(
                        from_model=current_model,
                        to_model=entry.model_id,
                        current_cost=current.monthly,
                        new_cost=costs.monthly,
                    )
                )

        return sorted(comparisons, key=lambda c: c.monthly_savings, reverse=True)
