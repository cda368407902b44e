"""Evolution eligibility and progression engine for workout-earned creatures."""

from evolution_engine.chain_cache import ChainCache
from evolution_engine.config import EvolutionEngineConfig
from evolution_engine.dispatcher import ActivityEventDispatcher
from evolution_engine.eligibility import EligibilityEvaluator, EligibilityReport
from evolution_engine.progress import ProgressTracker
from evolution_engine.requirements import RequirementCalculator
from evolution_engine.rewards import RewardBook
from evolution_engine.session import EvolutionSession
from evolution_engine.transition import EvolutionTransitionEngine

__all__ = [
    "ActivityEventDispatcher",
    "ChainCache",
    "EligibilityEvaluator",
    "EligibilityReport",
    "EvolutionEngineConfig",
    "EvolutionSession",
    "EvolutionTransitionEngine",
    "ProgressTracker",
    "RequirementCalculator",
    "RewardBook",
]
