"""
RSSalg Threshold Optimization

Candidates, their evaluators and the genetic algorithm searching the
threshold space.
"""

from .candidate import Candidate, UNEVALUATED
from .evaluators import (
    CandidateEvaluator,
    HeldOutCandidateEvaluator,
    OracleCandidateEvaluator,
    EVALUATORS,
    get_candidate_evaluator
)
from .genetic import (
    GAThresholdOptimizer,
    encode_percent,
    decode_percent,
    to_bits,
    from_bits
)

__all__ = [
    "Candidate",
    "UNEVALUATED",
    # Evaluators
    "CandidateEvaluator",
    "HeldOutCandidateEvaluator",
    "OracleCandidateEvaluator",
    "EVALUATORS",
    "get_candidate_evaluator",
    # Genetic algorithm
    "GAThresholdOptimizer",
    "encode_percent",
    "decode_percent",
    "to_bits",
    "from_bits"
]
