"""
Streaming Model Evaluation - Source Package
===========================================

This package contains all source code for the evaluation operator:
- evaluation: Per-record evaluation pipeline, strategies, operator
- core: Shared utilities (configuration, monitoring)

Quick Imports:
    from src.evaluation import EvaluationOperator, run_stream
    from src.core.config import settings
"""

# Lazy imports - only import when accessed to avoid triggering
# unnecessary dependencies during test collection
__all__ = ["evaluation", "core"]


def __getattr__(name):
    """Lazy module loading to avoid import side effects."""
    if name == "evaluation":
        from src import evaluation
        return evaluation
    elif name == "core":
        from src import core
        return core
    raise AttributeError(f"module 'src' has no attribute {name!r}")
