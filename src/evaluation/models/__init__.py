"""
Model Evaluators and Loading
============================

Usage:
    from src.evaluation.models import ModelLoader

    evaluator = ModelLoader().load("models:/credit-risk/Production")
"""

from src.evaluation.models.evaluator import (
    EvaluationResult,
    ModelEvaluator,
    MLflowModelEvaluator,
)
from src.evaluation.models.model_loader import (
    ModelLoader,
    ModelLoaderConfig,
    fields_from_schema,
)

__all__ = [
    "EvaluationResult",
    "ModelEvaluator",
    "MLflowModelEvaluator",
    "ModelLoader",
    "ModelLoaderConfig",
    "fields_from_schema",
]
