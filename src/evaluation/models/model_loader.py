"""
MLflow Model Loader
====================

Builds a ready model evaluator from a model source identifier.

Supported sources (anything mlflow.pyfunc.load_model accepts):
- models:/<name>/<stage or version>
- runs:/<run_id>/<artifact_path>
- a local model directory

The model signature declares the input fields and their types; the first
signature output is the target unless target fields are configured.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

from src.evaluation.errors import ModelLoadError
from src.evaluation.fields import FieldDefinition, FieldType
from src.evaluation.models.evaluator import MLflowModelEvaluator

logger = logging.getLogger(__name__)


# MLflow DataType name -> FieldType
MLFLOW_TYPE_MAPPING = {
    "boolean": FieldType.BOOLEAN,
    "integer": FieldType.INTEGER,
    "long": FieldType.INTEGER,
    "float": FieldType.DOUBLE,
    "double": FieldType.DOUBLE,
    "string": FieldType.STRING,
}


@dataclass
class ModelLoaderConfig:
    """Model loader configuration."""
    tracking_uri: Optional[str] = field(
        default_factory=lambda: os.getenv("MLFLOW_TRACKING_URI")
    )
    target_fields: List[str] = field(default_factory=list)


def _column_type_name(col: Any) -> str:
    col_type = getattr(col, "type", None)
    name = getattr(col_type, "name", None) or str(col_type)
    return name.lower()


def fields_from_schema(schema: Any) -> List[FieldDefinition]:
    """Convert an MLflow input schema into field definitions."""
    fields = []
    for i, col in enumerate(schema.inputs):
        name = getattr(col, "name", None)
        if not name:
            raise ValueError(f"input column {i} has no name")
        fields.append(
            FieldDefinition(
                name=name,
                field_type=MLFLOW_TYPE_MAPPING.get(_column_type_name(col), FieldType.ANY),
                required=getattr(col, "required", True),
            )
        )
    return fields


class ModelLoader:
    """
    Loads MLflow models and wraps them as evaluators.

    The tracking URI is only applied when loading, so constructing a loader
    has no side effects.
    """

    def __init__(self, config: Optional[ModelLoaderConfig] = None):
        self.config = config or ModelLoaderConfig()

    def _split_outputs(self, output_names: Sequence[str]) -> tuple:
        if self.config.target_fields:
            targets = list(self.config.target_fields)
        elif output_names:
            targets = [output_names[0]]
        else:
            targets = []
        outputs = [n for n in output_names if n not in targets]
        return targets, outputs

    def load(self, model_source: str) -> MLflowModelEvaluator:
        """
        Load a model and build its evaluator.

        Raises:
            ModelLoadError: If the source is empty, cannot be loaded, or the
                model has no usable signature
        """
        if not model_source or not str(model_source).strip():
            raise ModelLoadError(str(model_source), "model source is empty")

        import mlflow

        if self.config.tracking_uri:
            mlflow.set_tracking_uri(self.config.tracking_uri)

        logger.info(f"Loading model: {model_source}")

        try:
            model = mlflow.pyfunc.load_model(model_source)
        except Exception as e:
            logger.error(f"Failed to load {model_source}: {e}")
            raise ModelLoadError(model_source, str(e)) from e

        input_schema = model.metadata.get_input_schema()
        if input_schema is None:
            raise ModelLoadError(model_source, "model has no input signature")

        try:
            input_fields = fields_from_schema(input_schema)
        except ValueError as e:
            raise ModelLoadError(model_source, f"unsupported input signature: {e}") from e

        output_schema = model.metadata.get_output_schema()
        output_names = []
        if output_schema is not None:
            output_names = [c.name for c in output_schema.inputs if getattr(c, "name", None)]

        targets, outputs = self._split_outputs(output_names)
        if not targets:
            raise ModelLoadError(
                model_source,
                "no target field: model signature has no named outputs and none configured",
            )

        evaluator = MLflowModelEvaluator(
            model=model,
            input_fields=input_fields,
            target_fields=targets,
            output_fields=outputs,
            model_source=model_source,
        )
        logger.info(
            f"Loaded model {model_source}: inputs={len(input_fields)}, "
            f"targets={targets}, outputs={outputs}"
        )
        return evaluator
