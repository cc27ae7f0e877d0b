"""
Model Analysis Utilities
========================

Provides parameter counting and model summary functionality.

"""

from typing import Any, Dict

from ..models.base import BaseModel


class ModelAnalyzer:
    """Analyze model complexity and parameters."""

    @staticmethod
    def count_parameters(model: Any) -> int:
        """
        Count learned parameters of a fitted model.

        Trees count their nodes, forests the nodes of all trees and linear
        models their weights plus biases.

        Args:
            model: The model to analyze

        Returns:
            Total number of parameters (0 for unfitted or unknown models)
        """
        # Ensembles
        if hasattr(model, 'estimators_') and model.estimators_:
            return sum(ModelAnalyzer.count_parameters(m) for m in model.estimators_)

        # Tree-based models
        if getattr(model, 'node_count', 0):
            return int(model.node_count)

        # Linear models
        if getattr(model, 'weights_', None) is not None:
            return int(model.weights_.size + model.bias_.size)

        return 0

    @staticmethod
    def get_model_info(model: Any) -> Dict[str, Any]:
        """
        Get comprehensive model information.

        Args:
            model: The model to analyze

        Returns:
            Dictionary with model information
        """
        info = {
            'parameters': ModelAnalyzer.count_parameters(model),
            'type': type(model).__name__,
            'fitted': bool(getattr(model, 'fitted', False)),
        }

        if isinstance(model, BaseModel):
            info['hyperparameters'] = {k: v for k, v in model.config.items() if k != 'random_state'}

        if hasattr(model, 'get_depth'):
            info['depth'] = model.get_depth()
            info['leaves'] = model.n_leaves
        elif hasattr(model, 'estimators_') and model.estimators_:
            info['trees'] = len(model.estimators_)
            info['mean_depth'] = sum(t.get_depth() for t in model.estimators_) / len(model.estimators_)

        return info
