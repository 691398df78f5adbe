"""
Model Selector
==============

Finds the unique fitted model whose variable set equals the set of
variables the caller actually supplied.

Selection is exact set equality only. There is no subset, superset or
best-overlap fallback: evaluating a model on variables it was not fitted
on would silently change which statistical model is being used.

Author: CSRE Team
Version: 1.0.0
"""

from typing import Iterable, Union

from csre.engine.errors import NoModelMatch
from csre.engine.models import FittedModel
from csre.engine.repository import ModelRepository, signature_of
from csre.logging import get_logger


logger = get_logger(__name__)


class ModelSelector:
    """
    Exact-signature model selection over a ModelRepository.

    Example:
        selector = ModelSelector(repository)
        outcome = selector.select({"violence", "depression"})
        if isinstance(outcome, NoModelMatch):
            ...
    """

    def __init__(self, repository: ModelRepository):
        self.repository = repository

    def select(self, known_variable_ids: Iterable[str]) -> Union[FittedModel, NoModelMatch]:
        """
        Select the model fitted on exactly ``known_variable_ids``.

        Args:
            known_variable_ids: Variables the caller supplied (non-empty)

        Returns:
            The matching FittedModel, or NoModelMatch when the artifact
            has no model for this combination

        Raises:
            ValueError: If ``known_variable_ids`` is empty
        """
        signature = signature_of(known_variable_ids)
        if not signature:
            raise ValueError("Cannot select a model for an empty variable set")

        model = self.repository.lookup(signature)
        if model is None:
            logger.error(
                "no_model_match",
                variables=sorted(signature),
                available_models=len(self.repository),
            )
            return NoModelMatch(signature=signature)

        logger.debug("model_selected", model=model.name, variables=sorted(signature))
        return model
