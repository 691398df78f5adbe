"""
CSRE Core Package
=================

Clinical Subset Risk Estimator.

Estimates the probability of a binary clinical outcome from a sparse set of
indicator variables, using the logistic-regression model fitted on exactly
the variables the caller supplied.

This package contains:
    - engine/: Model artifact loading, model selection and inference
    - api/: FastAPI REST API layer
    - config: Environment-based settings
    - logging: Structured logging setup

Author: CSRE Team
Version: 1.0.0
"""

__version__ = "1.0.0"
