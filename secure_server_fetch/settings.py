"""
Runtime Settings
================
Deployment environment detection shared by the store and the rate limit gate.
"""

import os
from typing import Optional

ENVIRONMENT_VAR = "ENVIRONMENT"

# Anything else counts as production, including an unset variable
NON_PRODUCTION_ENVIRONMENTS = ("development", "test", "preview")


def get_environment() -> str:
    return os.getenv(ENVIRONMENT_VAR, "").strip().lower()


def is_production(environment: Optional[str] = None) -> bool:
    """
    Whether errors must be redacted before reaching clients.

    Args:
        environment: Explicit environment name; read from ENVIRONMENT if None
    """
    if environment is None:
        environment = get_environment()
    return environment.strip().lower() not in NON_PRODUCTION_ENVIRONMENTS
