"""
What to do when the Notion store fails during a check that guards another
operation. Every call site names its policy explicitly.
"""
import logging

logger = logging.getLogger(__name__)

PROPAGATE = "propagate"
PROCEED = "proceed"


def on_dependency_failure(policy, error, action):
    """Raises ``error`` under PROPAGATE; logs it and returns under PROCEED."""
    if policy == PROPAGATE:
        raise error
    if policy != PROCEED:
        raise ValueError(f"Unknown dependency failure policy: {policy!r}")
    logger.warning("%s failed, proceeding anyway: %s", action, error)
