"""
Build pipeline: documentation generation, publishing, and example packaging.
"""

from .executor import BuildReport, BuildStep, StepOutcome, execute_build, plan_build

__all__ = ["BuildReport", "BuildStep", "StepOutcome", "execute_build", "plan_build"]
