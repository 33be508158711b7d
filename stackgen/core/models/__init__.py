"""
Domain models — Pydantic types and report dataclasses for stackgen.

All models are re-exported here for convenient access:

    from stackgen.core.models import Stack, DirConfig, GeneratedFile, Report
"""

from stackgen.core.models.config import (
    BackendBlock,
    CodegenSettings,
    DirConfig,
    GenerateHclBlock,
    HclBlock,
    HclBody,
    StackSection,
)
from stackgen.core.models.report import CheckReport, Report, StackReport
from stackgen.core.models.stack import Stack
from stackgen.core.models.template import GeneratedFile

__all__ = [
    # config.py
    "BackendBlock",
    "CodegenSettings",
    "DirConfig",
    "GenerateHclBlock",
    "HclBlock",
    "HclBody",
    "StackSection",
    # report.py
    "CheckReport",
    "Report",
    "StackReport",
    # stack.py
    "Stack",
    # template.py
    "GeneratedFile",
]
