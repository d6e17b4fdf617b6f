"""
Submission module - Commit pipeline and pluggable persistence transports.
"""

from .pipeline import SubmissionPipeline
from .transport import (
    BaseTransport,
    LocalDatasetTransport,
    SimulatedTransport,
    create_transport,
    submission_paths,
)

__all__ = [
    "BaseTransport",
    "LocalDatasetTransport",
    "SimulatedTransport",
    "SubmissionPipeline",
    "create_transport",
    "submission_paths",
]
