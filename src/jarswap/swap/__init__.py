"""
Patch/restore engine.

Local side:
    - ArtifactMapper: source files → compiled classes
    - LocalStager: unpack source jar, collect classes, pack overlay
    - JarSwapper: stage → deliver → merge, or restore

Destination side:
    - DestinationStagingArea: staging paths and pristine backup per jar
    - RemoteMerger: backup → unpack → overlay → repack
    - RestoreManager: put the backup back
    - apply_request: run a RemoteRequest
"""

from .mapper import ArtifactMapper, CompiledArtifactSet
from .pipeline import Pipeline, PipelineResult, StageResult
from .staging import DestinationStagingArea
from .stager import LocalStager, LocalWorkspace, StagingResult
from .merger import RemoteMerger, MergeResult, MergeState
from .restore import RestoreManager, RestoreResult
from .destination import apply_request
from .swapper import JarSwapper, SwapOutcome

__all__ = [
    "ArtifactMapper",
    "CompiledArtifactSet",
    "Pipeline",
    "PipelineResult",
    "StageResult",
    "DestinationStagingArea",
    "LocalStager",
    "LocalWorkspace",
    "StagingResult",
    "RemoteMerger",
    "MergeResult",
    "MergeState",
    "RestoreManager",
    "RestoreResult",
    "apply_request",
    "JarSwapper",
    "SwapOutcome",
]
