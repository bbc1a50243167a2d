"""构建步骤"""

from .build_step import BuildStep
from .artifact_resolution_step import ArtifactResolutionStep
from .minify_analysis_step import MinifyAnalysisStep
from .modify_preparation_step import ModifyPreparationStep
from .repackaging_step import RepackagingStep
from .manifest_writing_step import ManifestWritingStep

__all__ = [
    "BuildStep",
    "ArtifactResolutionStep",
    "MinifyAnalysisStep",
    "ModifyPreparationStep",
    "RepackagingStep",
    "ManifestWritingStep",
]
