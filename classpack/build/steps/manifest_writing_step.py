"""
清单写出步骤模块

按 classpath 顺序写出 classpath.txt。
"""

from ...utils.logging import success, LogStage
from ..build_context import BuildContext
from ..classpath import write_manifest
from .build_step import BuildStep


class ManifestWritingStep(BuildStep):
    """清单写出步骤"""

    def __init__(self):
        super().__init__("manifest", "写出清单", LogStage.MANIFEST)

    def get_progress_range(self) -> tuple[int, int]:
        return (95, 100)

    def execute(self, context: BuildContext) -> None:
        context.manifest_path = write_manifest(
            context.output_directory,
            context.elements,
            strict_create=context.config.strict_create,
        )

        self.report_done(context, context.manifest_path.name)
        success(f"清单已写出: {context.manifest_path} ({len(context.elements)} 项)", stage=LogStage.MANIFEST)
