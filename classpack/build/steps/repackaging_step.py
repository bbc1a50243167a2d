"""
重新打包步骤模块

逐个处理 classpath 中的归档：被任务选中的重新打包，其余原样复制。
任一归档失败即终止，已写出的文件保留在磁盘上。
"""

from ...utils import ensure_directory, format_size
from ...utils.logging import info, success, LogStage
from ..build_context import BuildContext
from ..repackager import ArchiveRepackager
from .build_step import BuildStep


class RepackagingStep(BuildStep):
    """重新打包步骤"""

    def __init__(self):
        super().__init__("repackage", "重新打包", LogStage.REPACK)

    def get_progress_range(self) -> tuple[int, int]:
        return (45, 95)

    def execute(self, context: BuildContext) -> None:
        info(f"输出目录: {context.output_directory}", stage=LogStage.REPACK)
        ensure_directory(context.output_directory)

        repackager = ArchiveRepackager(
            compression_level=context.config.get_compression_level(),
            strict_create=context.config.strict_create,
        )
        start, end = self.get_progress_range()
        total = len(context.artifacts)

        for index, artifact in enumerate(context.artifacts):
            context.report_progress(
                self.description,
                start + int(index / max(1, total) * (end - start)),
                artifact.file.name,
            )

            keep = None
            if context.minifier is not None and context.minifier.accept(artifact):
                keep = context.minify_predicate

            modify = None
            if context.modifier is not None and context.modifier.accept(artifact):
                modify = context.modifier.get_modify_function()

            if keep is None and modify is None:
                file_name = artifact.copy_file_name()
                repackager.copy(artifact.file, context.output_directory / file_name)
                context.build_stats['copied_archives'] += 1
            else:
                file_name = artifact.repackaged_file_name()
                stats = repackager.repackage(
                    artifact.file,
                    context.output_directory / file_name,
                    keep=keep,
                    modify=modify,
                )
                context.build_stats['repackaged_archives'] += 1
                context.build_stats['members_dropped'] += stats.members_dropped
                context.build_stats['classes_modified'] += stats.classes_modified

            context.build_stats['output_size'] += (context.output_directory / file_name).stat().st_size
            context.elements.append(file_name)

        self.report_done(context, f"完成 {total} 个归档")
        success(
            f"归档处理完成: 重新打包 {context.build_stats['repackaged_archives']} 个, "
            f"复制 {context.build_stats['copied_archives']} 个, "
            f"输出 {format_size(context.build_stats['output_size'])}",
            stage=LogStage.REPACK,
        )
