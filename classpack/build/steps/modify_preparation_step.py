"""
修改准备步骤模块

根据配置的变换器链（或外部注入的函数）创建类成员修改函数。
"""

from ...utils.logging import info, debug, LogStage
from ..build_context import BuildContext
from ..transform import Modifier
from .build_step import BuildStep


class ModifyPreparationStep(BuildStep):
    """修改准备步骤"""

    def __init__(self):
        super().__init__("prepare-modify", "准备字节码修改", LogStage.MODIFY)

    def get_progress_range(self) -> tuple[int, int]:
        return (40, 45)

    def execute(self, context: BuildContext) -> None:
        if context.config.modify is None:
            debug("未配置字节码修改任务", stage=LogStage.MODIFY)
            return

        modifier = Modifier(context.config.modify, context.modify_function)
        modifier.create_modify_function()
        context.modifier = modifier

        names = [name.value for name in context.config.modify.transformers]
        if context.modify_function is not None:
            info("使用外部注入的修改函数", stage=LogStage.MODIFY)
        else:
            info(f"变换器: {', '.join(names) if names else '(无)'}", stage=LogStage.MODIFY)

        self.report_done(context)
