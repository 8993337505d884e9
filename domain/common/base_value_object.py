"""值对象基类"""

from dataclasses import dataclass


@dataclass(frozen=True)
class BaseValueObject:
    """
    值对象基类

    值对象不可变，创建后立即调用 validate() 校验自身。
    子类覆盖 validate() 实现具体的校验规则。
    """

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """验证值对象的有效性（默认无校验）"""
