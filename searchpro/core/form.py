"""表单模型

编辑器表单的最小抽象：一组有名称和类型的字段，以及字段变更时的监听器。
字段值与浏览器表单一致，以文本保存（复选框使用 checked，多选使用列表）。
"""

import math
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional


ChangeListener = Callable[['FormField'], None]

CHECKBOX = "checkbox"
NUMBER = "number"
RANGE = "range"
COLOR = "color"
TEXT = "text"
SELECT = "select"
TEXTAREA = "textarea"

NUMERIC_TYPES = (NUMBER, RANGE)

CHANGE_EVENT = "change"
INPUT_EVENT = "input"


def parse_number(value: Any) -> Optional[float]:
    """把字段值解析为有限数字，无法解析或为 NaN、无穷大时返回 None"""
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
    elif not isinstance(value, (int, float)):
        return None
    try:
        number = float(value)
    except (ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


@dataclass
class FormField:
    """表单字段"""
    name: str
    type: str = TEXT
    value: Any = ""
    checked: bool = False
    min: Optional[float] = None
    max: Optional[float] = None
    multiple: bool = False
    options: List[str] = field(default_factory=list)
    valid: bool = True
    message: Optional[str] = None

    @property
    def current_value(self) -> Any:
        """字段的当前值，复选框返回 checked"""
        return self.checked if self.type == CHECKBOX else self.value

    def mark_valid(self) -> None:
        self.valid = True
        self.message = None

    def mark_invalid(self, message: str) -> None:
        self.valid = False
        self.message = message


class FormContainer:
    """表单容器

    按添加顺序保存字段，字段名唯一。
    """

    def __init__(self, name: str = "", fields: Optional[List[FormField]] = None):
        self.name = name
        self._fields: Dict[str, FormField] = {}
        self._listeners: Dict[str, List[ChangeListener]] = {CHANGE_EVENT: [], INPUT_EVENT: []}
        for item in fields or []:
            self.add(item)

    def add(self, form_field: FormField) -> FormField:
        """添加字段，同名字段会被替换"""
        self._fields[form_field.name] = form_field
        return form_field

    def get(self, name: str) -> Optional[FormField]:
        return self._fields.get(name)

    @property
    def fields(self) -> List[FormField]:
        return list(self._fields.values())

    def __iter__(self) -> Iterator[FormField]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __contains__(self, name: object) -> bool:
        return name in self._fields

    def add_change_listener(self, listener: ChangeListener) -> None:
        """注册字段变更监听器（对应提交后的 change 事件）"""
        if listener not in self._listeners[CHANGE_EVENT]:
            self._listeners[CHANGE_EVENT].append(listener)

    def remove_change_listener(self, listener: ChangeListener) -> None:
        if listener in self._listeners[CHANGE_EVENT]:
            self._listeners[CHANGE_EVENT].remove(listener)

    def add_input_listener(self, listener: ChangeListener) -> None:
        """注册输入监听器（对应拖动滑块等连续 input 事件）"""
        if listener not in self._listeners[INPUT_EVENT]:
            self._listeners[INPUT_EVENT].append(listener)

    def remove_input_listener(self, listener: ChangeListener) -> None:
        if listener in self._listeners[INPUT_EVENT]:
            self._listeners[INPUT_EVENT].remove(listener)

    @property
    def listener_count(self) -> int:
        return len(self._listeners[CHANGE_EVENT]) + len(self._listeners[INPUT_EVENT])

    def change(self, name: str, value: Any) -> FormField:
        """模拟用户提交编辑：写入字段值并通知 change 监听器

        Raises:
            KeyError: 字段不存在
        """
        return self._dispatch(CHANGE_EVENT, name, value)

    def input(self, name: str, value: Any) -> FormField:
        """模拟连续输入：写入字段值并通知 input 监听器

        Raises:
            KeyError: 字段不存在
        """
        return self._dispatch(INPUT_EVENT, name, value)

    def _dispatch(self, event: str, name: str, value: Any) -> FormField:
        form_field = self._fields[name]
        if form_field.type == CHECKBOX:
            form_field.checked = bool(value)
        else:
            form_field.value = value

        for listener in list(self._listeners[event]):
            listener(form_field)
        return form_field
