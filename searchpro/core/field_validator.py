"""表单字段验证器

按字段类型验证用户输入：文本内容安全、数字范围、颜色格式和滑块范围。
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from searchpro.core.form import COLOR, NUMBER, RANGE, FormContainer, FormField, parse_number
from searchpro.core.logger import get_logger
from searchpro.core.property_guard import MAX_KEY_LENGTH
from searchpro.core.sanitizer import ContentSanitizer

logger = get_logger("field_validator")

HEX_COLOR = re.compile(r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$")


@dataclass
class FieldValidation:
    """单个字段的验证结果"""
    is_valid: bool = True
    message: Optional[str] = None

    @classmethod
    def ok(cls) -> 'FieldValidation':
        return cls(True, None)

    @classmethod
    def fail(cls, message: str) -> 'FieldValidation':
        return cls(False, message)


@dataclass
class FormValidationResult:
    """整个表单的验证结果"""
    is_valid: bool = True
    failed_fields: List[str] = field(default_factory=list)
    messages: Dict[str, str] = field(default_factory=dict)

    def add_failure(self, field_name: str, message: Optional[str]) -> None:
        """记录失败字段

        Args:
            field_name: 字段名
            message: 失败原因
        """
        self.is_valid = False
        self.failed_fields.append(field_name)
        self.messages[field_name] = message or "Invalid value"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'is_valid': self.is_valid,
            'failed_fields': list(self.failed_fields),
            'messages': dict(self.messages),
        }


class FieldValidator:
    """字段验证器"""

    def __init__(self, sanitizer: Optional[ContentSanitizer] = None):
        self.sanitizer = sanitizer or ContentSanitizer()

    def validate_field(self, form_field: FormField, mark: bool = True) -> FieldValidation:
        """验证单个字段

        Args:
            form_field: 表单字段
            mark: 是否把结果写回字段的 valid / message

        Returns:
            验证结果
        """
        try:
            outcome = self._validate(form_field)
        except (TypeError, ValueError) as e:
            logger.error("Error in field validation", field=form_field.name, error=str(e))
            outcome = FieldValidation.fail("Validation error")

        if mark:
            if outcome.is_valid:
                form_field.mark_valid()
            else:
                form_field.mark_invalid(outcome.message)
        return outcome

    def validate_container(self, container: FormContainer) -> FormValidationResult:
        """验证表单中的全部字段"""
        result = FormValidationResult()
        for form_field in container:
            outcome = self.validate_field(form_field)
            if not outcome.is_valid:
                result.add_failure(form_field.name, outcome.message)

        if not result.is_valid:
            logger.debug("Form validation failed", form=container.name, failed=result.failed_fields)
        return result

    def _validate(self, form_field: FormField) -> FieldValidation:
        value = form_field.current_value

        if isinstance(value, str) and not self.sanitizer.is_content_safe(value):
            logger.security("Unsafe content in field",
                            field=self.sanitizer.sanitize_text(form_field.name, MAX_KEY_LENGTH))
            return FieldValidation.fail("Invalid content detected")

        if form_field.type == NUMBER:
            if value in ("", None):
                return FieldValidation.ok()
            number = parse_number(value)
            if number is None:
                return FieldValidation.fail("Must be a valid number")
            return self._check_bounds(form_field, number)

        if form_field.type == RANGE:
            number = parse_number(value)
            if number is None:
                return FieldValidation.fail("Must be a valid number")
            return self._check_bounds(form_field, number)

        if form_field.type == COLOR:
            if value and not HEX_COLOR.match(str(value)):
                return FieldValidation.fail("Must be a hex color like #1a2b3c")

        return FieldValidation.ok()

    def _check_bounds(self, form_field: FormField, number: float) -> FieldValidation:
        if form_field.min is not None and number < form_field.min:
            return FieldValidation.fail(f"Must be at least {_format_bound(form_field.min)}")
        if form_field.max is not None and number > form_field.max:
            return FieldValidation.fail(f"Must be at most {_format_bound(form_field.max)}")
        return FieldValidation.ok()


def _format_bound(bound: float) -> str:
    return str(int(bound)) if float(bound).is_integer() else str(bound)
