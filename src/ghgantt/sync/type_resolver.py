"""Mapping between local task types and GitHub labels / project fields."""

from collections.abc import Mapping

from ..models import DEFAULT_TASK_TYPE, TaskTypeConfig
from ..models.task import CustomFieldValue


def resolve_task_type(
    labels: list[str],
    custom_fields: Mapping[str, CustomFieldValue],
    task_types: Mapping[str, TaskTypeConfig],
    type_field_name: str | None = None,
) -> str:
    """Resolve the local task type of a GitHub issue.

    Order of precedence:
    1. Value of the configured type field (matched against github_field_value)
    2. First label matching a type's github_label
    3. The default "task" type
    """
    if type_field_name:
        field_value = custom_fields.get(type_field_name)
        if field_value:
            for type_name, type_config in task_types.items():
                if type_config.github_field_value and type_config.github_field_value == field_value:
                    return type_name

    for type_name, type_config in task_types.items():
        if type_config.github_label and type_config.github_label in labels:
            return type_name

    return DEFAULT_TASK_TYPE


def resolve_type_option_id(
    type_name: str,
    task_types: Mapping[str, TaskTypeConfig],
    type_field_name: str,
    option_ids: Mapping[str, Mapping[str, str]],
) -> str | None:
    """Single-select option ID to write for a task type, if one is mapped."""
    type_config = task_types.get(type_name)
    if type_config is None or not type_config.github_field_value:
        return None
    return option_ids.get(type_field_name, {}).get(type_config.github_field_value)
