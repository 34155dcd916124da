"""
Prompt templates with `{{NAME}}` placeholders.

Unknown placeholders are left in place (and logged) so a partially filled
template is still inspectable.
"""

import logging
import re
from pathlib import Path
from typing import Dict, List, Optional, Union

from ..core.exceptions import TemplateError


logger = logging.getLogger(__name__)

PLACEHOLDER = re.compile(r"\{\{(\w+)\}\}")

TemplateValue = Union[str, int, float, bool]

RAG_TEMPLATE = """You are a helpful assistant. Answer the question using only the context below.
If the context does not contain the answer, say that you don't know.

Context:
{{CONTEXT_DATA}}

Question: {{USER_QUESTION}}

Answer:"""


class TemplateParser:
    """
    Replaces `{{NAME}}` placeholders with variable values.

    Example:
        >>> TemplateParser({"NAME": "Widget A"}).parse_string("Hi {{NAME}}")
        'Hi Widget A'
    """

    def __init__(self, variables: Optional[Dict[str, TemplateValue]] = None):
        self.variables: Dict[str, TemplateValue] = dict(variables or {})

    def parse_string(self, template: str) -> str:
        def substitute(match):
            name = match.group(1)
            if name not in self.variables:
                logger.warning(f"Template variable '{name}' not found, keeping placeholder")
                return match.group(0)
            return _to_str(self.variables[name])

        return PLACEHOLDER.sub(substitute, template)

    def parse_file(self, path) -> str:
        """
        Load a template file and fill it.

        Raises:
            TemplateError: If the file cannot be read
        """
        try:
            template = Path(path).read_text(encoding="utf-8")
        except OSError as e:
            raise TemplateError(f"Failed to load template file: {path}. {e}")
        return self.parse_string(template)

    def set_variables(self, variables: Dict[str, TemplateValue]) -> None:
        self.variables.update(variables)

    def set_variable(self, key: str, value: TemplateValue) -> None:
        self.variables[key] = value

    def get_variables(self) -> Dict[str, TemplateValue]:
        return dict(self.variables)

    def clear_variables(self) -> None:
        self.variables = {}

    def unresolved_variables(self, template: str) -> List[str]:
        """Placeholder names in `template` that have no value."""
        return [name for name in PLACEHOLDER.findall(template) if name not in self.variables]

    def write_to_file(self, template: str, output_path) -> None:
        Path(output_path).write_text(self.parse_string(template), encoding="utf-8")


class InlineTemplateParser(TemplateParser):
    """TemplateParser with a registry of named templates."""

    def __init__(self, variables: Optional[Dict[str, TemplateValue]] = None):
        super().__init__(variables)
        self.templates: Dict[str, str] = {}

    def register_template(self, name: str, template: str) -> None:
        self.templates[name] = template

    def parse_template(self, name: str) -> str:
        if name not in self.templates:
            raise TemplateError(f"Template '{name}' not found")
        return self.parse_string(self.templates[name])

    def get_template_names(self) -> List[str]:
        return list(self.templates)

    def load_templates_from_dir(self, dir_path) -> int:
        """
        Register every `*.txt` file in a directory under its stem.

        Returns:
            Number of templates loaded

        Raises:
            TemplateError: If the directory cannot be read
        """
        directory = Path(dir_path)
        try:
            paths = sorted(p for p in directory.iterdir() if p.is_file() and p.suffix == ".txt")
            for path in paths:
                self.register_template(path.stem, path.read_text(encoding="utf-8"))
        except OSError as e:
            raise TemplateError(f"Failed to load templates from directory: {dir_path}. {e}")
        return len(paths)


def create_rag_prompt(context_data: str, user_question: str, template_path=None) -> str:
    """
    Fill the RAG template with retrieved context and the question.

    Args:
        context_data: Retrieved chunk texts
        user_question: Original question
        template_path: Optional template file; defaults to RAG_TEMPLATE
    """
    parser = TemplateParser({"CONTEXT_DATA": context_data, "USER_QUESTION": user_question})
    if template_path:
        return parser.parse_file(template_path)
    return parser.parse_string(RAG_TEMPLATE)


def _to_str(value: TemplateValue) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
