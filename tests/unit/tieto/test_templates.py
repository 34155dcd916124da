"""
Unit tests for prompt templates.
"""

import pytest

from tieto.core.exceptions import TemplateError
from tieto.prompts.templates import (
    RAG_TEMPLATE,
    InlineTemplateParser,
    TemplateParser,
    create_rag_prompt,
)


class TestTemplateParser:
    """Tests for TemplateParser."""

    def test_substitution(self):
        """Test placeholders are replaced."""
        parser = TemplateParser({"NAME": "Widget A", "PRICE": 19.95})

        assert parser.parse_string("{{NAME}} costs {{PRICE}}") == "Widget A costs 19.95"

    def test_missing_variable_kept(self):
        """Test unknown placeholders are left as-is."""
        parser = TemplateParser({"NAME": "Widget A"})

        assert parser.parse_string("{{NAME}} {{COLOUR}}") == "Widget A {{COLOUR}}"

    def test_booleans(self):
        """Test booleans render in lowercase."""
        assert TemplateParser({"FLAG": True}).parse_string("{{FLAG}}") == "true"

    def test_variable_management(self):
        """Test setting, reading and clearing variables."""
        parser = TemplateParser()
        parser.set_variables({"A": "1", "B": "2"})
        parser.set_variable("C", "3")

        assert parser.get_variables() == {"A": "1", "B": "2", "C": "3"}
        assert parser.unresolved_variables("{{A}} {{D}}") == ["D"]

        parser.clear_variables()
        assert parser.get_variables() == {}

    def test_parse_file(self, tmp_path):
        """Test templates load from files."""
        path = tmp_path / "t.txt"
        path.write_text("Hello {{WHO}}", encoding="utf-8")

        assert TemplateParser({"WHO": "there"}).parse_file(path) == "Hello there"

    def test_parse_missing_file(self, tmp_path):
        """Test a missing file raises TemplateError."""
        with pytest.raises(TemplateError):
            TemplateParser().parse_file(tmp_path / "missing.txt")

    def test_write_to_file(self, tmp_path):
        """Test the filled template is written out."""
        output = tmp_path / "out.txt"
        TemplateParser({"X": "y"}).write_to_file("x={{X}}", output)

        assert output.read_text(encoding="utf-8") == "x=y"


class TestInlineTemplateParser:
    """Tests for the named template registry."""

    def test_register_and_parse(self):
        """Test a registered template can be filled by name."""
        parser = InlineTemplateParser({"Q": "why?"})
        parser.register_template("ask", "Question: {{Q}}")

        assert parser.parse_template("ask") == "Question: why?"
        assert parser.get_template_names() == ["ask"]

    def test_unknown_template(self):
        """Test an unregistered name raises TemplateError."""
        with pytest.raises(TemplateError, match="not found"):
            InlineTemplateParser().parse_template("nope")

    def test_load_from_dir(self, tmp_path):
        """Test only .txt files are loaded, keyed by stem."""
        (tmp_path / "summary.txt").write_text("S {{X}}", encoding="utf-8")
        (tmp_path / "answer.txt").write_text("A {{X}}", encoding="utf-8")
        (tmp_path / "notes.md").write_text("ignored", encoding="utf-8")
        parser = InlineTemplateParser({"X": "1"})

        assert parser.load_templates_from_dir(tmp_path) == 2
        assert sorted(parser.get_template_names()) == ["answer", "summary"]
        assert parser.parse_template("summary") == "S 1"


class TestCreateRagPrompt:
    """Tests for create_rag_prompt."""

    def test_default_template(self):
        """Test context and question are filled into the built-in template."""
        prompt = create_rag_prompt("Widget A is blue.", "What colour is Widget A?")

        assert "Widget A is blue." in prompt
        assert "What colour is Widget A?" in prompt
        assert "{{" not in prompt
        assert "{{CONTEXT_DATA}}" in RAG_TEMPLATE

    def test_template_file(self, tmp_path):
        """Test a template file overrides the default."""
        path = tmp_path / "rag.txt"
        path.write_text("{{USER_QUESTION}} | {{CONTEXT_DATA}}", encoding="utf-8")

        assert create_rag_prompt("ctx", "q", template_path=path) == "q | ctx"
