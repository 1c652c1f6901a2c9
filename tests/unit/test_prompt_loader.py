"""
Unit tests for prompt_loader module.
"""

import pytest
from jinja2 import TemplateNotFound, TemplateSyntaxError, UndefinedError

from poly_summaries.utils.prompt_loader import (
    PromptLoader,
    get_default_loader,
    render_prompt,
)


@pytest.fixture
def summary_vars():
    return {
        "name": "Jane Doe",
        "rating": 3.5,
        "num_evals": 12,
        "clarity": 3.0,
        "helpfulness": 2.5,
        "department": "CSC",
        "courses": "CSC 101",
        "comments": "clear | fair",
        "link": "https://polyratings.dev/professor/1",
    }


class TestPromptLoader:
    """Test cases for PromptLoader class."""

    def test_initialization_with_default_path(self):
        """Test that PromptLoader initializes with default template directory."""
        # Act
        loader = PromptLoader()

        # Assert
        assert loader.template_dir.name == "prompts"
        assert (loader.template_dir / "professor" / "summary.j2").exists()

    def test_render_simple_template(self, tmp_path):
        """Test rendering a simple template with variables."""
        # Arrange
        template_dir = tmp_path / "prompts"
        template_dir.mkdir()
        (template_dir / "test.j2").write_text("Hello {{ name }}!")

        loader = PromptLoader(template_dir=template_dir)

        # Act
        result = loader.render("test.j2", name="World")

        # Assert
        assert result == "Hello World!"

    def test_does_not_escape_html(self, tmp_path):
        """Prompt text is passed through without HTML escaping."""
        (tmp_path / "t.j2").write_text("{{ text }}")
        loader = PromptLoader(template_dir=tmp_path)

        assert loader.render("t.j2", text="A & B <great>") == "A & B <great>"

    def test_template_not_found_raises_error(self, tmp_path):
        loader = PromptLoader(template_dir=tmp_path)

        with pytest.raises(TemplateNotFound):
            loader.render("missing.j2")

    def test_syntax_error_raises(self, tmp_path):
        (tmp_path / "bad.j2").write_text("{% if %}")
        loader = PromptLoader(template_dir=tmp_path)

        with pytest.raises(TemplateSyntaxError):
            loader.render("bad.j2")

    def test_strict_undefined_raises_error(self, tmp_path):
        """Test that missing variables raise with strict_undefined."""
        (tmp_path / "t.j2").write_text("Hello {{ name }}")
        loader = PromptLoader(template_dir=tmp_path)

        with pytest.raises(UndefinedError):
            loader.render("t.j2")

    def test_non_strict_undefined_renders_empty(self, tmp_path):
        (tmp_path / "t.j2").write_text("Hello {{ name }}!")
        loader = PromptLoader(template_dir=tmp_path, strict_undefined=False)

        assert loader.render("t.j2") == "Hello !"


class TestSummaryTemplate:
    """Test cases for the professor summary template."""

    def test_renders_all_fields(self, summary_vars):
        # Act
        prompt = render_prompt("professor/summary.j2", **summary_vars)

        # Assert
        assert '"Jane Doe"' in prompt
        assert "3.5/4.0 (12 evaluations)" in prompt
        assert "clear | fair" in prompt
        assert prompt.rstrip().endswith('"https://polyratings.dev/professor/1"')

    def test_missing_variable_raises(self, summary_vars):
        del summary_vars["link"]

        with pytest.raises(UndefinedError):
            render_prompt("professor/summary.j2", **summary_vars)


def test_default_loader_is_cached():
    assert get_default_loader() is get_default_loader()
