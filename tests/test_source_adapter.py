import ast
import textwrap

import pytest

from localized_date import quick_expand
from localized_date.adapters.source import expand_file, expand_source
from localized_date.core.config import GeneratorConfig
from localized_date.core.errors import (
    InvalidDeclaration,
    InvalidPropertyName,
    MacroError,
    MissingBaseName,
)

MODULE = '''\
"""Task models."""

from datetime import datetime


class Task:
    title = "untitled"
    dueLocal = LocalizedDate(withTimeProperty="hasDueTime")

    def describe(self):
        return self.title
'''


def class_members(code, class_name):
    tree = ast.parse(code)
    cls = next(
        node for node in tree.body
        if isinstance(node, ast.ClassDef) and node.name == class_name
    )
    names = []
    for node in cls.body:
        if isinstance(node, ast.FunctionDef):
            names.append(node.name)
        elif isinstance(node, ast.AnnAssign):
            names.append(node.target.id)
        elif isinstance(node, ast.Assign):
            names.append(node.targets[0].id)
    return names


def test_expands_field_trigger_in_place():
    result = expand_source(MODULE)

    assert result.success
    assert result.changed
    assert len(result.expansions) == 1
    assert result.expansions[0].public_name == "dueLocalDate"
    assert "LocalizedDate(" not in result.code

    assert class_members(result.code, "Task") == [
        "title",
        "dueGMTDate",
        "_dueLocalDate",
        "dueLocalDate",
        "dueLocalDate",
        "describe",
    ]
    assert "    # LocalizedDate: dueLocal -> dueLocalDate\n" in result.code
    assert "        if self.dueGMTDate is not None:\n" in result.code


def test_missing_imports_go_after_docstring():
    lines = expand_source(MODULE).code.splitlines()
    assert lines[0] == '"""Task models."""'
    assert lines[1] == "from typing import Optional"
    assert lines.count("from datetime import datetime") == 1


def test_expanded_module_compiles():
    result = expand_source(MODULE)
    compile(result.code, "<expanded>", "exec")
    assert result.code.endswith("return self.title\n")


def test_declaration_level_trigger():
    source = textwrap.dedent(
        """\
        class Task:
            LocalizedDate(baseName="recurringEnd", includeLegacyComputedProperty=True)
        """
    )
    result = expand_source(source)

    assert result.success
    assert class_members(result.code, "Task") == [
        "recurringEndGMTDate",
        "_recurringEndLocalDate",
        "recurringEndLocalDate",
        "recurringEndLocalDate",
        "recurringEndDate",
        "recurringEndDate",
    ]


def test_failed_trigger_leaves_others_expanding():
    source = textwrap.dedent(
        """\
        class Task:
            a, b = LocalizedDate()
            dueLocal = LocalizedDate()
            LocalizedDate(isDueDate=False)
        """
    )
    result = expand_source(source, filename="tasks.py")

    assert not result.success
    assert len(result.expansions) == 1
    assert [d.code for d in result.diagnostics] == [
        "invalid-declaration",
        "missing-base-name",
    ]
    assert result.diagnostics[0].format().startswith("tasks.py:2:5: error: ")
    assert result.diagnostics[1].lineno == 4
    assert "    a, b = LocalizedDate()\n" in result.code
    assert "    LocalizedDate(isDueDate=False)\n" in result.code
    assert "def dueLocalDate" in result.code


def test_triggers_outside_class_bodies_are_reported():
    source = textwrap.dedent(
        """\
        due = LocalizedDate()

        class Task:
            def method(self):
                local = LocalizedDate()
        """
    )
    result = expand_source(source)

    assert [d.lineno for d in result.diagnostics] == [1, 5]
    assert not result.changed


def test_nested_classes_and_control_flow():
    source = textwrap.dedent(
        """\
        class Outer:
            class Inner:
                if True:
                    dueLocal = LocalizedDate()
        """
    )
    result = expand_source(source)

    assert result.success
    assert "            def dueLocalDate(self)" in result.code


def test_trigger_must_own_its_line():
    result = expand_source("class Task: dueLocal = LocalizedDate()\n")
    assert result.diagnostics[0].code == "invalid-declaration"
    assert not result.changed


def test_syntax_error():
    result = expand_source("class Task(:\n", filename="broken.py")

    assert result.diagnostics[0].code == "syntax-error"
    assert result.diagnostics[0].filename == "broken.py"
    assert result.code == result.original


def test_module_without_triggers_is_unchanged():
    source = "class Task:\n    title = 'x'\n"
    result = expand_source(source)
    assert result.success
    assert not result.changed


def test_config_controls_rendering():
    config = GeneratorConfig(add_comments=False, indent_size=2)
    source = "from typing import Optional\nfrom datetime import datetime\n\nclass Task:\n  dueLocal = LocalizedDate()\n"
    result = expand_source(source, config)

    assert "#" not in result.code
    assert result.code.startswith("from typing import Optional\nfrom datetime import datetime\n")
    assert "\n  @property\n  def dueLocalDate(self)" in result.code
    assert "\n    return self._dueLocalDate\n" in result.code


def test_expand_file_writes_output(tmp_path):
    source_path = tmp_path / "tasks.py"
    source_path.write_text(MODULE, encoding="utf-8")
    output_path = tmp_path / "tasks_expanded.py"

    result = expand_file(source_path, output_path=output_path)

    assert result.success
    assert output_path.read_text(encoding="utf-8") == result.code


def test_expand_file_skips_output_on_failure(tmp_path):
    source_path = tmp_path / "tasks.py"
    source_path.write_text("class Task:\n    a, b = LocalizedDate()\n", encoding="utf-8")
    output_path = tmp_path / "out.py"

    result = expand_file(source_path, output_path=output_path)

    assert not result.success
    assert not output_path.exists()


def test_crlf_module_keeps_its_line_breaks():
    source = "import os\r\n\r\nclass A:\r\n    x = 1\r\n    dueLocal = LocalizedDate()\r\n\r\ny = 2\r\n"
    result = expand_source(source)

    assert result.success
    assert "import os\r\n" in result.code
    assert "    x = 1\r\n" in result.code
    assert result.code.endswith("\r\n\r\ny = 2\r\n")
    assert result.code.count("\n") == result.code.count("\r\n")
    assert "    def dueLocalDate(self) -> Optional[datetime]:\r\n" in result.code


def test_keyword_option_names_are_diagnosed():
    source = "class A:\n    dueLocal = LocalizedDate(withTimeProperty='class')\n"
    result = expand_source(source)

    assert [d.code for d in result.diagnostics] == ["invalid-property-name"]
    assert not result.changed


def test_non_import_config_entries_are_skipped():
    config = GeneratorConfig(imports=["x = 1", "from (", "from typing import Optional"])
    result = expand_source("class A:\n    dueLocal = LocalizedDate()\n", config)

    assert result.success
    assert result.code.startswith("from typing import Optional\nclass A:\n")
    assert "x = 1" not in result.code


def test_diagnostics_keep_the_original_error():
    result = expand_source("class A:\n    LocalizedDate()\n")
    assert isinstance(result.diagnostics[0].exception, MissingBaseName)


@pytest.mark.parametrize(
    "source, error",
    [
        ("class A:\n    a, b = LocalizedDate()\n", InvalidDeclaration),
        ("class A:\n    LocalizedDate(isDueDate=False)\n", MissingBaseName),
        ("class A:\n    dueMacro = LocalizedDate()\n", InvalidPropertyName),
    ],
)
def test_quick_expand_raises_the_specific_error(source, error):
    with pytest.raises(error) as exc_info:
        quick_expand(source)
    assert exc_info.value.code == error.code


def test_quick_expand_syntax_error():
    with pytest.raises(MacroError):
        quick_expand("class A(:\n")


def test_quick_expand_applies_overrides():
    code = quick_expand("class A:\n    dueLocal = LocalizedDate()\n", add_comments=False)
    assert "#" not in code
