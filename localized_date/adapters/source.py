"""
Source adapter: expands LocalizedDate triggers in Python modules.

Parses a module with ``ast``, hands every trigger statement to the
generator and splices the rendered members back in place of the
trigger, at the trigger's indentation. A failing trigger produces a
diagnostic and is left untouched; other triggers still expand.
"""

import ast
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Tuple, Union

from ..core.config import GeneratorConfig, import_names
from ..core.declaration import analyze_statement
from ..core.errors import InvalidDeclaration, MacroError
from ..core.generator import LocalizedDateGenerator
from ..core.schema import MemberDescriptor
from ..logging_config import get_logger
from ..utils import load_source_from_file

logger = get_logger(__name__)

# Statement fields holding nested statement lists
_BODY_FIELDS = ("body", "orelse", "finalbody")

# Line breaks as counted by the tokenizer
_LINE_BREAK = re.compile(r"\r\n|\r|\n")


@dataclass
class Diagnostic:
    """A per-invocation failure reported against the source."""

    message: str
    code: str
    lineno: Optional[int] = None
    col_offset: Optional[int] = None
    filename: str = "<string>"
    exception: Optional[Exception] = field(default=None, repr=False, compare=False)

    def format(self) -> str:
        location = self.filename
        if self.lineno is not None:
            location += f":{self.lineno}:{(self.col_offset or 0) + 1}"
        return f"{location}: error: {self.message} [{self.code}]"


@dataclass
class ExpansionRecord:
    """One successfully expanded trigger."""

    lineno: int
    public_name: str
    members: List[MemberDescriptor]
    warnings: List[str] = field(default_factory=list)


@dataclass
class ExpansionResult:
    """Result of expanding one module."""

    code: str
    original: str
    diagnostics: List[Diagnostic] = field(default_factory=list)
    expansions: List[ExpansionRecord] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.diagnostics

    @property
    def changed(self) -> bool:
        return self.code != self.original

    @property
    def warnings(self) -> List[str]:
        return [w for record in self.expansions for w in record.warnings]


def _iter_statements(
    body: Sequence[ast.stmt], in_class_body: bool
) -> Iterator[Tuple[ast.stmt, bool]]:
    """Yield every statement with whether it sits directly in a class body."""
    for statement in body:
        yield statement, in_class_body

        if isinstance(statement, ast.ClassDef):
            yield from _iter_statements(statement.body, True)
            continue
        if isinstance(statement, (ast.FunctionDef, ast.AsyncFunctionDef)):
            yield from _iter_statements(statement.body, False)
            continue

        # Control flow keeps the enclosing scope
        for name in _BODY_FIELDS:
            nested = getattr(statement, name, None)
            if nested:
                yield from _iter_statements(nested, in_class_body)
        for handler in getattr(statement, "handlers", None) or []:
            yield from _iter_statements(handler.body, in_class_body)
        for case in getattr(statement, "cases", None) or []:
            yield from _iter_statements(case.body, in_class_body)


def _statement_span(
    statement: ast.stmt, lines: List[str]
) -> Tuple[int, int, str]:
    """
    Get the 0-based line span and indentation of a statement.

    Raises:
        InvalidDeclaration: If the statement shares a line with other code
    """
    start = statement.lineno - 1
    end = statement.end_lineno - 1

    first_line = lines[start].encode("utf-8")
    indent = first_line[: statement.col_offset].decode("utf-8")
    if indent.strip():
        raise InvalidDeclaration(
            "LocalizedDate must start its own line",
            statement.lineno,
            statement.col_offset,
        )

    last_line = lines[end].encode("utf-8")
    rest = last_line[statement.end_col_offset :].decode("utf-8").strip()
    if rest and not rest.startswith("#"):
        raise InvalidDeclaration(
            "LocalizedDate must end its own line",
            statement.lineno,
            statement.col_offset,
        )

    return start, end, indent


def _missing_imports(tree: ast.Module, imports: Sequence[str]) -> List[str]:
    """Get configured import lines whose names the module does not bind."""
    bound = set()
    for node in tree.body:
        if isinstance(node, (ast.Import, ast.ImportFrom)):
            for alias in node.names:
                bound.add(alias.asname or alias.name.split(".")[0])

    missing = []
    for line in imports:
        names = import_names(line)
        if names is None:
            logger.warning("Skipping configured import that is not an import: %r", line)
            continue
        if not names <= bound:
            missing.append(line)
    return missing


def _import_insertion_line(tree: ast.Module) -> int:
    """0-based line after the module docstring and __future__ imports."""
    line = 0
    for index, node in enumerate(tree.body):
        is_docstring = (
            index == 0
            and isinstance(node, ast.Expr)
            and isinstance(node.value, ast.Constant)
            and isinstance(node.value.value, str)
        )
        is_future = isinstance(node, ast.ImportFrom) and node.module == "__future__"
        if is_docstring or is_future:
            line = node.end_lineno
        else:
            break
    return line


def _indent_block(code: str, indent: str) -> List[str]:
    return [indent + line if line else "" for line in code.split("\n")]


def expand_source(
    source: str,
    config: Optional[GeneratorConfig] = None,
    filename: str = "<string>",
) -> ExpansionResult:
    """
    Expand every LocalizedDate trigger in a module's source.

    Args:
        source: Python module source
        config: Rendering configuration
        filename: Name used in diagnostics

    Returns:
        ExpansionResult with the rewritten code and any diagnostics
    """
    config = config or GeneratorConfig()
    generator = LocalizedDateGenerator(config)
    result = ExpansionResult(code=source, original=source)

    try:
        tree = ast.parse(source, filename=filename)
    except SyntaxError as e:
        result.diagnostics.append(
            Diagnostic(
                f"Cannot parse module: {e.msg}",
                "syntax-error",
                e.lineno,
                (e.offset or 1) - 1,
                filename,
            )
        )
        return result

    lines = _LINE_BREAK.split(source)
    if lines and lines[-1] == "":
        lines.pop()
    replacements: List[Tuple[int, int, List[str]]] = []

    for statement, in_class_body in _iter_statements(tree.body, False):
        try:
            invocation = analyze_statement(
                statement, config.trigger_names, in_class_body
            )
            if invocation is None:
                continue
            start, end, indent = _statement_span(statement, lines)
        except MacroError as e:
            result.diagnostics.append(
                Diagnostic(e.message, e.code, e.lineno, e.col_offset, filename, e)
            )
            continue

        generation = generator.generate(invocation)
        if not generation.success:
            error = generation.exception
            result.diagnostics.append(
                Diagnostic(
                    generation.error_message,
                    getattr(error, "code", "generation-error"),
                    getattr(error, "lineno", None) or statement.lineno,
                    getattr(error, "col_offset", None),
                    filename,
                    error,
                )
            )
            continue

        replacements.append((start, end, _indent_block(generation.code, indent)))
        result.expansions.append(
            ExpansionRecord(
                lineno=statement.lineno,
                public_name=generation.metadata["public_name"],
                members=generation.members,
                warnings=generation.warnings,
            )
        )
        logger.debug(
            "%s:%d expanded into %s",
            filename,
            statement.lineno,
            ", ".join(generation.metadata["members"]),
        )

    if not replacements:
        return result

    # Bottom-up so earlier spans keep their line numbers
    for start, end, block in sorted(replacements, key=lambda r: r[0], reverse=True):
        lines[start : end + 1] = block

    missing = _missing_imports(tree, config.imports)
    if missing:
        insert_at = _import_insertion_line(tree)
        lines[insert_at:insert_at] = missing

    # Keep the module's own line break; the config only decides for one-liners
    first_break = _LINE_BREAK.search(source)
    newline = first_break.group(0) if first_break else config.line_ending

    code = newline.join(lines)
    if source.endswith(("\n", "\r")):
        code += newline
    result.code = code

    logger.info(
        "%s: expanded %d trigger(s), %d diagnostic(s)",
        filename,
        len(result.expansions),
        len(result.diagnostics),
    )
    return result


def expand_file(
    file_path: Union[str, Path],
    config: Optional[GeneratorConfig] = None,
    output_path: Optional[Union[str, Path]] = None,
) -> ExpansionResult:
    """
    Expand a module on disk.

    Args:
        file_path: Module to read
        config: Rendering configuration
        output_path: Where to write the expanded module; nothing is
            written when omitted or when any diagnostic was reported

    Returns:
        ExpansionResult for the module
    """
    _, source = load_source_from_file(file_path)
    result = expand_source(source, config, filename=str(file_path))

    if output_path is not None and result.success:
        Path(output_path).write_text(result.code, encoding="utf-8")
        logger.info("Wrote expanded module to %s", output_path)

    return result
