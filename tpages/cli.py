from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Set

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .context import TemplatePagesContext
from .errors import TemplatePagesError, TemplateSyntaxError
from .template import TemplateAST, collect_filter_names, collect_inline_templates, parse_template
from .version import tool_version

logger = logging.getLogger(__name__)

_yaml = YAML(typ="safe")


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="tpages",
        description="Template Pages: layouts, partials and filter pipelines",
        add_help=True,
    )
    p.add_argument("-v", "--version", action="version", version=f"%(prog)s {tool_version()}")
    p.add_argument("--debug", action="store_true", help="подробный лог (DEBUG) в stderr")
    sub = p.add_subparsers(dest="cmd", required=True)

    # Общие аргументы для команд, работающих с каталогом шаблонов
    def add_root(sp: argparse.ArgumentParser) -> None:
        sp.add_argument(
            "--root",
            type=Path,
            default=Path.cwd(),
            help="каталог шаблонов (по умолчанию текущий)",
        )
        sp.add_argument(
            "--config",
            type=Path,
            default=None,
            help="файл настроек (по умолчанию <root>/tpages.yaml)",
        )

    def add_args(sp: argparse.ArgumentParser) -> None:
        sp.add_argument(
            "--arg",
            action="append",
            metavar="KEY=VALUE",
            help="аргумент рендера; значение разбирается как YAML (можно указать несколько)",
        )

    sp_render = sub.add_parser("render", help="Отрендерить страницу с её layout")
    sp_render.add_argument("page", help="идентификатор страницы (например: docs/index)")
    add_root(sp_render)
    add_args(sp_render)

    sp_inline = sub.add_parser("inline", help="Отрендерить текст шаблона без layout")
    sp_inline.add_argument("text", metavar="TEXT|-", help="текст шаблона или - для чтения из stdin")
    add_root(sp_inline)
    add_args(sp_inline)

    sp_list = sub.add_parser("list", help="Список страниц (JSON)")
    add_root(sp_list)

    sp_check = sub.add_parser("check", help="Разобрать все страницы и проверить фильтры (JSON)")
    add_root(sp_check)

    return p


def _setup_logging(debug: bool) -> None:
    level = logging.DEBUG if debug or os.environ.get("TPAGES_DEBUG") else logging.WARNING
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s", stream=sys.stderr)


def _parse_args(items: Optional[List[str]]) -> Dict[str, Any]:
    """
    Парсит список 'KEY=VALUE' в словарь аргументов.

    Значение разбирается как YAML-скаляр или flow-коллекция:
    'n=3' даёт int, 'items=[1, 2]' даёт список. Неразбираемое значение
    остаётся строкой.
    """
    result: Dict[str, Any] = {}
    if not items:
        return result

    for item in items:
        if "=" not in item:
            raise ValueError(f"Invalid argument format '{item}'. Expected 'KEY=VALUE'")
        key, raw = item.split("=", 1)
        key = key.strip()
        if not key:
            raise ValueError(f"Invalid argument format '{item}'. Empty key")
        result[key] = _parse_value(raw)

    return result


def _parse_value(raw: str) -> Any:
    if not raw.strip():
        return raw
    try:
        return _yaml.load(raw)
    except YAMLError:
        return raw


def _context(ns: argparse.Namespace) -> TemplatePagesContext:
    root: Path = ns.root
    if not root.is_dir():
        raise ValueError(f"Template root not found: {root}")
    return TemplatePagesContext.from_directory(root, ns.config)


def _check(context: TemplatePagesContext) -> Dict[str, Any]:
    problems: List[Dict[str, Any]] = []
    pages = context.list_pages()
    for page_id in pages:
        try:
            page = context.get_page(page_id)
        except TemplatePagesError as e:
            problems.append({"page": page_id, "error": str(e)})
            continue
        for error in _template_problems(list(page.template.nodes), context):
            problems.append({"page": page_id, "error": error})
    logger.debug("Checked %d pages, %d problems", len(pages), len(problems))
    return {"pages": len(pages), "problems": problems}


def _template_problems(ast: TemplateAST, context: TemplatePagesContext) -> List[str]:
    """
    Неизвестные фильтры шаблона и встроенных шаблонов forEach,
    а также ошибки разбора встроенных шаблонов.
    """
    errors: List[str] = []
    unknown: List[str] = []
    pending = [ast]
    seen: Set[str] = set()
    while pending:
        nodes = pending.pop(0)
        for name in collect_filter_names(nodes):
            if name not in context.filters and name not in unknown:
                unknown.append(name)
        for text in collect_inline_templates(nodes):
            if text in seen:
                continue
            seen.add(text)
            try:
                pending.append(parse_template(text))
            except TemplateSyntaxError as e:
                errors.append(f"forEach template: {e}")
    return [f"Unknown filter '{name}'" for name in unknown] + errors


def main(argv: list[str] | None = None) -> int:
    ns = _build_parser().parse_args(argv)
    _setup_logging(ns.debug)

    try:
        if ns.cmd == "render":
            context = _context(ns)
            sys.stdout.write(context.render(ns.page, _parse_args(ns.arg)))
            return 0

        if ns.cmd == "inline":
            text = sys.stdin.read() if ns.text == "-" else ns.text
            context = _context(ns)
            sys.stdout.write(context.render_inline(text, _parse_args(ns.arg)))
            return 0

        if ns.cmd == "list":
            context = _context(ns)
            sys.stdout.write(json.dumps({"pages": context.list_pages()}, ensure_ascii=False))
            return 0

        if ns.cmd == "check":
            report = _check(_context(ns))
            sys.stdout.write(json.dumps(report, ensure_ascii=False, indent=2))
            return 1 if report["problems"] else 0

    except TemplatePagesError as e:
        sys.stderr.write(f"error: {str(e).rstrip()}\n")
        return 2
    except ValueError as e:
        sys.stderr.write(f"error: {str(e).rstrip()}\n")
        return 2

    return 2


if __name__ == "__main__":
    raise SystemExit(main())
