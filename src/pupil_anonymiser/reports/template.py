# src/pupil_anonymiser/reports/template.py
from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Iterable, List, Mapping

logger = logging.getLogger(__name__)


@dataclass
class ReportSection:
    name: str                  # "English", "Maths", "Teacher Comment" ...
    word_target: int = 100
    include_next_step: bool = False

    @property
    def next_step_key(self) -> str:
        return f"{self.name}_next_step"

    def output_keys(self) -> List[str]:
        if self.include_next_step:
            return [self.name, self.next_step_key]
        return [self.name]


def _section_from_dict(item: Mapping[str, Any], position: int) -> ReportSection:
    # accepts both the saved browser template keys and snake_case
    name = str(item.get("name") or "").strip() or f"Section {position + 1}"
    word_target = item.get("word_target", item.get("wordTarget", 100))
    include = item.get("include_next_step", item.get("includeNextStep", False))
    try:
        word_target = int(word_target)
    except (TypeError, ValueError):
        logger.warning("Bad word target %r for section %s; using 100", word_target, name)
        word_target = 100
    return ReportSection(name=name, word_target=word_target, include_next_step=bool(include))


def parse_section_arg(text: str) -> ReportSection:
    """
    CLI form of a section: "NAME[:WORDS][:next]"

    "English:80:next" -> ReportSection("English", 80, True)
    "PE"              -> ReportSection("PE", 100, False)
    """
    name, _, rest = text.partition(":")
    name = name.strip()
    if not name:
        raise ValueError(f"Section needs a name: {text!r}")

    word_target = 100
    include_next_step = False
    for part in filter(None, (p.strip() for p in rest.split(":"))):
        if part.lower() == "next":
            include_next_step = True
        elif part.isdigit():
            word_target = int(part)
        else:
            raise ValueError(f"Bad section option {part!r} in {text!r}")
    return ReportSection(name=name, word_target=word_target, include_next_step=include_next_step)


def sections_from_dicts(items: Iterable[Mapping[str, Any]]) -> List[ReportSection]:
    return [_section_from_dict(item, i) for i, item in enumerate(items)]


def load_report_template(path: Path | str) -> List[ReportSection]:
    """
    JSON list of sections:
      [{"name": "English", "word_target": 80, "include_next_step": true}, ...]
    """
    path = Path(path)
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, list) or not data:
        raise ValueError(f"Report template must be a non-empty JSON list: {path}")
    sections = sections_from_dicts(data)
    logger.info("Loaded %d report section(s) from %s", len(sections), path)
    return sections


def save_report_template(path: Path | str, sections: Iterable[ReportSection]) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps([asdict(s) for s in sections], ensure_ascii=False, indent=2),
        encoding="utf-8",
    )
