# src/pupil_anonymiser/pipelines/report_pipeline.py
from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional

import json
import logging

from ..config import (
    DEFAULT_REPORT_TONE,
    LLM_REPORT_MAX_TOKENS,
    LLM_REPORT_TEMPERATURE,
)
from ..io.excel_writer import write_reports_excel
from ..io.table_loader import load_class_record_rows
from ..llm.base import LLMClient
from ..llm.factory import create_llm_client
from ..llm.prompts import build_report_messages
from ..preprocess.name_leak_scanner import find_pupil_names_in_text
from ..reports.template import ReportSection, load_report_template
from ..utils.logging_utils import setup_logging
from .anonymise_pipeline import AnonymisedClassRecord, anonymise_class_record

logger = logging.getLogger(__name__)

PUPIL_COLUMN = "Pupil"
ERROR_COLUMN = "error"


def _parse_json_like(text: str, expected_keys: List[str]) -> Dict[str, str]:
    """
    Pull a JSON object out of an LLM reply.
    - valid JSON (optionally inside ``` fences) -> {key: str(value)}
    - otherwise, one expected key -> the whole reply; more -> {}
    """
    raw = (text or "").strip()
    if not raw:
        return {}

    if raw.startswith("```"):
        lines = raw.splitlines()
        if len(lines) >= 2:
            if lines[-1].strip().startswith("```"):
                lines = lines[1:-1]
            else:
                lines = lines[1:]
            raw = "\n".join(lines).strip()

    # keep only the { ... } part if there is chatter around it
    json_str = raw
    start = raw.find("{")
    end = raw.rfind("}")
    if start != -1 and end != -1 and start < end:
        json_str = raw[start : end + 1]

    try:
        data = json.loads(json_str)
        if isinstance(data, dict):
            return {str(k): ("" if v is None else str(v)) for k, v in data.items()}
    except json.JSONDecodeError as e:
        logger.debug("Failed to parse report JSON: %s", e)

    if len(expected_keys) == 1:
        return {expected_keys[0]: raw}
    return {}


def _outgoing_text_is_clean(messages, real_names: List[str]) -> bool:
    for m in messages:
        if find_pupil_names_in_text(m.content, real_names):
            return False
    return True


def generate_reports(
    record: AnonymisedClassRecord,
    sections: List[ReportSection],
    client: LLMClient,
    tone: str = DEFAULT_REPORT_TONE,
    style_notes: Optional[str] = None,
    reveal_names: bool = True,
) -> List[Dict[str, str]]:
    """
    One report row per pupil.

    Only anonymised rows reach `client`. With reveal_names=True the section
    texts come back with real names; otherwise they stay on pseudonyms and
    the teacher can run PseudonymMap.reidentify() on them later.
    A failure for one pupil is logged and recorded in the "error" column.
    """
    pmap = record.pseudonym_map
    real_names = [p.real for p in pmap.pairs]
    expected_keys = [k for s in sections for k in s.output_keys()]

    # style notes are typed by the teacher and may mention pupils
    if style_notes:
        style_notes = pmap.anonymise(style_notes)

    out: List[Dict[str, str]] = []
    for idx, (pupil_id, anon_row) in enumerate(zip(record.pupil_ids, record.rows), start=1):
        logger.info("Generating report %d/%d: %s", idx, len(record.rows), pupil_id)
        report: Dict[str, str] = {PUPIL_COLUMN: pupil_id}

        messages = build_report_messages(pupil_id, anon_row, sections, tone=tone, style_notes=style_notes)
        if not _outgoing_text_is_clean(messages, real_names):
            logger.error("Prompt for %s still contains a pupil name; not sent", pupil_id)
            report[ERROR_COLUMN] = "prompt contained a pupil name"
            out.append(pmap.reidentify(report, fields=[PUPIL_COLUMN]) if reveal_names else report)
            continue

        try:
            resp = client.chat(
                messages,
                temperature=LLM_REPORT_TEMPERATURE,
                max_tokens=LLM_REPORT_MAX_TOKENS,
                response_format="json",
            )
            parsed = _parse_json_like(resp.content, expected_keys)
            if not parsed:
                raise ValueError("model did not return valid JSON")
            for key in expected_keys:
                report[key] = parsed.get(key, "")
        except Exception as e:  # noqa: BLE001
            logger.exception("Report generation failed for %s: %s", pupil_id, e)
            report[ERROR_COLUMN] = str(e)

        if reveal_names:
            report = pmap.reidentify(report, fields=[PUPIL_COLUMN, *expected_keys])
        out.append(report)

    return out


def run_reports(
    input_path: Path,
    template_path: Path,
    output_path: Path,
    log_path: Path,
    name_column: Optional[str] = None,
    seed: Optional[int] = None,
    model_name: Optional[str] = None,
    tone: str = DEFAULT_REPORT_TONE,
    style_notes: Optional[str] = None,
    reveal_names: bool = True,
    client: Optional[LLMClient] = None,
) -> List[Dict[str, str]]:
    """
    Class record + report template -> Excel of generated reports.

    load -> name check -> anonymise -> LLM per pupil -> reidentify -> write
    """
    setup_logging(log_path)
    logger.info("Start reports pipeline (input=%s, template=%s)", input_path, template_path)

    rows = load_class_record_rows(input_path)
    sections = load_report_template(template_path)
    record = anonymise_class_record(rows, name_column=name_column, seed=seed)

    if client is None:
        client = create_llm_client("reports", model=model_name)

    reports = generate_reports(
        record,
        sections,
        client,
        tone=tone,
        style_notes=style_notes,
        reveal_names=reveal_names,
    )

    write_reports_excel(Path(output_path), reports)
    failed = sum(1 for r in reports if r.get(ERROR_COLUMN))
    logger.info("Wrote %d report(s) to %s (%d failed)", len(reports), output_path, failed)
    return reports
