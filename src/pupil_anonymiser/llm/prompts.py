# src/pupil_anonymiser/llm/prompts.py
from __future__ import annotations

import json
from textwrap import dedent
from typing import List, Mapping

from ..config import DEFAULT_REPORT_TONE
from ..reports.template import ReportSection
from .base import LLMMessage

TONE_INSTRUCTIONS = {
    "warm": (
        "Use a warm, encouraging tone appropriate for a UK primary school, "
        "while remaining professional and measured."
    ),
    "concise": (
        "Use a concise, formal tone appropriate for a UK primary school report. "
        "Keep sentences fairly short and direct."
    ),
    "balanced": (
        "Use a balanced, professional tone typical of a UK primary school report: "
        "clear, specific, and positive but not over-effusive."
    ),
}

REPORT_SYSTEM_PROMPT = dedent(
    """
    You are helping a UK primary-school teacher write end-of-year reports.

    RULES:
    - Use British English spelling and vocabulary (colour, behaviour, organise, maths, etc.).
    - Use "pupil" rather than "student".
    - Do not use American idioms, slang, or corporate language.
    - Keep the tone appropriate for UK primary reports: parent-facing, professional, kind, and specific.
    - Do not invent safeguarding information, behaviour incidents, family situations, or medical details.
    - Only talk about learning, strengths, needs, classroom learning behaviours, and next steps.
    - Avoid overly casual character labels; keep descriptions neutral and respectful.
    """
).strip()


def tone_instruction(tone: str | None) -> str:
    return TONE_INSTRUCTIONS.get(tone or DEFAULT_REPORT_TONE, TONE_INSTRUCTIONS[DEFAULT_REPORT_TONE])


def _describe_sections(sections: List[ReportSection]) -> str:
    return "\n".join(
        f'- Section name: "{s.name}", word target: {s.word_target}, '
        f'include next step: {"yes" if s.include_next_step else "no"}'
        for s in sections
    )


def build_report_messages(
    pupil_id: str,
    pupil_row: Mapping[str, str],
    sections: List[ReportSection],
    tone: str | None = None,
    style_notes: str | None = None,
) -> List[LLMMessage]:
    """
    System + user messages for one pupil.
    `pupil_id` and `pupil_row` must already be anonymised.
    """
    extra_style = ""
    if style_notes and style_notes.strip():
        extra_style = f"Additional style guidance from the teacher:\n{style_notes.strip()}\n\n"

    pupil_json = json.dumps(dict(pupil_row), ensure_ascii=False, indent=2)

    user_prompt = f"""
{tone_instruction(tone)}

{extra_style}You will be given:

1) A pseudonym for the pupil (do not try to guess their real name).
2) A single "pupil profile" row from a class record.
3) A list of report sections with word targets and whether they need a separate "next step" sentence.

Generate a JSON object ONLY, with no extra text. The JSON should have:
- One key for each section's main comment, using the section name as the key.
- If the section has a next step, add another key named "<section name>_next_step" for a single-sentence target.

Refer to the pupil only by the pseudonym, exactly as written.
Make sure each main comment roughly matches, but does not hugely exceed, the word target.
Keep the content grounded in the pupil profile data.

Report sections to generate:
{_describe_sections(sections)}

Pupil pseudonym: {pupil_id}

Pupil profile (one row from the class record):
{pupil_json}
"""
    return [
        LLMMessage(role="system", content=REPORT_SYSTEM_PROMPT),
        LLMMessage(role="user", content=dedent(user_prompt).strip()),
    ]
