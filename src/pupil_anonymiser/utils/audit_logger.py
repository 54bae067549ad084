# src/pupil_anonymiser/utils/audit_logger.py
from __future__ import annotations

import json
from dataclasses import asdict, is_dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Mapping, Optional
from zoneinfo import ZoneInfo

from ..config import AUDIT_TIMEZONE, DEFAULT_AUDIT_PATH
from ..preprocess.anonymizer import PseudonymMap


def _to_serializable(obj: Any) -> Any:
    """
    Audit-safe JSON value.
    - PseudonymMap -> {"pupils": n}; real names never reach the audit log
    - other dataclasses -> dict, containers recursively, the rest str()
    """
    if isinstance(obj, PseudonymMap):
        return {"pupils": len(obj)}
    if is_dataclass(obj) and not isinstance(obj, type):
        return _to_serializable(asdict(obj))
    if isinstance(obj, (str, int, float, bool)) or obj is None:
        return obj
    if isinstance(obj, Path):
        return str(obj)
    if isinstance(obj, Mapping):
        return {str(k): _to_serializable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple, set)):
        return [_to_serializable(v) for v in obj]
    return str(obj)


def build_audit_record(
    command: str,
    args: Optional[Mapping[str, Any]] = None,
    extra: Optional[Mapping[str, Any]] = None,
    status: str = "success",
) -> dict[str, Any]:
    record: dict[str, Any] = {
        "timestamp": datetime.now(ZoneInfo(AUDIT_TIMEZONE)).isoformat(timespec="seconds"),
        "command": command,
        "status": status,
    }
    if args is not None:
        record["args"] = _to_serializable(dict(args))
    if extra is not None:
        record["extra"] = _to_serializable(dict(extra))
    return record


def log_audit_record(
    command: str,
    args: Optional[Mapping[str, Any]] = None,
    extra: Optional[Mapping[str, Any]] = None,
    status: str = "success",
    audit_path: Path | str = Path(DEFAULT_AUDIT_PATH),
) -> None:
    """
    Append one JSON line per CLI command to the audit log.

    - command: sub-command name ("check", "anonymise", "reports", ...)
    - args   : CLI arguments. Paths and options only, never pupil text.
    - extra  : counts, model name and similar
    - status : "success" / "blocked" / "partial" / "error"
    """
    audit_path = Path(audit_path)
    audit_path.parent.mkdir(parents=True, exist_ok=True)

    record = build_audit_record(command, args=args, extra=extra, status=status)
    with audit_path.open("a", encoding="utf-8") as f:
        f.write(json.dumps(record, ensure_ascii=False) + "\n")
