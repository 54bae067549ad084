import json

import pandas as pd
import pytest

from pupil_anonymiser import build_pseudonym_map, cli
from pupil_anonymiser.utils.audit_logger import build_audit_record


@pytest.fixture
def paths(tmp_path):
    return ["--log-path", str(tmp_path / "app.log"), "--audit-path", str(tmp_path / "audit.jsonl")]


def _audit(tmp_path):
    lines = (tmp_path / "audit.jsonl").read_text(encoding="utf-8").splitlines()
    return [json.loads(line) for line in lines]


def test_demo(tmp_path, capsys):
    names = tmp_path / "names.txt"
    names.write_text("Olivia Brown\nJack Smith\n", encoding="utf-8")
    text = tmp_path / "text.txt"
    text.write_text("Olivia Brown helped Jack Smith.", encoding="utf-8")

    rc = cli.main(["demo", "--names", str(names), "--text", str(text)])

    out = capsys.readouterr().out
    assert rc == 0
    assert "=== pseudonym map ===" in out
    anon = out.split("=== anonymised ===")[1].split("=== reidentified ===")[0]
    assert "Olivia" not in anon and "Jack" not in anon
    assert "Pupil-00" in anon
    assert out.rstrip().endswith("Olivia Brown helped Jack Smith.")


def test_check_clean(tmp_path, capsys, paths, class_rows):
    src = tmp_path / "ccr.csv"
    pd.DataFrame(class_rows).to_csv(src, index=False)

    rc = cli.main(["check", str(src), *paths])

    assert rc == 0
    assert "No names found outside the 'Name' column" in capsys.readouterr().out
    (record,) = _audit(tmp_path)
    assert record["command"] == "check"
    assert record["status"] == "success"
    assert record["extra"]["flagged_cells"] == 0


def test_check_reports_leaks(tmp_path, capsys, paths, class_rows):
    class_rows[1]["Notes"] = "Sits next to Cara"
    src = tmp_path / "ccr.csv"
    pd.DataFrame(class_rows).to_csv(src, index=False)

    rc = cli.main(["check", str(src), *paths])

    out = capsys.readouterr().out
    assert rc == 1
    assert "Row 2, Column 'Notes': \"Cara\"" in out
    (record,) = _audit(tmp_path)
    assert record["status"] == "blocked"


def test_anonymise_command(tmp_path, capsys, paths, class_rows):
    src = tmp_path / "ccr.csv"
    pd.DataFrame(class_rows).to_csv(src, index=False)
    out_path = tmp_path / "anon.csv"

    rc = cli.main(["anonymise", str(src), "--output", str(out_path), "--show-map", *paths])

    out = capsys.readouterr().out
    assert rc == 0
    assert "Pupil-002 ⟷ Alice Smith" in out
    assert "Alice" not in out_path.read_text(encoding="utf-8-sig")
    (record,) = _audit(tmp_path)
    assert record["extra"] == {"rows": 3, "pseudonym_map": {"pupils": 3}}
    assert "Alice" not in json.dumps(record)


def test_anonymise_command_blocked(tmp_path, capsys, paths, class_rows):
    class_rows[0]["Notes"] = "Reads with Alice"
    src = tmp_path / "ccr.csv"
    pd.DataFrame(class_rows).to_csv(src, index=False)
    out_path = tmp_path / "anon.csv"

    rc = cli.main(["anonymise", str(src), "--output", str(out_path), *paths])

    assert rc == 1
    assert not out_path.exists()
    assert "Row 1, Column 'Notes'" in capsys.readouterr().err
    (record,) = _audit(tmp_path)
    assert record["status"] == "blocked"


def test_missing_name_column(tmp_path, capsys, paths):
    src = tmp_path / "ccr.csv"
    pd.DataFrame([{"Ref": "A1", "Score": "12"}]).to_csv(src, index=False)

    rc = cli.main(["check", str(src), *paths])

    assert rc == 2
    assert "Couldn't find" in capsys.readouterr().err


def test_audit_record_never_holds_names():
    pmap = build_pseudonym_map(["Bob Jones", "Alice Smith"])

    record = build_audit_record("anonymise", args={"names": pmap}, extra={"maps": [pmap], "rows": 2})

    assert record["args"] == {"names": {"pupils": 2}}
    assert record["extra"] == {"maps": [{"pupils": 2}], "rows": 2}
    assert "Bob" not in json.dumps(record)
    assert record["command"] == "anonymise" and record["status"] == "success"


def test_template_command(tmp_path, capsys, paths):
    out_path = tmp_path / "y4.json"

    rc = cli.main(["template", str(out_path), "--section", "English:80:next", "--section", "PE", *paths])

    assert rc == 0
    assert json.loads(out_path.read_text(encoding="utf-8")) == [
        {"name": "English", "word_target": 80, "include_next_step": True},
        {"name": "PE", "word_target": 100, "include_next_step": False},
    ]
    assert "Saved 2 section(s)" in capsys.readouterr().out
    (record,) = _audit(tmp_path)
    assert record["extra"] == {"sections": ["English", "PE"]}


def test_template_command_rejects_bad_section(tmp_path, paths):
    with pytest.raises(SystemExit):
        cli.main(["template", str(tmp_path / "t.json"), "--section", "English:lots", *paths])
