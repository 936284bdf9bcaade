from __future__ import annotations

import importlib.util
import json
from pathlib import Path
from types import ModuleType

import pytest

_SCRIPT = Path(__file__).resolve().parent.parent / "scripts" / "replay_updates.py"


def _load_script() -> ModuleType:
    spec = importlib.util.spec_from_file_location("replay_updates", _SCRIPT)
    assert spec is not None and spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.mark.parametrize("item", [7, "stateVotes delta", None])
def test_non_object_entries_exit_with_message(tmp_path: Path, item: object) -> None:
    updates = tmp_path / "updates.json"
    updates.write_text(json.dumps([{"year": 2012}, item]), encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        _load_script().main([str(updates)])

    assert "update #2 must be a JSON object" in str(excinfo.value.code)


def test_replay_prints_events(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    updates = tmp_path / "updates.json"
    updates.write_text(
        json.dumps([{"year": 2012, "stateVotes": {"Ohio": {"rep": 18}}}, {"delta": {"Ohio": {"dem": 2}}}]),
        encoding="utf-8",
    )

    assert _load_script().main([str(updates)]) == 0

    out = capsys.readouterr().out
    assert "change:state Ohio: dem=0 rep=18 toss=0" in out
    assert "change:state Ohio: dem=2 rep=18 toss=0" in out
    assert out.count("changed: ['Ohio']") == 2
