import pytest

import cli


def _docs(tmp_path):
    a = tmp_path / "cats.txt"
    b = tmp_path / "qubits.txt"
    a.write_text("The cat sat on the mat.", encoding="utf-8")
    b.write_text("Quantum computers use qubits.", encoding="utf-8")
    return a, b


def test_search_prints_ranked_results(tmp_path, capsys):
    a, b = _docs(tmp_path)
    rc = cli.main(
        ["--config", str(tmp_path / "none.yaml"), "search", "qubits", "--doc", str(a), "--doc", str(b), "--k", "1"]
    )
    assert rc == 0
    out = capsys.readouterr().out
    assert "[1] Similarity:" in out
    assert "Source: qubits.txt" in out
    assert "cats.txt" not in out


def test_stats_lists_documents(tmp_path, capsys):
    a, b = _docs(tmp_path)
    rc = cli.main(["--config", str(tmp_path / "none.yaml"), "stats", "--doc", str(a), "--doc", str(b)])
    assert rc == 0
    out = capsys.readouterr().out
    assert "[ok] cats.txt: 1 chunk(s)" in out
    assert "Total Chunks: 2" in out


def test_all_documents_failing_exits_nonzero(tmp_path, capsys):
    rc = cli.main(["--config", str(tmp_path / "none.yaml"), "stats", "--doc", str(tmp_path / "missing.pdf")])
    assert rc == 2
    assert "[error]" in capsys.readouterr().out


def test_ask_refuses_remote_endpoint_offline(tmp_path, monkeypatch):
    a, _ = _docs(tmp_path)
    monkeypatch.delenv("OLLAMA_HOST", raising=False)
    rc = cli.main(
        [
            "--config", str(tmp_path / "none.yaml"),
            "ask", "what sat on the mat?",
            "--doc", str(a),
            "--endpoint", "http://example.org:11434",
        ]
    )
    assert rc == 2


def test_ask_prints_answer_and_sources(tmp_path, monkeypatch, capsys):
    from llm import ollama

    class _Resp:
        status_code = 200

        def raise_for_status(self):
            pass

        def json(self):
            return {"response": "A cat."}

    monkeypatch.delenv("OLLAMA_HOST", raising=False)
    monkeypatch.setattr(ollama.requests, "post", lambda *a, **k: _Resp())
    a, b = _docs(tmp_path)
    rc = cli.main(
        ["--config", str(tmp_path / "none.yaml"), "ask", "which cat sat?", "--doc", str(a), "--doc", str(b)]
    )
    assert rc == 0
    out = capsys.readouterr().out
    assert "A cat." in out
    assert "- cats.txt" in out


@pytest.mark.parametrize(
    "extra",
    [["--chunk-size", "0"], ["--chunk-size", "-5"], ["--k", "0"]],
)
def test_out_of_range_options_exit_nonzero(tmp_path, extra):
    a, _ = _docs(tmp_path)
    argv = ["--config", str(tmp_path / "none.yaml"), "search", "cat", "--doc", str(a)] + extra
    assert cli.main(argv) == 2


def test_threshold_above_one_is_rejected(tmp_path):
    a, _ = _docs(tmp_path)
    argv = ["--config", str(tmp_path / "none.yaml"), "ask", "cat?", "--doc", str(a), "--threshold", "5"]
    assert cli.main(argv) == 2
