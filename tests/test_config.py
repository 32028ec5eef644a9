import pytest

from lexical_rag.config import AppConfig, load_config
from lexical_rag.errors import ConfigError
from lexical_rag.index.schema import SearchStrategy


def test_missing_file_gives_defaults(tmp_path):
    cfg = load_config(tmp_path / "absent.yaml")
    assert cfg == AppConfig()
    assert cfg.ingest.chunk_size == 500
    assert cfg.retrieval.top_k == 5
    assert cfg.retrieval.strategy is SearchStrategy.SEMANTIC
    assert cfg.retrieval.similarity_threshold == pytest.approx(0.1)
    assert cfg.llm.offline is True


def test_partial_yaml_overrides_defaults(tmp_path):
    p = tmp_path / "config.yaml"
    p.write_text(
        "ingest:\n  chunk_size: 300\nretrieval:\n  strategy: hybrid\nllm:\n  model: mistral\n",
        encoding="utf-8",
    )
    cfg = load_config(p)
    assert cfg.ingest.chunk_size == 300
    assert cfg.retrieval.strategy is SearchStrategy.HYBRID
    assert cfg.retrieval.top_k == 5
    assert cfg.llm.model == "mistral"


def test_repo_config_loads():
    from pathlib import Path

    cfg = load_config(Path(__file__).resolve().parents[1] / "config.yaml")
    assert cfg.ingest.chunk_size == 500


@pytest.mark.parametrize(
    "body",
    [
        "ingest:\n  chunk_size: 0\n",
        "retrieval:\n  strategy: fuzzy\n",
        "- just\n- a list\n",
        "ingest: [unclosed\n",
    ],
)
def test_invalid_config_raises(tmp_path, body):
    p = tmp_path / "bad.yaml"
    p.write_text(body, encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(p)
