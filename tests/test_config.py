import logging
import sys
from pathlib import Path

import pytest

yaml = pytest.importorskip("yaml")

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from models.Gerber_main import GerberAnalyzer, GerberConfig, setup_run
from models.gerber.config import BASE_CONFIG, load_config
from reporting.logging_utils import ContextFilter


def test_load_config_without_path_returns_defaults_copy():
    cfg = load_config()
    assert cfg == BASE_CONFIG
    cfg['analysis']['threshold'] = 9.0
    assert BASE_CONFIG['analysis']['threshold'] == 0.5


def test_load_config_merges_extends_chain(tmp_path):
    (tmp_path / "base.yaml").write_text(
        yaml.safe_dump({'analysis': {'lookback': 126, 'threshold': 0.3}}), encoding="utf-8"
    )
    child = tmp_path / "child.yaml"
    child.write_text(
        yaml.safe_dump({'extends': 'base.yaml', 'analysis': {'threshold': 0.8}}), encoding="utf-8"
    )

    cfg = load_config(child)

    assert cfg['analysis']['lookback'] == 126
    assert cfg['analysis']['threshold'] == 0.8
    assert cfg['analysis']['undefined_policy'] == 'raise'
    assert 'extends' not in cfg


def test_load_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yaml")


def test_shipped_config_builds_gerber_config():
    config = GerberConfig.from_yaml(ROOT / "configs" / "gerber.yaml")

    assert config.lookback == 252
    assert config.num_threads == 4
    assert config.update_freq == 21


@pytest.fixture
def restore_root_logging():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        root.removeHandler(handler)
        if handler not in handlers:
            handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


def test_setup_run_applies_run_block(tmp_path, restore_root_logging):
    config_path = tmp_path / "run.yaml"
    config_path.write_text(
        yaml.safe_dump({
            'run': {'log_level': 'DEBUG', 'log_file': 'logs/run.log'},
            'analysis': {'lookback': 63, 'use_parallel': False},
        }),
        encoding="utf-8",
    )

    analyzer = setup_run(config_path)
    for handler in logging.getLogger().handlers:
        handler.flush()

    assert isinstance(analyzer, GerberAnalyzer)
    assert analyzer.config.lookback == 63
    assert logging.getLogger().level == logging.DEBUG
    text = (tmp_path / "logs" / "run.log").read_text(encoding="utf-8")
    assert "Gerber run configured" in text
    assert "config=run.yaml" in text


def test_setup_run_uses_shipped_logging_config(restore_root_logging):
    analyzer = setup_run(ROOT / "configs" / "gerber.yaml")

    root = logging.getLogger()
    assert analyzer.config.num_threads == 4
    assert root.handlers
    assert all(any(isinstance(f, ContextFilter) for f in h.filters) for h in root.handlers)
    assert logging.getLogger("models.gerber").level == logging.DEBUG
