"""Test scripted replay and the replay CLI.

Test cases:
    - apply_events() dispatches each event type
    - Scripted session reproduces the 400×400 vertical-line-10 scenario
    - replay_main() writes both frames and the inspection dump
    - main() returns non-zero on a missing script
    - main() returns non-zero on a missing or invalid config, or a rejected override
    - --divisions override changes the control point count

Run:
    pytest tests/test_replay.py -v
"""

import logging
from pathlib import Path

import pytest
from PIL import Image

from scripts.replay_strokes import main, replay_main
from src.amsler_grid.grid import AmslerGrid
from src.amsler_grid.model import Axis
from src.amsler_grid.replay import apply_events
from src.utils import fs, logging_config
from src.utils.validators import PointerEventV1


@pytest.fixture(scope="module")
def project_root():
    return Path(__file__).parent.parent


def _events(*specs):
    return [PointerEventV1(**spec) for spec in specs]


def test_apply_events_scenario():
    grid = AmslerGrid()
    count = apply_events(grid, _events(
        {'type': 'down', 'x': 200, 'y': 0},
        {'type': 'move', 'x': 210, 'y': 200},
        {'type': 'move', 'x': 200, 'y': 400},
        {'type': 'up'},
        {'type': 'integrate'},
    ))

    assert count == 5
    (line,) = grid.distortions
    assert (line.axis, line.index) == (Axis.VERTICAL, 10)
    assert [p.y for p in line.control_points] == [20.0 * k for k in range(21)]


def test_apply_events_reset():
    grid = AmslerGrid()
    apply_events(grid, _events(
        {'type': 'down', 'x': 0, 'y': 100},
        {'type': 'move', 'x': 400, 'y': 100},
        {'type': 'integrate'},
        {'type': 'reset'},
    ))
    assert grid.distortions == ()
    assert grid.live_stroke == ()


def test_replay_main_outputs(project_root, tmp_path):
    result = replay_main(
        script_path=str(project_root / "configs/strokes/demo_wavy.yaml"),
        output_dir=str(tmp_path / "out"),
        config_path=str(project_root / "configs/amsler_grid_v1.yaml"),
    )

    assert result['num_events'] == 19
    assert result['num_distortions'] == 3

    for key in ('distorted_path', 'undistorted_path'):
        with Image.open(result[key]) as img:
            assert img.size == (400, 400)

    dump = fs.load_yaml(result['distortions_path'])
    assert dump['grid']['divisions'] == 20
    records = dump['distortions']
    assert [(r['axis'], r['index'], r['shadowed']) for r in records] == [
        ('vertical', 10, False),
        ('horizontal', 5, False),
        ('vertical', 10, True),
    ]
    assert all(len(r['control_points']) == 21 for r in records)


@pytest.fixture
def restore_root_logging():
    """main() reconfigures the root logger; put it back afterwards."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)
    logging.captureWarnings(False)
    logging_config.pop_context()


def test_main_missing_script(project_root, tmp_path, restore_root_logging):
    code = main([
        '--script', str(tmp_path / "missing.yaml"),
        '--output', str(tmp_path / "out"),
        '--config', str(project_root / "configs/amsler_grid_v1.yaml"),
    ])
    assert code == 1


def test_main_missing_config(project_root, tmp_path, restore_root_logging, caplog):
    code = main([
        '--script', str(project_root / "configs/strokes/demo_wavy.yaml"),
        '--output', str(tmp_path / "out"),
        '--config', str(tmp_path / "nope.yaml"),
    ])
    assert code == 1
    assert "nope.yaml" in caplog.text
    assert not (tmp_path / "out").exists()


def test_main_invalid_config(project_root, tmp_path, restore_root_logging):
    bad = tmp_path / "bad.yaml"
    bad.write_text("schema: amsler_grid.v1\ngrid:\n  width: -5\n", encoding='utf-8')
    code = main([
        '--script', str(project_root / "configs/strokes/demo_wavy.yaml"),
        '--output', str(tmp_path / "out"),
        '--config', str(bad),
    ])
    assert code == 1


def test_main_rejected_divisions_override(project_root, tmp_path, restore_root_logging, caplog):
    code = main([
        '--script', str(project_root / "configs/strokes/demo_wavy.yaml"),
        '--output', str(tmp_path / "out"),
        '--config', str(project_root / "configs/amsler_grid_v1.yaml"),
        '--divisions', '0',
    ])
    assert code == 1
    assert "divisions" in caplog.text


def test_replay_main_divisions_override(project_root, tmp_path):
    result = replay_main(
        script_path=str(project_root / "configs/strokes/demo_wavy.yaml"),
        output_dir=str(tmp_path / "out"),
        config_path=str(project_root / "configs/amsler_grid_v1.yaml"),
        divisions=10,
    )

    dump = fs.load_yaml(result['distortions_path'])
    assert dump['grid']['divisions'] == 10
    assert all(len(r['control_points']) == 11 for r in dump['distortions'])
