import json

import pytest

from cli.main import main


def test_cli_regression_preset(capsys):
    main(["--preset", "regression-linear", "--input", "1", "2"])
    payload = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert payload["output"] == [13.0]
    assert payload["classification"] == 0
    assert payload["encode_length"] == 13
    assert payload["neuron_count"] == 8
    assert len(payload["config_hash"]) == 12


def test_cli_list_presets(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["--list-presets"])
    assert excinfo.value.code == 0
    assert "xor-2-3-1" in capsys.readouterr().out.split()


def test_cli_rejects_wrong_input_length():
    with pytest.raises(SystemExit) as excinfo:
        main(["--preset", "regression-linear", "--input", "1"])
    assert "Invalid input count" in str(excinfo.value.code)


def test_cli_config_override_and_layout(tmp_path, capsys):
    override = tmp_path / "override.json"
    override.write_text(json.dumps({"randomizer": {"name": "constant", "value": 0.0}}))
    layout = tmp_path / "layout.json"
    main(
        [
            "--preset",
            "classifier-relu",
            "--config",
            str(override),
            "--input",
            "1",
            "2",
            "3",
            "4",
            "--dump-layout",
            str(layout),
        ]
    )
    payload = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert payload["output"] == pytest.approx([1 / 3, 1 / 3, 1 / 3])
    assert json.loads(layout.read_text())["layout"]["output_count"] == 3
