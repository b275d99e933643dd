# test/test_cli.py
import logging

from ephysdat import cli
from ephysdat.io import decoder as decoder_module
from ephysdat.io.artifacts import load_metadata
from ephysdat.io.dat_writer import read_dat

from conftest import make_recording_decoder


def test_parser_defaults():
    args = cli.build_parser().parse_args(["rec.plx"])
    assert args.raw_path == "rec.plx"
    assert args.output_folder is None
    assert args.common_average_referencing is False
    assert args.specific_channels is None
    assert args.extract_ai is True
    assert args.extract_lfp is False
    assert args.plot_probe_voltage is False
    assert args.remove_artifacts_visualize is False


def test_parser_flags():
    args = cli.build_parser().parse_args(
        ["rec.plx", "--car", "--remove-artifacts", "--channels", "65", "66", "--no-ai", "--extract-lfp",
         "--plot-probe-voltage", "--remove-artifacts-visualize"]
    )
    assert args.common_average_referencing is True
    assert args.remove_artifacts is True
    assert args.specific_channels == [65, 66]
    assert args.extract_ai is False
    assert args.extract_lfp is True
    assert args.plot_probe_voltage is True
    assert args.remove_artifacts_visualize is True


def test_main_converts_and_prints_dat_path(tmp_path, monkeypatch, capsys):
    monkeypatch.setitem(decoder_module._DECODERS, ".fake", lambda path: make_recording_decoder())
    out = tmp_path / "out"

    code = cli.main([str(tmp_path / "run.fake"), "--output-folder", str(out), "--car"])

    assert code == 0
    assert capsys.readouterr().out.strip() == str(out / "run.dat")
    assert read_dat(out / "run.dat", 3).shape == (3, 20)


def test_main_returns_1_on_unsupported_format(tmp_path):
    assert cli.main([str(tmp_path / "run.abc")]) == 1
    assert not (tmp_path / "converted").exists()


def test_main_returns_1_on_bad_options(tmp_path):
    assert cli.main([str(tmp_path / "run.plx"), "--artifact-sd-threshold", "0"]) == 1


def test_progress_bar_counts_channels():
    bar = cli._ProgressBar()
    for i in range(3):
        bar(cli.ProgressEvent(channel_index=i, n_channels=3, channel=i, percent=100.0 * (i + 1) / 3))
    assert bar._bar.n == 3
    bar.close()
    assert bar._bar.total == 3


def test_main_passes_plotting_flags_through(tmp_path, monkeypatch, caplog):
    monkeypatch.setitem(decoder_module._DECODERS, ".fake", lambda path: make_recording_decoder())
    out = tmp_path / "out"

    with caplog.at_level(logging.WARNING, logger="ephysdat"):
        code = cli.main([
            str(tmp_path / "run.fake"), "--output-folder", str(out),
            "--remove-artifacts", "--remove-artifacts-visualize", "--plot-probe-voltage",
        ])

    assert code == 0
    assert "no figures" in caplog.text
    options = load_metadata(out).options
    assert options["plot_probe_voltage"] is True
    assert options["remove_artifacts_visualize"] is True
