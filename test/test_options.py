# test/test_options.py
from pathlib import Path

import numpy as np
import pytest

from ephysdat.core import ConversionOptions, InvalidOptions


def test_defaults():
    opts = ConversionOptions()
    assert opts.output_folder is None
    assert opts.common_average_referencing is False
    assert opts.remove_artifacts is False
    assert opts.specific_channels is None
    assert opts.extract_ai is True
    assert opts.extract_lfp is False
    assert opts.spike_channel_markers == ("SPKC", "CSPK")
    assert opts.artifact_sd_threshold == 3.5


def test_default_output_folder_is_next_to_raw_file(tmp_path):
    raw = tmp_path / "rig" / "session.plx"
    assert ConversionOptions().resolve_output_folder(raw) == tmp_path / "rig" / "converted"


def test_output_folder_coerced_to_path(tmp_path):
    opts = ConversionOptions(output_folder=str(tmp_path))
    assert opts.output_folder == Path(tmp_path)
    assert opts.resolve_output_folder("/elsewhere/x.plx") == Path(tmp_path)


def test_specific_channels_normalized_to_int_tuple():
    opts = ConversionOptions(specific_channels=[np.int64(66), 65])
    assert opts.specific_channels == (66, 65)
    assert all(type(c) is int for c in opts.specific_channels)


def test_specific_channels_single_int_and_legacy_false():
    assert ConversionOptions(specific_channels=7).specific_channels == (7,)
    assert ConversionOptions(specific_channels=False).specific_channels is None


@pytest.mark.parametrize("bad", [[], [1, 1], [1.5], ["65"], [True]])
def test_specific_channels_rejected(bad):
    with pytest.raises(InvalidOptions):
        ConversionOptions(specific_channels=bad)


def test_bool_fields_must_be_bool():
    with pytest.raises(InvalidOptions):
        ConversionOptions(common_average_referencing=1)


@pytest.mark.parametrize("bad", [0, -2.0, "abc", None])
def test_threshold_must_be_positive_number(bad):
    with pytest.raises(InvalidOptions):
        ConversionOptions(artifact_sd_threshold=bad)


def test_channel_name_lists():
    opts = ConversionOptions(ai_channels=["FP31"], lfp_channels="FP01", spike_channel_markers=["WB"])
    assert opts.ai_channels == ("FP31",)
    assert opts.lfp_channels == ("FP01",)
    assert opts.spike_channel_markers == ("WB",)

    with pytest.raises(InvalidOptions):
        ConversionOptions(ai_channels=[])
    with pytest.raises(InvalidOptions):
        ConversionOptions(spike_channel_markers=None)


def test_from_mapping_rejects_unknown_keys():
    opts = ConversionOptions.from_mapping({"remove_artifacts": True})
    assert opts.remove_artifacts is True

    with pytest.raises(InvalidOptions):
        ConversionOptions.from_mapping({"remove_artefacts": True})
    with pytest.raises(InvalidOptions):
        ConversionOptions.from_mapping({"commonAverage": True})


def test_from_mapping_accepts_legacy_camel_case_keys(tmp_path):
    opts = ConversionOptions.from_mapping({
        "outputFolder": str(tmp_path),
        "commonAverageReferencing": True,
        "removeArtifacts": True,
        "removeArtifactsVisualize": True,
        "specificChannels": [66, 65],
        "plotProbeVoltage": True,
        "extractLfp": True,
        "extractAi": False,
    })
    assert opts.output_folder == tmp_path
    assert opts.common_average_referencing is True
    assert opts.remove_artifacts is True
    assert opts.remove_artifacts_visualize is True
    assert opts.specific_channels == (66, 65)
    assert opts.plot_probe_voltage is True
    assert opts.extract_lfp is True
    assert opts.extract_ai is False


def test_from_mapping_rejects_both_spellings_of_one_option():
    with pytest.raises(InvalidOptions):
        ConversionOptions.from_mapping({"extractLfp": True, "extract_lfp": False})


def test_to_dict_is_plain_data(tmp_path):
    d = ConversionOptions(output_folder=tmp_path, specific_channels=[3, 1]).to_dict()
    assert d["output_folder"] == str(tmp_path)
    assert d["specific_channels"] == [3, 1]
    assert d["spike_channel_markers"] == ["SPKC", "CSPK"]
    assert d["ai_channels"] is None
