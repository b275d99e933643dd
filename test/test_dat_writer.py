# test/test_dat_writer.py
import numpy as np
import pytest

from ephysdat.core import InvalidRecording
from ephysdat.io.dat_writer import dat_path_for, read_dat, write_dat


def test_layout_is_channel_major_little_endian(tmp_path):
    samples = np.array([[1, 2, 3], [4, 5, 6]], dtype=np.int16)
    path = write_dat(tmp_path / "x.dat", samples)

    raw = path.read_bytes()
    assert len(raw) == 12
    assert raw[:2] == b"\x01\x00"
    assert np.array_equal(np.frombuffer(raw, dtype="<i2"), [1, 2, 3, 4, 5, 6])


def test_read_dat_restores_matrix(tmp_path):
    samples = np.array([[-1, 32767, -32768], [0, 7, 8]], dtype=np.int16)
    path = write_dat(dat_path_for(tmp_path, "session"), samples)

    assert path.name == "session.dat"
    assert np.array_equal(read_dat(path, 2), samples)


def test_existing_file_is_replaced(tmp_path):
    path = tmp_path / "x.dat"
    path.write_bytes(b"\xff" * 100)

    write_dat(path, np.array([[9]], dtype=np.int16))
    assert path.stat().st_size == 2
    assert read_dat(path, 1).tolist() == [[9]]


def test_write_rejects_non_int16(tmp_path):
    with pytest.raises(InvalidRecording):
        write_dat(tmp_path / "x.dat", np.zeros((2, 2), dtype=np.float32))
    with pytest.raises(InvalidRecording):
        write_dat(tmp_path / "x.dat", np.zeros(4, dtype=np.int16))


def test_read_rejects_bad_channel_count(tmp_path):
    path = write_dat(tmp_path / "x.dat", np.zeros((1, 3), dtype=np.int16))
    with pytest.raises(InvalidRecording):
        read_dat(path, 2)
    with pytest.raises(ValueError):
        read_dat(path, 0)
