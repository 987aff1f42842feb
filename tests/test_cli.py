import os

import pytest

import ptau_gen.sampler as sampler
from ptau_gen import cli
from ptau_gen.chunks import read_chunk, read_single


def small_run(tmp_path, *extra):
    return [
        "--g1-count", "2", "--g1-chunk-length", "2", "--g1-pattern", str(tmp_path / "g1_{}.bin"),
        "--g2-count", "0",
        "--workers", "thread",
        *extra,
    ]


def test_generates_files(tmp_path, capsys):
    code = cli.main(small_run(tmp_path, "--single-g2", str(tmp_path / "tau_g2.bin")))
    assert code == cli.EXIT_OK
    assert len(read_chunk(str(tmp_path / "g1_0.bin"))) == 2
    assert len(read_single(str(tmp_path / "tau_g2.bin"))) == 96
    out = capsys.readouterr().out
    assert "G1 chunk length: 2" in out
    assert "G1: 2/2 points in 1 files" in out


def test_optional_streams(tmp_path):
    args = small_run(
        tmp_path,
        "--paired-count", "2", "--paired-chunk-length", "2", "--paired-pattern", str(tmp_path / "p_{}.bin"),
        "--pedersen-g1-count", "2", "--pedersen-g1-chunk-length", "2",
        "--pedersen-g1-pattern", str(tmp_path / "h_{}.bin"),
        "--quiet",
    )
    assert cli.main(args) == cli.EXIT_OK
    assert [len(r) for r in read_chunk(str(tmp_path / "p_0.bin"))] == [144, 144]
    assert [len(r) for r in read_chunk(str(tmp_path / "h_0.bin"))] == [48, 48]


def test_drop_partial(tmp_path):
    args = small_run(tmp_path, "--quiet", "--drop-partial")
    args[1] = "3"
    assert cli.main(args) == cli.EXIT_OK
    assert os.path.exists(tmp_path / "g1_0.bin")
    assert not os.path.exists(tmp_path / "g1_1.bin")


def test_chunk_length_of_one_is_a_config_error(tmp_path, capsys):
    args = small_run(tmp_path)
    args[3] = "1"
    assert cli.main(args) == cli.EXIT_CONFIG
    assert "at least 2 elements" in capsys.readouterr().err


def test_count_above_maximum_is_a_config_error(tmp_path, capsys):
    args = small_run(tmp_path)
    args[1] = str(2 ** 32 + 1)
    assert cli.main(args) == cli.EXIT_CONFIG
    assert "4294967297" in capsys.readouterr().err


def test_pattern_without_placeholder(tmp_path, capsys):
    args = small_run(tmp_path)
    args[5] = str(tmp_path / "g1.bin")
    assert cli.main(args) == cli.EXIT_CONFIG
    assert "placeholder" in capsys.readouterr().err


def test_write_failure_exit_code(tmp_path, capsys):
    args = small_run(tmp_path, "--quiet")
    args[5] = str(tmp_path / "missing" / "g1_{}.bin")
    assert cli.main(args) == cli.EXIT_IO
    assert "failed to write chunk 0" in capsys.readouterr().err


def test_entropy_failure_exit_code(tmp_path, monkeypatch, capsys):
    def broken(n):
        raise OSError("entropy pool gone")

    monkeypatch.setattr(sampler, "get_random_bytes", broken)
    assert cli.main(small_run(tmp_path, "--quiet")) == cli.EXIT_ENTROPY
    assert "entropy pool gone" in capsys.readouterr().err
    assert os.listdir(tmp_path) == []


def test_bad_worker_choice_is_rejected_by_argparse(tmp_path):
    with pytest.raises(SystemExit) as info:
        cli.main(small_run(tmp_path, "--workers", "fiber"))
    assert info.value.code == 2
