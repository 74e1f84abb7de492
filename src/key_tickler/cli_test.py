import sys

import pytest
from click.testing import CliRunner

from key_tickler.__main__ import main
from key_tickler.cli import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def hello_ciphertext(tmp_path, runner):
    """HELLO encrypted under AB through the encrypt command."""
    plaintext_path = tmp_path / "hello.txt"
    plaintext_path.write_bytes(b"HELLO")
    result = runner.invoke(cli, ["encrypt", "-i", str(plaintext_path), "-k", "AB"])
    assert result.exit_code == 0, result.output
    return tmp_path / "hello.txt.rc4"


class TestEncrypt:
    """Test suite for the encrypt command"""

    def test_writes_ciphertext(self, hello_ciphertext):
        assert hello_ciphertext.read_bytes() == bytes.fromhex("d8e0ec7ad2")

    def test_hex_output(self, tmp_path, runner):
        plaintext_path = tmp_path / "hello.txt"
        plaintext_path.write_bytes(b"HELLO")
        output = tmp_path / "hello.hex"
        result = runner.invoke(cli, ["encrypt", "-i", str(plaintext_path), "-k", "AB", "-o", str(output), "-f", "hex"])
        assert result.exit_code == 0, result.output
        assert output.read_text() == "d8e0ec7ad2"

    def test_multibyte_key(self, tmp_path, runner):
        plaintext_path = tmp_path / "hello.txt"
        plaintext_path.write_bytes(b"HELLO")
        result = runner.invoke(cli, ["encrypt", "-i", str(plaintext_path), "-k", "€"])
        assert result.exit_code != 0
        assert "single byte" in result.output


class TestSolve:
    """Test suite for the solve command"""

    def test_found(self, hello_ciphertext, runner):
        """Key is reported and the plaintext written next to the ciphertext"""
        result = runner.invoke(cli, [
            "solve", "-c", str(hello_ciphertext), "-a", "AB", "-m", "2", "-b", "python", "--no-ui",
        ])
        assert result.exit_code == 0, result.output
        assert "Decryption successful, key found: AB" in result.output
        assert "Time taken:" in result.output
        plaintext_path = hello_ciphertext.parent / "hello.txt.rc4.plaintext"
        assert plaintext_path.read_bytes() == b"HELLO"

    def test_found_hex_input_custom_output(self, tmp_path, runner):
        ciphertext_path = tmp_path / "ct.hex"
        ciphertext_path.write_text("d8e0ec7ad2\n")
        output = tmp_path / "out.bin"
        result = runner.invoke(cli, [
            "solve", "-c", str(ciphertext_path), "-f", "hex", "-a", "AB", "-m", "2",
            "-b", "numpy", "-o", str(output), "--no-ui",
        ])
        assert result.exit_code == 0, result.output
        assert output.read_bytes() == b"HELLO"

    def test_exhausted(self, hello_ciphertext, runner):
        """Legacy enumeration never reaches AB"""
        result = runner.invoke(cli, [
            "solve", "-c", str(hello_ciphertext), "-a", "AB", "-m", "2", "-b", "python", "-e", "legacy", "--no-ui",
        ])
        assert result.exit_code == 1
        assert "No valid key found" in result.output
        assert not (hello_ciphertext.parent / "hello.txt.rc4.plaintext").exists()

    def test_with_ui(self, hello_ciphertext, runner):
        """The live view runs alongside the search and exits when it closes"""
        result = runner.invoke(cli, [
            "solve", "-c", str(hello_ciphertext), "-a", "AB", "-m", "2", "-b", "threads",
        ])
        assert result.exit_code == 0, result.output
        assert "key found: AB" in result.output

    @pytest.mark.parametrize("args,message", [
        (["-a", "AA"], "distinct"),
        (["-a", ""], "alphabet"),
        (["-m", "0"], "max_key_length"),
    ])
    def test_invalid_input(self, hello_ciphertext, runner, args, message):
        result = runner.invoke(cli, ["solve", "-c", str(hello_ciphertext), "-b", "python", "--no-ui", *args])
        assert result.exit_code == 1
        assert "Error:" in result.output
        assert message in result.output

    def test_empty_ciphertext(self, tmp_path, runner):
        path = tmp_path / "empty.bin"
        path.write_bytes(b"")
        result = runner.invoke(cli, ["solve", "-c", str(path), "-b", "python", "--no-ui"])
        assert result.exit_code == 1
        assert "ciphertext is empty" in result.output

    def test_json_logs(self, hello_ciphertext, runner):
        result = runner.invoke(cli, [
            "--json-logs", "solve", "-c", str(hello_ciphertext), "-a", "AB", "-m", "2", "-b", "python", "--no-ui",
        ])
        assert result.exit_code == 0, result.output
        assert '"event": "key found"' in result.output


class TestEntryPoint:
    """Test suite for the console script"""

    def test_main_lists_commands(self, monkeypatch, capsys):
        monkeypatch.setattr(sys, "argv", ["key-tickler", "--help"])
        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == 0
        output = capsys.readouterr().out
        for command in ("solve", "encrypt", "demo1", "demo-api"):
            assert command in output
