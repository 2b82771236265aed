"""
CLI・エラー翻訳・設定 テストケース
"""
import pytest
from unittest.mock import patch

from app.main import main, build_parser, build_convert_options
from app.utils.error_translator import ErrorTranslator
from app.utils.sox import ToolUnavailable, DestinationExists
from config.settings import Settings

class TestCli:
    """soxwrap コマンド"""

    @patch('app.main.Sox')
    def test_duration(self, mock_sox_class, capsys):
        mock_sox_class.return_value.get_duration_seconds.return_value = 12.35

        assert main(["duration", "in.wav"]) == 0

        mock_sox_class.return_value.get_duration_seconds.assert_called_once_with("in.wav")
        assert capsys.readouterr().out.strip() == "12.35"

    @patch('app.main.Sox')
    def test_rate_and_channels(self, mock_sox_class, capsys):
        mock_sox_class.return_value.get_sample_rate.return_value = 44100
        mock_sox_class.return_value.get_channels.return_value = 2

        main(["rate", "in.wav"])
        main(["channels", "in.wav"])

        assert capsys.readouterr().out.split() == ["44100", "2"]

    @patch('app.main.Sox')
    def test_convert(self, mock_sox_class, capsys):
        code = main([
            "convert", "in.wav", "out.mp3",
            "--in-channel", "2", "--out-rate", "8000", "--effects", "gain -3"
        ])

        assert code == 0
        mock_sox_class.return_value.convert.assert_called_once_with(
            "in.wav",
            "out.mp3",
            {"infile": {"channel": 2}, "outfile": {"sampleRate": 8000}, "effects": "gain -3"}
        )
        assert "Converted: in.wav -> out.mp3" in capsys.readouterr().out

    @patch('app.main.Sox')
    def test_tool_unavailable(self, mock_sox_class, capsys):
        """sox未インストール時は終了コード1"""
        mock_sox_class.side_effect = ToolUnavailable("sox not found: sox")

        assert main(["duration", "in.wav"]) == 1
        assert "SoX が見つかりません" in capsys.readouterr().err

    @patch('app.main.Sox')
    def test_convert_error(self, mock_sox_class, capsys):
        mock_sox_class.return_value.convert.side_effect = DestinationExists("Destination already exists: out.mp3")

        assert main(["convert", "in.wav", "out.mp3"]) == 1
        assert "既に存在します" in capsys.readouterr().err

    def test_convert_options_default_empty(self):
        args = build_parser().parse_args(["convert", "a.wav", "b.wav"])

        assert build_convert_options(args) == {"infile": {}, "outfile": {}, "effects": ""}

    def test_subcommand_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


class TestErrorTranslator:
    """エラー翻訳"""

    def test_known_message(self):
        assert "音声変換に失敗しました" in ErrorTranslator.translate("Conversion failed: a.wav -> b.mp3")

    def test_unknown_message_passthrough(self):
        assert ErrorTranslator.translate("  something odd  ") == "something odd"

    def test_long_message_truncated(self):
        result = ErrorTranslator.translate("x" * 300)
        assert result == "x" * 200 + "..."

    def test_empty(self):
        assert ErrorTranslator.translate("") == "予期しないエラーが発生しました"


class TestSettings:
    """環境変数からの設定読み込み"""

    def test_defaults(self, monkeypatch):
        for name in ("SOX_BINARY", "SOXI_BINARY", "SOX_TIMEOUT_SEC"):
            monkeypatch.delenv(name, raising=False)

        s = Settings()

        assert s.SOX_BINARY == "sox"
        assert s.SOXI_BINARY == "soxi"
        assert s.SOX_TIMEOUT_SEC is None

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("SOX_BINARY", "/opt/sox/bin/sox")
        monkeypatch.setenv("SOX_TIMEOUT_SEC", "2.5")

        s = Settings()

        assert s.SOX_BINARY == "/opt/sox/bin/sox"
        assert s.SOX_TIMEOUT_SEC == 2.5
