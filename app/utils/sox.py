"""
SoX/soxi ラッパー
Design原則: 18. 複雑性をシステム側へ
"""
import math
import re
import shlex
import subprocess
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional, Union

from app.utils.logging_helper import StructuredLogger
from config.settings import settings

PathLike = Union[str, Path]
OptionItems = Union[Mapping[str, Any], Iterable[tuple[str, Any]]]

# オプション名 → sox フラグ
OPTION_FLAGS: Mapping[str, str] = MappingProxyType({
    "channel": "c",
    "sampleRate": "r",
})

# 符号・小数・指数のみ（nan/inf/16進/区切り文字は対象外）
_NUMERIC_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")


class SoxError(Exception):
    """SoX 処理エラー"""
    pass

class ToolUnavailable(SoxError):
    """sox コマンドが見つからない"""
    pass

class SourceNotFound(SoxError):
    """変換元ファイルが存在しない"""
    pass

class DestinationExists(SoxError):
    """変換先ファイルが既に存在する"""
    pass

class ConversionFailed(SoxError):
    """変換後ファイルが生成されなかった"""
    pass


def is_numeric(text: str) -> bool:
    return bool(_NUMERIC_RE.match(text.strip()))


def parse_duration(text: str) -> Optional[float]:
    """
    秒数文字列 → 小数点以下2桁（中間値は0から遠い側へ丸める）
    数値でない・桁あふれの場合は None
    """
    if not is_numeric(text):
        return None

    try:
        value = Decimal(text.strip()).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return None

    return float(value)


def parse_integer(text: str) -> Optional[int]:
    """整数値（小数部は切り捨て）、数値でない・有限でない場合は None"""
    if not is_numeric(text):
        return None

    value = float(text.strip())
    if not math.isfinite(value):
        return None

    return int(value)


def split_command(cmd: str) -> list[str]:
    """
    組み立て済みコマンド文字列を一括でargvに分割
    シェルを経由しないためメタ文字・バックスラッシュはリテラル扱い
    """
    lexer = shlex.shlex(cmd, posix=True)
    lexer.whitespace_split = True
    lexer.commenters = ""
    lexer.escape = ""

    try:
        return list(lexer)
    except ValueError:
        # 閉じていない引用符
        return cmd.split()


def options_as_command(options: Optional[OptionItems]) -> str:
    """
    オプション → コマンドライン断片

    未知のオプション名は無視する。順序は入力順。
    例: {"channel": 2} → " -c 2 "
    """
    if not options:
        return ""

    items = options.items() if isinstance(options, Mapping) else options

    cmd = ""
    for key, value in items:
        flag = OPTION_FLAGS.get(key)
        if flag:
            cmd += f" -{flag} {value} "

    return cmd


class Sox:
    """
    SoX ラッパー

    メタデータ取得（soxi）は失敗時に 0 を返し、
    変換（sox）は失敗時に例外を送出する。
    同一出力先への並行変換は呼び出し側で排他すること。
    """

    def __init__(
        self,
        sox_binary: str = None,
        soxi_binary: str = None,
        timeout: Optional[float] = None
    ):
        self.sox_binary = sox_binary or settings.SOX_BINARY
        self.soxi_binary = soxi_binary or settings.SOXI_BINARY
        self.timeout = timeout if timeout is not None else settings.SOX_TIMEOUT_SEC
        self.logger = StructuredLogger("sox")

        # 前提条件チェック（Design原則: 32. 前提条件は先に提示する）
        if not self._check_sox_exists():
            raise ToolUnavailable(f"sox not found: {self.sox_binary}")

    def _check_sox_exists(self) -> bool:
        """sox --version の出力有無で判定"""
        output = self._run([self.sox_binary, "--version"])
        return bool(output.strip())

    def _run(self, argv: list[str]) -> str:
        """
        コマンド実行し標準出力を返す
        終了コードは見ない。起動失敗・タイムアウト時は空文字列
        """
        self.logger.debug("Running command", argv=argv)

        try:
            result = subprocess.run(
                argv,
                capture_output=True,
                text=True,
                timeout=self.timeout
            )
        except subprocess.TimeoutExpired:
            self.logger.warning("Command timed out", argv=argv, timeout=self.timeout)
            return ""
        except OSError as e:
            self.logger.warning("Command could not be started", argv=argv, error=str(e))
            return ""

        if result.stderr:
            self.logger.debug("Command stderr", argv=argv, stderr=result.stderr.strip())

        return result.stdout or ""

    def _soxi(self, cmd: str) -> str:
        return self._run([self.soxi_binary, *split_command(cmd)])

    def _sox(self, cmd: str) -> str:
        return self._run([self.sox_binary, *split_command(cmd)])

    def get_duration_seconds(self, path: PathLike) -> float:
        """
        音声ファイルの長さ（秒、小数点以下2桁）
        取得できない場合は 0.0
        """
        output = self._soxi(f"-D {path}").strip()

        duration = parse_duration(output)
        if duration is None:
            self.logger.warning("Duration not available", path=str(path), output=output)
            return 0.0

        return duration

    def get_sample_rate(self, path: PathLike) -> int:
        """
        サンプリングレート（Hz）
        取得できない場合は 0
        """
        output = self._soxi(f"-r {path}").strip()

        sample_rate = parse_integer(output)
        if sample_rate is None:
            self.logger.warning("Sample rate not available", path=str(path), output=output)
            return 0

        return sample_rate

    def get_channels(self, path: PathLike) -> int:
        """チャンネル数（取得できない場合は 0）"""
        output = self._soxi(f"-c {path}").strip()

        channels = parse_integer(output)
        if channels is None:
            self.logger.warning("Channel count not available", path=str(path), output=output)
            return 0

        return channels

    def build_convert_command(
        self,
        infile: PathLike,
        outfile: PathLike,
        options: Optional[Mapping[str, Any]] = None
    ) -> str:
        """
        変換コマンド文字列を組み立て

        options:
            infile: 入力側オプション
            outfile: 出力側オプション
            effects: エフェクト文字列（そのまま末尾に付加）
        """
        options = options or {}

        infile_options = options_as_command(options.get("infile"))
        outfile_options = options_as_command(options.get("outfile"))
        effects = options.get("effects") or ""

        # 出力側オプションは区切りなしで連結（断片自体が先頭に空白を持つ）
        return f"{infile_options} {infile}{outfile_options} {outfile} {effects}"

    def convert(
        self,
        infile: PathLike,
        outfile: PathLike,
        options: Optional[Mapping[str, Any]] = None
    ) -> None:
        """
        音声フォーマット変換
        出力ファイルの生成有無のみで成否を判定する（上書きはしない）
        """
        if not Path(infile).exists():
            raise SourceNotFound(f"Source file not found: {infile}")

        if Path(outfile).exists():
            raise DestinationExists(f"Destination already exists: {outfile}")

        cmd = self.build_convert_command(infile, outfile, options)
        self._sox(cmd)

        if not Path(outfile).exists():
            self.logger.error("Conversion failed", infile=str(infile), outfile=str(outfile))
            raise ConversionFailed(f"Conversion failed: {infile} -> {outfile}")

        self.logger.info("Converted", infile=str(infile), outfile=str(outfile))
