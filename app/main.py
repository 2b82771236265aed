"""
コマンドラインエントリーポイント
Design原則: 1. シンプルにする
"""
import argparse
import logging
import sys

from config.settings import settings
from app.utils.sox import Sox, SoxError
from app.utils.error_translator import ErrorTranslator

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="soxwrap",
        description="Query and convert audio files with SoX."
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {settings.VERSION}")
    sub = parser.add_subparsers(dest="command", required=True)

    for name, help_text in [
        ("duration", "Print duration in seconds"),
        ("rate", "Print sample rate in Hz"),
        ("channels", "Print channel count"),
    ]:
        p = sub.add_parser(name, help=help_text)
        p.add_argument("path", help="Audio file")

    p = sub.add_parser("convert", help="Convert an audio file (never overwrites)")
    p.add_argument("infile", help="Source audio file")
    p.add_argument("outfile", help="Destination audio file")
    p.add_argument("--in-channel", type=int, help="Input channel count")
    p.add_argument("--in-rate", type=int, help="Input sample rate")
    p.add_argument("--out-channel", type=int, help="Output channel count")
    p.add_argument("--out-rate", type=int, help="Output sample rate")
    p.add_argument("--effects", default="", help='Effects chain, e.g. "gain -3"')

    return parser


def _file_options(channel, rate) -> dict:
    options = {}
    if channel is not None:
        options["channel"] = channel
    if rate is not None:
        options["sampleRate"] = rate
    return options


def build_convert_options(args: argparse.Namespace) -> dict:
    """CLI引数 → convert() のオプション"""
    return {
        "infile": _file_options(args.in_channel, args.in_rate),
        "outfile": _file_options(args.out_channel, args.out_rate),
        "effects": args.effects,
    }


def main(argv: list[str] = None) -> int:
    args = build_parser().parse_args(argv)

    # ログ設定
    logging.basicConfig(
        level=logging.INFO if not settings.DEBUG else logging.DEBUG,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        sox = Sox()

        if args.command == "duration":
            print(sox.get_duration_seconds(args.path))
        elif args.command == "rate":
            print(sox.get_sample_rate(args.path))
        elif args.command == "channels":
            print(sox.get_channels(args.path))
        else:
            sox.convert(args.infile, args.outfile, build_convert_options(args))
            print(f"Converted: {args.infile} -> {args.outfile}")

    except SoxError as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"Error: {ErrorTranslator.translate(str(e))}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
