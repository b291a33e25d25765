import argparse
import sys
import logging
from pathlib import Path
from typing import List, Optional

from ..errors import LemmastreamError

logger = logging.getLogger(__name__)

EPILOG = """\
examples:
  lemmastream show "The children were running" --field body --config analyzer.yaml
  lemmastream analyze -i corpus/ -o tokens/ --field body --workers 8

Fields listed under `fields:` in the YAML config are lemmatized; any other
field name gets the generic word-shape filter. Without --config the English
stop set is used and no field is lemmatized.
"""


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="lemmastream",
        description="lemmastream - per-field lemmatizing text analysis",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose output"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    _add_analyze_subparser(subparsers)
    _add_show_subparser(subparsers)

    return parser


def _add_config_arguments(subparser):
    subparser.add_argument(
        "--config", type=Path, default=None, help="YAML analyzer config"
    )
    subparser.add_argument(
        "--field",
        default="body",
        help="Field name the text belongs to (default: body)",
    )


def _add_analyze_subparser(subparsers):
    """Add the analyze subcommand."""
    analyze_parser = subparsers.add_parser(
        "analyze", help="Analyze text files into JSONL token streams"
    )
    analyze_parser.add_argument(
        "-i", "--input", type=Path, required=True, help="Input .txt file or directory"
    )
    analyze_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path("output"),
        help="Output directory (default: output)",
    )
    analyze_parser.add_argument(
        "--workers", type=int, default=4, help="Number of parallel workers (default: 4)"
    )
    _add_config_arguments(analyze_parser)


def _add_show_subparser(subparsers):
    """Add the show subcommand."""
    show_parser = subparsers.add_parser(
        "show", help="Print the token stream of a piece of text"
    )
    show_parser.add_argument("text", help="Text to analyze")
    _add_config_arguments(show_parser)


def _build_analyzer(args):
    from ..analysis.analyzer import StemmerAnalyzer

    if args.config is None:
        return StemmerAnalyzer()
    return StemmerAnalyzer.from_yaml(args.config)


def cmd_analyze(args) -> int:
    """Execute the analyze command."""
    from ..pipeline import AnalysisPipeline

    text_files = _collect_text_files(args.input)
    if not text_files:
        print(f"No .txt files found in {args.input}")
        return 1

    analyzer = _build_analyzer(args)
    pipeline = AnalysisPipeline(analyzer, field_name=args.field, workers=args.workers)

    print(f"Analyzing {len(text_files)} file(s) as field '{args.field}'...")
    results = pipeline.run(text_files, show_progress=True)

    for result in results:
        if result is not None:
            pipeline.save_jsonl(result, args.output)

    successful = sum(1 for r in results if r is not None)
    print(f"Analyzed {successful}/{len(text_files)} file(s)")
    return 0


def cmd_show(args) -> int:
    """Execute the show command."""
    from rich.console import Console
    from rich.table import Table

    analyzer = _build_analyzer(args)

    table = Table(title=f"field: {args.field}")
    for column in ("text", "start", "end", "+pos", "type", "pos tag"):
        table.add_column(column)

    for token in analyzer.analyze(args.field, args.text):
        table.add_row(
            token.text,
            str(token.start_offset),
            str(token.end_offset),
            str(token.position_increment),
            token.type.value,
            token.part_of_speech or "",
        )

    Console().print(table)
    return 0


def _collect_text_files(path: Path) -> List[Path]:
    """Collect .txt files from a path."""
    if path.is_file():
        return [path] if path.suffix.lower() == ".txt" else []
    return sorted(path.glob("*.txt"))


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO, format="%(message)s"
    )

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "analyze": cmd_analyze,
        "show": cmd_show,
    }

    try:
        return commands[args.command](args)
    except LemmastreamError as e:
        logger.error(f"Analyzer failed to initialize: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
