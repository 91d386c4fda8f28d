from __future__ import annotations

import argparse
import logging
import sys

from .config import RunConfig, build_config, load_config
from .errors import ConfigError, GrokParseError
from .extractor import Extractor
from .processor import Processor
from .render import make_renderer
from .sinks import open_sink
from .sources import open_source

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="grokparse", description="Parse structured data using grok filters.")
    parser.add_argument("-p", "--pattern", type=str, help="Grok pattern to match on")
    parser.add_argument(
        "-i", "--input", dest="inputs", action="append",
        help="Input file glob, may be repeated; '-' or none reads stdin",
    )
    parser.add_argument("-o", "--output", type=str, help="Output file, stdout if not provided")
    parser.add_argument("--patterns", dest="patterns_dir", type=str, help="Custom patterns directory")
    parser.add_argument(
        "--no-patterns", dest="no_default_patterns", action="store_true", default=None,
        help="Do not load the built-in patterns, only those from --patterns",
    )
    parser.add_argument(
        "--named-only", action="store_true", default=None,
        help="Only capture placeholders written with a field name, e.g. %%{IP:client}",
    )
    parser.add_argument("-c", "--csv", action="store_true", help="Return CSV formatted data")
    parser.add_argument("-j", "--json", action="store_true", help="Return JSON formatted data (default)")
    parser.add_argument(
        "--no-stats", dest="stats", action="store_false", default=None,
        help="Do not print the number of parsed and failed records at the end",
    )
    parser.add_argument("--config", type=str, help="YAML file with default settings")
    parser.add_argument(
        "--log-level", default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Diagnostic log level (stderr)",
    )
    return parser


def resolve_config(args: argparse.Namespace) -> RunConfig:
    if args.json and args.csv:
        raise ConfigError("Select either JSON or CSV but not both options to output")
    fmt = "csv" if args.csv else "json" if args.json else None
    file_values = load_config(args.config) if args.config else {}
    return build_config(
        file_values,
        pattern=args.pattern,
        inputs=args.inputs,
        output=args.output,
        patterns_dir=args.patterns_dir,
        no_default_patterns=args.no_default_patterns,
        named_only=args.named_only,
        format=fmt,
        stats=args.stats,
    )


def run(cfg: RunConfig) -> None:
    extractor = Extractor.from_template(
        cfg.pattern,
        patterns_dir=cfg.patterns_dir,
        no_default_patterns=cfg.no_default_patterns,
        named_only=cfg.named_only,
    )
    processor = Processor(extractor=extractor, renderer=make_renderer(cfg.format), emit_stats=cfg.stats)
    sink = open_sink(cfg.output)
    with open_source(cfg.inputs) as source:
        processor.process(source, sink)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )
    try:
        run(resolve_config(args))
    except (GrokParseError, OSError) as e:
        logger.debug("Run aborted", exc_info=True)
        print(f"grokparse: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
