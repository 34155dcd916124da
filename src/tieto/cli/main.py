#!/usr/bin/env python3
"""
Command line interface for Tieto.

Usage:
    tieto ingest topics/acme-corp/products.txt
    tieto ask acme-corp "What is Widget A?" --filter status=current --debug
    tieto topics
    tieto import-csv strains.csv topics/strains
    tieto tokens "How many tokens is this?"
"""

import argparse
import logging
import sys
from typing import List, Optional

from dotenv import load_dotenv

from ..config.config_loader import load_config
from ..contracts.retrieval_contracts import QueryResult, QueryStatus
from ..core.exceptions import TietoError
from ..core.logging import configure_logging
from ..core.types import TietoConfig
from ..importers.csv_import import process_csv
from ..retrieval.orchestrator import Tieto
from ..storage.topic_store import TopicStore
from ..tools.token_estimate import estimate_tokens, estimate_tokens_advanced, quick_token_estimate


logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_EMPTY = 2

EMPTY_MESSAGES = {
    QueryStatus.NO_DATA: "No data stored for topic '{topic}'.",
    QueryStatus.NO_CANDIDATES: "No chunks in topic '{topic}' match the given filters.",
    QueryStatus.NO_CONFIDENT_MATCH: (
        "No confident match in topic '{topic}' "
        "(top score {score:.3f} < threshold {threshold:.3f})."
    ),
}


def build_config(args: argparse.Namespace) -> TietoConfig:
    """Defaults, YAML, environment, then command line flags."""
    return load_config(
        args.config,
        topics_root=args.topics_root,
        embedding_url=args.embedding_url,
        completion_url=args.completion_url,
        top_k=getattr(args, "top_k", None),
        min_similarity_threshold=getattr(args, "threshold", None),
        debug=getattr(args, "debug", None),
    )


def filter_expressions(groups: Optional[List[List[str]]]) -> List[str]:
    """Join each `--filter` occurrence's words into one expression."""
    return [" ".join(words) for words in groups or []]


def cmd_ingest(args: argparse.Namespace) -> int:
    """Ingest one or more documents."""
    tieto = Tieto(build_config(args))
    batch = tieto.ingest_many(args.paths, topic=args.topic, name=args.name)

    for result in batch.results:
        if result.ok:
            print(f"{result.path}: {result.chunks_written} chunks -> {result.record_log}")
        else:
            print(f"{result.path}: FAILED ({result.error})", file=sys.stderr)

    print(f"Ingested {batch.chunks_written} chunks from {len(batch.results) - len(batch.failed)} documents")
    return EXIT_ERROR if batch.failed else EXIT_OK


def print_scores(result: QueryResult) -> None:
    print(f"threshold: {result.threshold:.3f}", file=sys.stderr)
    print(f"candidates: {result.candidates} (skipped {result.skipped})", file=sys.stderr)
    if result.rejected_filters:
        print(f"rejected filters: {', '.join(result.rejected_filters)}", file=sys.stderr)
    if result.scan_report.failure_count:
        print(f"unreadable records: {result.scan_report.failure_count}", file=sys.stderr)
    for hit in result.hits:
        preview = hit.text.replace("\n", " ")[:60]
        print(f"  #{hit.rank} {hit.score:.4f} {preview}", file=sys.stderr)


def cmd_ask(args: argparse.Namespace) -> int:
    """Answer a question from a topic."""
    config = build_config(args)
    tieto = Tieto(config)
    result = tieto.query(args.topic, args.question, filter_expressions(args.filter))

    if config.debug:
        print_scores(result)

    if result.status is not QueryStatus.OK:
        message = EMPTY_MESSAGES[result.status].format(
            topic=args.topic,
            score=result.top_score if result.top_score is not None else float("nan"),
            threshold=result.threshold,
        )
        print(message)
        return EXIT_EMPTY

    print(result.text)
    return EXIT_OK


def cmd_topics(args: argparse.Namespace) -> int:
    """List topics."""
    store = TopicStore(build_config(args).topics_root)
    for topic in store.list_topics():
        print(topic)
    return EXIT_OK


def cmd_import_csv(args: argparse.Namespace) -> int:
    """Convert CSV rows to markdown documents."""
    result = process_csv(args.csv, args.output_dir)
    print(f"Wrote {result.count} documents to {args.output_dir}")
    if result.symlink_failures:
        print(f"{len(result.symlink_failures)} symlinks could not be created", file=sys.stderr)
    return EXIT_OK


def cmd_tokens(args: argparse.Namespace) -> int:
    """Estimate the token count of text or stdin."""
    text = sys.stdin.read() if args.text in (None, "-") else args.text
    stats = estimate_tokens(text)
    print(f"Tokens:   {stats.tokens}")
    print(f"Words:    {stats.words}")
    print(f"Chars:    {stats.chars}")
    print(f"Advanced: {estimate_tokens_advanced(text)}")
    print(f"Quick:    {quick_token_estimate(text)}")
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tieto",
        description="Topic-scoped document retrieval for LLM prompts",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")
    parser.add_argument("--log-json", action="store_true", help="Emit JSON log lines")
    parser.add_argument("-c", "--config", help="YAML config file (default: $TIETO_CONFIG or ./tieto.yaml)")
    parser.add_argument("--topics-root", help="Directory holding topic folders")
    parser.add_argument("--embedding-url", help="Embedding service URL")
    parser.add_argument("--completion-url", help="Completion endpoint URL")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # ingest command
    ingest_parser = subparsers.add_parser("ingest", help="Ingest documents into a topic")
    ingest_parser.add_argument("paths", nargs="+", help="Document paths")
    ingest_parser.add_argument("--topic", help="Topic (default: directory after topics/)")
    ingest_parser.add_argument("--name", help="Record log name (default: file stem)")
    ingest_parser.set_defaults(func=cmd_ingest)

    # ask command
    ask_parser = subparsers.add_parser("ask", help="Ask a question against a topic")
    ask_parser.add_argument("topic", help="Topic to search")
    ask_parser.add_argument("question", help="Question text")
    ask_parser.add_argument(
        "-f", "--filter", action="append", nargs="+", metavar="EXPR",
        help="Metadata filter, e.g. status=current or 'rating>=3' (repeatable)",
    )
    ask_parser.add_argument("-k", "--top-k", type=int, help="Number of chunks to keep")
    ask_parser.add_argument("-t", "--threshold", type=float, help="Minimum similarity")
    ask_parser.add_argument(
        "--debug", action="store_true", default=None,
        help="Print per-chunk scores and the threshold to stderr",
    )
    ask_parser.set_defaults(func=cmd_ask)

    # topics command
    topics_parser = subparsers.add_parser("topics", help="List topics")
    topics_parser.set_defaults(func=cmd_topics)

    # import-csv command
    csv_parser = subparsers.add_parser("import-csv", help="Convert CSV rows to markdown documents")
    csv_parser.add_argument("csv", help="Input CSV file")
    csv_parser.add_argument("output_dir", help="Output directory")
    csv_parser.set_defaults(func=cmd_import_csv)

    # tokens command
    tokens_parser = subparsers.add_parser("tokens", help="Estimate token count")
    tokens_parser.add_argument("text", nargs="?", help="Text to measure ('-' or omitted reads stdin)")
    tokens_parser.set_defaults(func=cmd_tokens)

    return parser


def main(argv: Optional[list] = None) -> int:
    """Main entry point."""
    load_dotenv()

    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        level=logging.DEBUG if args.verbose else logging.INFO,
        structured=args.log_json,
    )

    if not args.command:
        parser.print_help()
        return EXIT_ERROR

    try:
        return args.func(args)
    except (TietoError, ValueError) as e:
        logger.error(str(e))
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
