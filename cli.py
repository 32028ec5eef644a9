#!/usr/bin/env python3
import argparse
import logging
import sys
import uuid
from typing import List, Optional

from pydantic import ValidationError

from lexical_rag.app import build_assistant, build_feed
from lexical_rag.config import AppConfig, load_config
from lexical_rag.errors import ConfigError, LexicalRagError
from lexical_rag.index.schema import SearchStrategy
from lexical_rag.ingest.feed import IngestReport
from lexical_rag.logging_utils import setup_logging
from lexical_rag.sessions import SessionRegistry

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lexical-rag",
        description="TF-IDF retrieval over your documents, with optional local LLM answers.",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable DEBUG logs (to stderr)."
    )
    parser.add_argument("--quiet", "-q", action="store_true", help="Reduce logs to WARN and above.")
    parser.add_argument("--log-json", action="store_true", help="Emit logs as JSON lines (stderr).")
    parser.add_argument("--config", type=str, default="config.yaml")
    sub = parser.add_subparsers(dest="cmd", required=True)

    def add_docs(p: argparse.ArgumentParser) -> None:
        p.add_argument(
            "--doc", dest="docs", action="append", required=True,
            help="Document to index (repeatable): pdf, docx, ppt/pptx, txt or any text-like file",
        )
        p.add_argument("--chunk-size", type=int, default=None, help="Characters per chunk (default 500)")

    def add_retrieval(p: argparse.ArgumentParser) -> None:
        p.add_argument("--k", type=int, default=None, help="Number of results (default 5)")
        p.add_argument(
            "--strategy",
            choices=[s.value for s in SearchStrategy],
            default=None,
            help="semantic = cosine only; hybrid = 0.7 cosine + 0.3 keyword overlap",
        )

    # -----------------------
    # search
    # -----------------------
    p_s = sub.add_parser("search", help="Rank document chunks against a query")
    p_s.add_argument("question", type=str)
    add_docs(p_s)
    add_retrieval(p_s)

    # -----------------------
    # ask
    # -----------------------
    p_a = sub.add_parser("ask", help="Answer a question with the retrieved chunks as context")
    p_a.add_argument("question", type=str)
    add_docs(p_a)
    add_retrieval(p_a)
    p_a.add_argument("--model", default=None, help="Model name (e.g., llama3.1:8b)")
    p_a.add_argument(
        "--endpoint",
        default=None,
        help="Backend endpoint. Precedence: --endpoint > OLLAMA_HOST env > http://localhost:11434",
    )
    p_a.add_argument(
        "--allow-remote",
        action="store_true",
        help="Override offline guard to allow non-local endpoints",
    )
    p_a.add_argument(
        "--threshold", type=float, default=None, help="Minimum similarity for context (default 0.1)"
    )

    # -----------------------
    # stats
    # -----------------------
    p_st = sub.add_parser("stats", help="Index documents and print index statistics")
    add_docs(p_st)
    return parser


def _apply_overrides(cfg: AppConfig, args: argparse.Namespace) -> AppConfig:
    if args.chunk_size is not None:
        cfg.ingest.chunk_size = args.chunk_size
    if getattr(args, "k", None) is not None:
        cfg.retrieval.top_k = args.k
    if getattr(args, "strategy", None):
        cfg.retrieval.strategy = SearchStrategy(args.strategy)
    if getattr(args, "threshold", None) is not None:
        cfg.retrieval.similarity_threshold = args.threshold
    if getattr(args, "model", None):
        cfg.llm.model = args.model
    if getattr(args, "endpoint", None):
        cfg.llm.endpoint = args.endpoint
    if getattr(args, "allow_remote", False):
        cfg.llm.offline = False
    # Assignment bypasses field constraints; validate the merged result.
    try:
        return AppConfig.model_validate(cfg.model_dump())
    except ValidationError as e:
        raise ConfigError(f"Invalid option: {e}") from e


def _print_report(report: IngestReport) -> None:
    for d in report.documents:
        if d.status == "error":
            print(f"  [error] {d.path}: {d.error}")
        else:
            print(f"  [{d.status}] {d.source}: {d.chunks} chunk(s)")


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    # ----- logging setup -----
    if args.verbose and args.quiet:
        print("Cannot use --verbose and --quiet together.", file=sys.stderr)
        return 2
    if args.verbose:
        setup_logging(level="DEBUG", json_logs=args.log_json)
    elif args.quiet:
        setup_logging(level="WARNING", json_logs=args.log_json)
    else:
        setup_logging(level=None, json_logs=args.log_json)

    logger.debug("CLI args parsed: %s", vars(args))

    registry = SessionRegistry()
    try:
        cfg = _apply_overrides(load_config(args.config), args)
        session_id = uuid.uuid4().hex
        with build_feed(cfg, registry) as feed:
            report = feed.ingest(session_id, args.docs)
        if report.documents and len(report.failed) == len(report.documents):
            logger.error("No document could be read.")
            _print_report(report)
            return 2

        index = registry.get_or_create(session_id)
        if args.cmd == "stats":
            _print_report(report)
            print(index.get_stats())

        elif args.cmd == "search":
            results = index.search(
                args.question, top_k=cfg.retrieval.top_k, strategy=cfg.retrieval.strategy
            )
            if not results:
                print("No results.")
            for i, r in enumerate(results, start=1):
                print(f"[{i}] {r.format()}")
                print("---")

        elif args.cmd == "ask":
            assistant = build_assistant(cfg, registry)
            answer = assistant.ask(session_id, args.question)
            print("\n=== ANSWER ===")
            print(answer.text)
            print("\n=== SOURCES ===")
            if answer.sources:
                for s in answer.sources:
                    print(f"- {s}")
            else:
                print("(none: answered from general knowledge)")
            logger.debug("timers_ms: %s", answer.timers_ms)

        else:
            parser.print_help()
            return 2
    except LexicalRagError as e:
        logger.error("%s", e)
        return 2
    finally:
        registry.clear_all()
    return 0


if __name__ == "__main__":
    sys.exit(main())
