"""Command-line interface for Mail Reviewer.

This module provides the main entry point for the CLI application.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

import structlog

from mail_reviewer import __version__
from mail_reviewer.agent import QueryOrchestrator
from mail_reviewer.config import RetrievalStrategyName, Settings, get_settings
from mail_reviewer.corpus import CorpusRepository, CorpusSnapshot
from mail_reviewer.exceptions import MailReviewerError
from mail_reviewer.models import QueryAnswer
from mail_reviewer.utils import configure_logging

logger = structlog.get_logger()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mail-reviewer", description="Mail Reviewer")
    subparsers = parser.add_subparsers(dest="command", required=True)

    convert_parser = subparsers.add_parser(
        "convert",
        help="Normalize a folder or .zip of emails/attachments into JSONL records",
    )
    convert_parser.add_argument("source", type=Path, help="Folder or .zip archive")
    convert_parser.add_argument(
        "--output",
        "-o",
        type=Path,
        default=None,
        help="Write JSONL here instead of stdout",
    )

    strategies = [s.value for s in RetrievalStrategyName]

    ask_parser = subparsers.add_parser("ask", help="Ask a question about a corpus")
    ask_parser.add_argument("source", type=Path, help="Folder or .zip archive")
    ask_parser.add_argument("question", help="Free-form question")
    ask_parser.add_argument(
        "--strategy",
        choices=strategies,
        default=None,
        help="Retrieval strategy (default: settings retrieval_strategy)",
    )

    review_parser = subparsers.add_parser("review", help="Summarize a corpus")
    review_parser.add_argument("source", type=Path, help="Folder or .zip archive")
    review_parser.add_argument(
        "--strategy",
        choices=strategies,
        default=None,
        help="Retrieval strategy (default: settings retrieval_strategy)",
    )

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Host interface")
    serve_parser.add_argument("--port", type=int, default=3000, help="Server port")

    return parser


def _load(repo: CorpusRepository, source: Path) -> CorpusSnapshot:
    if source.is_file() and source.suffix.lower() == ".zip":
        return repo.load_archive(source.read_bytes(), source=str(source))
    return repo.load_folder(source)


def _cmd_convert(args: argparse.Namespace, settings: Settings) -> int:
    snapshot = _load(CorpusRepository(settings), args.source)
    jsonl = snapshot.to_jsonl()

    if args.output:
        args.output.write_text(jsonl + "\n" if jsonl else "", encoding="utf-8")
        print(
            f"Wrote {len(snapshot)} records ({snapshot.email_count} emails, "
            f"{snapshot.attachment_count} attachments) to {args.output}"
        )
    elif jsonl:
        print(jsonl)
    return 0


def _print_answer(answer: QueryAnswer) -> None:
    print(answer.answer)
    if answer.sources:
        print("\nSources:")
        for name in answer.sources:
            print(f"- {name}")
    for error in answer.errors:
        print(error, file=sys.stderr)


async def _cmd_query(args: argparse.Namespace, settings: Settings) -> int:
    if args.strategy:
        settings = settings.model_copy(update={"retrieval_strategy": RetrievalStrategyName(args.strategy)})

    repo = CorpusRepository(settings)
    _load(repo, args.source)
    orchestrator = QueryOrchestrator(repo, settings=settings)
    try:
        if args.command == "ask":
            answer = await orchestrator.ask(args.question)
        else:
            answer = await orchestrator.review()
    finally:
        await orchestrator.gateway.aclose()

    _print_answer(answer)
    return 0


def _cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    from mail_reviewer.web.app import app as web_app

    print(f"Mail Reviewer running at http://{args.host}:{args.port}")
    uvicorn.run(web_app, host=args.host, port=args.port, reload=False, log_level="info")
    return 0


def main(args: list[str] | None = None) -> int:
    """Main entry point for the Mail Reviewer CLI.

    Args:
        args: Command-line arguments. If None, uses sys.argv.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    if args is None:
        args = sys.argv[1:]

    settings = get_settings()
    configure_logging(settings.log_level)

    logger.info("mail_reviewer_started", version=__version__, debug=settings.debug)

    parser = _build_parser()
    parsed = parser.parse_args(args)

    try:
        if parsed.command == "convert":
            return _cmd_convert(parsed, settings)
        if parsed.command in ("ask", "review"):
            return asyncio.run(_cmd_query(parsed, settings))
        if parsed.command == "serve":
            return _cmd_serve(parsed)
    except MailReviewerError as e:
        logger.error("command_failed", command=parsed.command, error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1

    logger.error("unknown_command", command=parsed.command)
    return 2


if __name__ == "__main__":
    sys.exit(main())
