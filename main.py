"""Command-line entry point for CardRec: launch the UI, build the store, or ask."""

from __future__ import annotations

import argparse
import json
import subprocess
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from cardrec import (
    CardLoader,
    CardRecError,
    EmbeddingService,
    RecommendationPipeline,
    build_embeddings_store,
    save_store,
)
from cardrec.config import config

if TYPE_CHECKING:
    from collections.abc import Sequence
    from logging import Logger

PROJECT_ROOT = Path(__file__).resolve().parent
DEFAULT_APP = PROJECT_ROOT / "app.py"


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Build the CLI parser and read command-line arguments."""  # noqa: DOC201
    parser = argparse.ArgumentParser(
        description="Credit card recommendation chatbot.",
    )
    subparsers = parser.add_subparsers(dest="command")

    run_parser = subparsers.add_parser("run", help="Launch the Streamlit web UI.")
    run_parser.add_argument(
        "--app",
        type=Path,
        default=DEFAULT_APP,
        help="Path to the Streamlit script (default: app.py).",
    )
    run_parser.add_argument(
        "--port",
        type=int,
        default=8501,
        help="Port for the Streamlit server (default: 8501).",
    )
    run_parser.add_argument(
        "--address",
        default="localhost",
        help="Bind address for the Streamlit server (default: localhost).",
    )
    run_parser.add_argument(
        "--show",
        dest="headless",
        action="store_false",
        help="Open Streamlit in a browser window instead of headless mode.",
    )
    run_parser.set_defaults(headless=True)

    embed_parser = subparsers.add_parser(
        "embed", help="Generate the card embeddings store."
    )
    embed_parser.add_argument(
        "--csv",
        type=Path,
        default=None,
        help="Card CSV file (default: CARDS_CSV_PATH).",
    )
    embed_parser.add_argument(
        "--url",
        default=None,
        help="Published CSV URL, overrides --csv (default: CARDS_SHEET_URL).",
    )
    embed_parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Store file to write (default: EMBEDDINGS_STORE_PATH).",
    )

    ask_parser = subparsers.add_parser("ask", help="Answer one question as JSON.")
    ask_parser.add_argument("question", help="Question about credit cards.")
    ask_parser.add_argument(
        "--top-k",
        type=int,
        default=None,
        help="Candidate cards passed to the model (default: TOP_N_CARDS).",
    )

    args = parser.parse_args(argv)
    if args.command is None:
        args = parser.parse_args(["run", *(argv or [])])
    return args


def build_streamlit_command(
    script_path: Path,
    *,
    port: int,
    headless: bool,
    address: str,
) -> list[str]:
    """Construct the streamlit CLI invocation."""  # noqa: DOC201
    return [
        sys.executable,
        "-m",
        "streamlit",
        "run",
        str(script_path),
        "--server.port",
        str(port),
        "--server.address",
        address,
        "--server.headless",
        "true" if headless else "false",
    ]


def run_streamlit(command: Sequence[str], logger: Logger) -> int:
    """Execute the configured streamlit command and return its exit code."""  # noqa: DOC201
    try:
        result = subprocess.run(
            command,
            check=False,
            cwd=PROJECT_ROOT,
        )
    except KeyboardInterrupt:
        logger.info("CardRec stopped by user")
        return 0
    except OSError:
        logger.exception("Unable to launch Streamlit")
        return 1
    return result.returncode


def run_ui(args: argparse.Namespace, logger: Logger) -> int:
    """Launch the Streamlit UI and return its exit code."""  # noqa: DOC201
    script_path = (
        args.app if args.app.is_absolute() else (PROJECT_ROOT / args.app)
    ).resolve()
    if not script_path.exists():
        logger.error("Streamlit script not found: %s", script_path)
        return 1

    logger.info(
        "Starting CardRec Streamlit app at http://%s:%s (headless=%s)",
        args.address,
        args.port,
        args.headless,
    )

    command = build_streamlit_command(
        script_path,
        port=args.port,
        headless=args.headless,
        address=args.address,
    )

    return_code = run_streamlit(command, logger)
    if return_code != 0:
        logger.error("Streamlit exited with status %s", return_code)
    return return_code


def run_embed(args: argparse.Namespace, logger: Logger) -> int:
    """Load the card corpus, embed it, and write the store."""  # noqa: DOC201
    try:
        cards = CardLoader.load(file_path=args.csv, url=args.url)
        store = build_embeddings_store(cards, EmbeddingService())
        path = save_store(store, args.output)
    except (CardRecError, OSError, ValueError):
        logger.exception("Embedding generation failed")
        return 1

    logger.info("Wrote %d card embeddings to %s", len(store), path)
    return 0


def run_ask(args: argparse.Namespace, logger: Logger) -> int:
    """Answer one question and print the response JSON."""  # noqa: DOC201
    try:
        pipeline = RecommendationPipeline(top_k=args.top_k)
        response = pipeline.recommend(args.question)
    except (CardRecError, ValueError):
        logger.exception("Recommendation request failed")
        return 1

    print(json.dumps(response.to_dict(), indent=2))  # noqa: T201
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Validate configuration and dispatch the selected command."""  # noqa: DOC201
    args = parse_args(argv)

    config.setup_logging()
    logger = config.get_logger(__name__)

    try:
        config.validate()
    except ValueError:
        logger.exception("Configuration invalid")
        return 1

    if args.command == "embed":
        return run_embed(args, logger)
    if args.command == "ask":
        return run_ask(args, logger)
    return run_ui(args, logger)


if __name__ == "__main__":
    sys.exit(main())
