#!/usr/bin/env python3
"""Semantic memory: store text as embeddings and search it by meaning.

This CLI tool adds, searches, forgets and clears memories held in a
ChromaDB collection.

Commands:
    add         Embed and store a piece of text
    search      Find stored text similar to a query
    forget      Remove one memory by id
    clear       Remove every memory (requires --yes)
    status      Show configuration and collection size

Examples:
    python main.py add "the sky is blue" --meta tag=fact
    python main.py search "sky color" --limit 1
    python main.py forget 3f9a0c1b2d4e
    python main.py clear --yes
    python main.py status

Environment:
    See config.py for all configuration options
"""

import argparse
import asyncio
import json
import logging
import sys
import uuid

from config import Config
from memory import SearchOptions, create_vector_store
from observability.logging import set_op_context, setup_logging
from observability.tracing import setup_tracing

logger = logging.getLogger(__name__)


def parse_metadata(pairs: list[str] | None) -> dict:
    """Parse key=value pairs into a metadata dict.

    Values are decoded as JSON when possible (numbers, booleans, null,
    objects) and kept as plain strings otherwise.

    Args:
        pairs: Strings of the form key=value

    Returns:
        Metadata dictionary

    Raises:
        ValueError: If a pair has no '=' or an empty key
    """
    metadata = {}
    for pair in pairs or []:
        key, sep, raw = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"Invalid metadata '{pair}' - expected key=value")
        try:
            metadata[key] = json.loads(raw)
        except json.JSONDecodeError:
            metadata[key] = raw
    return metadata


def cmd_add(args: argparse.Namespace, config: Config) -> int:
    """Add a memory and print the stored item.

    Args:
        args: Parsed command line arguments
        config: Application configuration

    Returns:
        Exit code (0 for success)
    """
    metadata = parse_metadata(args.meta)
    store = create_vector_store(config)

    item = asyncio.run(store.add(args.content, metadata))

    output = item.model_dump()
    if not args.with_embedding:
        output.pop("embedding")
    print(json.dumps(output, indent=2, ensure_ascii=False))
    return 0


def cmd_search(args: argparse.Namespace, config: Config) -> int:
    """Search memories and print ranked results.

    Args:
        args: Parsed command line arguments
        config: Application configuration

    Returns:
        Exit code (0 for success)
    """
    limit = args.limit if args.limit is not None else config.search_limit
    store = create_vector_store(config)

    results = asyncio.run(store.search(args.query, SearchOptions(limit=limit)))

    output = [
        {
            "id": r.item.id,
            "score": r.score,
            "content": r.item.content,
            "metadata": r.item.metadata,
        }
        for r in results
    ]
    print(json.dumps(output, indent=2, ensure_ascii=False))
    return 0


def cmd_forget(args: argparse.Namespace, config: Config) -> int:
    """Remove a memory by id.

    Args:
        args: Parsed command line arguments
        config: Application configuration

    Returns:
        Exit code (0 for success)
    """
    store = create_vector_store(config)
    asyncio.run(store.forget(args.id))
    print(json.dumps({"forgotten": args.id}))
    return 0


def cmd_clear(args: argparse.Namespace, config: Config) -> int:
    """Remove every memory in the collection.

    Args:
        args: Parsed command line arguments
        config: Application configuration

    Returns:
        Exit code (0 for success, 1 if not confirmed)
    """
    if not args.yes:
        print("Refusing to clear without --yes", file=sys.stderr)
        return 1

    store = create_vector_store(config)
    asyncio.run(store.clear())
    print(json.dumps({"cleared": config.collection_name}))
    return 0


def cmd_status(args: argparse.Namespace, config: Config) -> int:
    """Display configuration and collection statistics.

    Args:
        args: Parsed command line arguments
        config: Application configuration

    Returns:
        Exit code (0 for success)
    """
    store = create_vector_store(config)
    count = asyncio.run(store.count())

    status = {
        "config": {
            "embedding_model": config.embedding_model,
            "embedding_dim": config.embedding_dim,
            "chroma_mode": config.chroma_mode,
            "vector_db_path": str(config.vector_db_path),
            "collection": config.collection_name,
            "enable_logfire": config.enable_logfire,
        },
        "collection": {
            "name": config.collection_name,
            "items": count,
        },
    }

    print(json.dumps(status, indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for all commands."""
    parser = argparse.ArgumentParser(
        description="Semantic memory: embed, store and search text",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # add command
    add_parser = subparsers.add_parser("add", help="Store a piece of text")
    add_parser.add_argument("content", help="Text to remember")
    add_parser.add_argument(
        "--meta",
        action="append",
        metavar="KEY=VALUE",
        help="Metadata entry (repeatable); values are parsed as JSON when possible",
    )
    add_parser.add_argument(
        "--with-embedding",
        action="store_true",
        help="Include the embedding vector in the output",
    )

    # search command
    search_parser = subparsers.add_parser("search", help="Search stored text")
    search_parser.add_argument("query", help="Search query")
    search_parser.add_argument(
        "-n", "--limit",
        type=int,
        help="Maximum number of results (default: config SEARCH_LIMIT)",
    )

    # forget command
    forget_parser = subparsers.add_parser("forget", help="Remove a memory by id")
    forget_parser.add_argument("id", help="Memory id returned by add")

    # clear command
    clear_parser = subparsers.add_parser("clear", help="Remove all memories")
    clear_parser.add_argument(
        "--yes",
        action="store_true",
        help="Confirm deleting every memory in the collection",
    )

    # status command
    subparsers.add_parser("status", help="Show configuration and statistics")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Args:
        argv: Command line arguments (default: sys.argv[1:])

    Returns:
        Exit code
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    config = Config.load()

    error = config.validate()
    if error:
        print(f"Configuration error: {error}", file=sys.stderr)
        return 1

    setup_logging(config, verbose=args.verbose)
    setup_tracing(
        enabled=config.enable_logfire,
        service_name="semantic-memory",
        token=config.logfire_token,
    )
    set_op_context(uuid.uuid4().hex[:8])

    commands = {
        "add": cmd_add,
        "search": cmd_search,
        "forget": cmd_forget,
        "clear": cmd_clear,
        "status": cmd_status,
    }

    if args.command in commands:
        try:
            return commands[args.command](args, config)
        except KeyboardInterrupt:
            logger.info("Stopped by user (Ctrl+C)")
            return 130
        except Exception as e:
            logger.error("Command failed | cmd=%s error=%s", args.command, e, exc_info=True)
            print(f"Error: {e}", file=sys.stderr)
            return 1
    else:
        parser.print_help()
        return 0


if __name__ == "__main__":
    sys.exit(main())
