"""MCP server exposing ref reconciliation as a tool."""

import logging
import sys
from typing import Any, Dict, List, Optional

from mcp.server.fastmcp import FastMCP

from .config import Config, load_configuration, validate_configuration, parse_categories, parse_mode
from .errors import error_handler
from .git_refs.error_types import RefScoutError
from .git_refs.reconciler import reconcile
from .git_refs.report import render, render_json


def setup_logging(config: Config) -> None:
    """Setup logging on stderr; stdout is reserved for reports and the MCP transport."""
    class StructuredFormatter(logging.Formatter):
        def format(self, record):
            # Add structured data if available
            if hasattr(record, 'operation'):
                record.msg = f"[{record.operation}] {record.msg}"
            return super().format(record)

    level = getattr(logging, config.effective_log_level)

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
        stream=sys.stderr
    )

    loggers = [
        'refscout.init',
        'refscout.batch',
        'refscout.config',
        'refscout.git_refs',
        'refscout.error_handler',
    ]

    formatter = StructuredFormatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    for logger_name in loggers:
        logger = logging.getLogger(logger_name)
        logger.setLevel(level)

        # Add stderr handler if not already present
        if not logger.handlers:
            handler = logging.StreamHandler(sys.stderr)
            handler.setFormatter(formatter)
            logger.addHandler(handler)
            logger.propagate = False


def find_local_only_refs_tool(
    config: Config,
    repository_path: str,
    categories: Optional[List[str]] = None,
    mode: Optional[str] = None,
    limit: Optional[int] = None,
    include_workspace: bool = False
) -> Dict[str, Any]:
    """Run one reconciliation for the MCP tool and wrap the outcome."""
    context = {"repository_path": repository_path}

    try:
        selected = parse_categories(categories) if categories else None
        selected_mode = parse_mode(mode) if mode else None
        if limit is not None and limit < 0:
            raise ValueError("limit must be non-negative")
    except ValueError as e:
        return error_handler.handle_validation_error(e, context).to_dict()

    # An omitted limit keeps the configured one
    overrides = {} if limit is None else {"limit": limit}
    try:
        report = reconcile(
            repository_path,
            categories=selected,
            mode=selected_mode,
            config=config,
            include_workspace=include_workspace,
            **overrides
        )
    except RefScoutError as e:
        return error_handler.handle_reconcile_error(e, context).to_dict()

    data = render_json(report)
    data["text"] = render(report)
    return error_handler.create_success_response("find_local_only_refs", data, context)


def register_tools(server: FastMCP, server_config: Config) -> None:
    """Register MCP tools with the server instance."""

    @server.tool()
    def find_local_only_refs(
        repository_path: str,
        categories: Optional[List[str]] = None,
        mode: Optional[str] = None,
        limit: Optional[int] = None,
        include_workspace: bool = False
    ) -> dict:
        """
        List local git branches, tags and stashes that no remote holds.

        Checks the repository's 'upstream' and 'origin' remotes. A ref found on
        any of them is considered pushed. Nothing is deleted; each local-only ref
        comes with the command that would delete it.

        Args:
            repository_path: Path inside the git working tree to inspect
            categories: Subset of ["branches", "tags", "stashes"] (default: all)
            mode: "exact" queries the remotes over the network, "heuristic" uses
                  only local tracking refs and history and may over-report
            limit: Check only the first N refs of each category
            include_workspace: Also list uncommitted changes and untracked files

        Returns:
            Dictionary with the per-category local-only refs, warnings about
            unreachable remotes and the rendered text report
        """
        return find_local_only_refs_tool(
            server_config, repository_path, categories, mode, limit, include_workspace
        )

    logging.getLogger('refscout.init').info("MCP tools registered successfully")


def initialize_server(server_config: Optional[Config] = None) -> FastMCP:
    """Initialize MCP server with stdio transport."""
    server_config = server_config or load_configuration()
    setup_logging(server_config)
    init_logger = logging.getLogger('refscout.init')

    for issue in validate_configuration(server_config):
        init_logger.warning(issue[len("WARNING: "):] if issue.startswith("WARNING: ") else issue)

    server = FastMCP(
        "refscout",
        log_level=server_config.effective_log_level
    )
    register_tools(server, server_config)
    init_logger.info("refscout MCP server initialized")
    return server


def main():
    """Entry point for the refscout MCP server."""
    try:
        server = initialize_server()
        server.run(transport="stdio")
    except KeyboardInterrupt:
        logging.getLogger('refscout.init').info("Server stopped by user (Ctrl+C)")
    except ValueError as e:
        # Configuration errors from the environment
        logging.basicConfig(level=logging.ERROR, stream=sys.stderr)
        logging.getLogger('refscout.init').critical(f"Server failed to start: {e}")
        sys.exit(1)
