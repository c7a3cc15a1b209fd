#!/usr/bin/env python3
"""
PDF Highlighter MCP Server
Overlays field positions from extraction JSON on PDF pages, lets the client
draw new highlight rectangles and exports them back as fractional positions.
"""

import logging

from pdf_highlighter.core import paths as _paths
from pdf_highlighter.core.paths import parse_arguments, setup_search_directories
from pdf_highlighter.core.session import ZoomSettings
from pdf_highlighter.tools.mcp_tools import configure_session, mcp, session

# --- Basic Configuration ---
# stderr only: stdout carries the MCP stdio transport
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger("PDFHighlighter")


def main():
    args = parse_arguments()

    logging.getLogger().setLevel(getattr(logging, args.log_level))

    setup_search_directories(args)
    configure_session(ZoomSettings(minimum=args.min_zoom, maximum=args.max_zoom, step=args.zoom_step))

    logger.info("Starting PDF Highlighter MCP Server...")
    logger.info(f"Accessible directories: {_paths.SEARCH_DIRECTORIES}")
    logger.info(f"Maximum file size: {_paths.MAX_FILE_SIZE // (1024 * 1024)} MB")
    logger.info(f"Zoom range: {args.min_zoom}-{args.max_zoom} (step {args.zoom_step})")

    try:
        mcp.run()
    finally:
        session.close()


if __name__ == "__main__":
    main()
