import argparse
import logging
import os
from pathlib import Path
from typing import List, Optional, Sequence

logger = logging.getLogger(__name__)

# Limits and filters
MAX_FILE_SIZE = 100 * 1024 * 1024  # 100MB
DOCUMENT_EXTENSIONS = [".pdf"]
DATA_EXTENSIONS = [".json"]

# Zoom defaults (scale factor of the rendered page)
DEFAULT_MIN_ZOOM = 0.5
DEFAULT_MAX_ZOOM = 3.0
DEFAULT_ZOOM_STEP = 0.2

# Default search directories (used when no args are provided)
DEFAULT_SEARCH_DIRECTORIES = [
    os.path.expanduser("~/Downloads"),
    os.path.expanduser("~/Desktop"),
    os.path.expanduser("~/Documents"),
    os.getcwd(),
]

# Actual configured directories (initialized at runtime)
SEARCH_DIRECTORIES: List[str] = []


def parse_arguments(argv: Optional[Sequence[str]] = None):
    """Parse CLI arguments: accessible directories, limits, zoom range and logging."""
    parser = argparse.ArgumentParser(
        description="PDF Highlighter MCP Server: overlay field positions on PDF pages and draw new ones",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "\nExamples:\n"
            "  python main.py ~/Downloads ~/Documents\n"
            "  python main.py --allow-dir ~/Work/paystubs --log-level DEBUG\n"
            "  python main.py ~/Downloads --min-zoom 0.25 --max-zoom 4 --zoom-step 0.25\n"
        ),
    )

    # 1) Positional directories
    parser.add_argument(
        "directories",
        nargs="*",
        help="Accessible directories for PDFs, highlight JSON and exports (space-separated)",
    )

    # 2) Repeated --allow-dir option
    parser.add_argument(
        "--allow-dir",
        action="append",
        dest="allowed_dirs",
        help="Add an allowed directory (can be used multiple times)",
    )

    parser.add_argument(
        "--max-file-size",
        type=int,
        default=100 * 1024 * 1024,
        help="Maximum file size in bytes (default: 100MB)",
    )

    parser.add_argument("--min-zoom", type=float, default=DEFAULT_MIN_ZOOM, help="Smallest zoom factor (default: 0.5)")
    parser.add_argument("--max-zoom", type=float, default=DEFAULT_MAX_ZOOM, help="Largest zoom factor (default: 3.0)")
    parser.add_argument("--zoom-step", type=float, default=DEFAULT_ZOOM_STEP, help="Zoom in/out increment (default: 0.2)")

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)",
    )

    args = parser.parse_args(argv)
    if not 0 < args.min_zoom <= args.max_zoom:
        parser.error("--min-zoom must be positive and not larger than --max-zoom")
    if args.zoom_step <= 0:
        parser.error("--zoom-step must be positive")
    return args


def _is_within(base: str, target: str) -> bool:
    base = os.path.join(os.path.realpath(base), "")  # ensure trailing separator
    target = os.path.realpath(target)
    return target.startswith(base) or target == base[:-1]


def _real(path: str) -> str:
    return os.path.realpath(os.path.abspath(os.path.expanduser(path)))


def setup_search_directories(args) -> None:
    """Configure SEARCH_DIRECTORIES and MAX_FILE_SIZE from parsed args.
    Falls back to DEFAULT_SEARCH_DIRECTORIES when none are provided.
    """
    global MAX_FILE_SIZE

    MAX_FILE_SIZE = int(args.max_file_size)

    provided: List[str] = []
    if getattr(args, "directories", None):
        provided.extend(args.directories)
    if getattr(args, "allowed_dirs", None):
        provided.extend(args.allowed_dirs)

    validated: List[str] = []
    for d in provided:
        real_path = _real(d)
        if not os.path.isdir(real_path):
            logger.warning(f"Not a directory, skipped: {d} -> {real_path}")
            continue
        if not os.access(real_path, os.R_OK):
            logger.warning(f"Unreadable directory, skipped: {d} -> {real_path}")
            continue
        validated.append(real_path)

    if not validated:
        if provided:
            logger.warning("No valid directories from arguments; falling back to defaults.")
        else:
            logger.info("Using default search directories.")
        validated = [_real(d) for d in DEFAULT_SEARCH_DIRECTORIES]

    # mutate in place so other modules see the update
    SEARCH_DIRECTORIES.clear()
    SEARCH_DIRECTORIES.extend(validated)


def validate_and_resolve_path(file_path: str, extensions: Sequence[str] = DOCUMENT_EXTENSIONS) -> Optional[Path]:
    """Validate a candidate file path and return an absolute Path if allowed and safe."""
    real_path = _real(file_path)

    # Must be within one of the allowed directories; block traversal
    is_safe = any(_is_within(allowed, real_path) for allowed in SEARCH_DIRECTORIES)
    if not is_safe or ".." in Path(file_path).parts:
        logger.warning(f"Security risk detected (outside allowed directories): {file_path}")
        return None

    resolved = Path(real_path)
    if not resolved.is_file():
        return None
    if resolved.suffix.lower() not in extensions:
        logger.warning(f"Disallowed file extension: {file_path}")
        return None
    if resolved.stat().st_size > MAX_FILE_SIZE:
        logger.warning(f"File too large: {file_path} ({resolved.stat().st_size} bytes)")
        return None
    return resolved


def find_file(file_name: str, extensions: Sequence[str] = DOCUMENT_EXTENSIONS) -> Optional[Path]:
    """Resolve an absolute path or search by name/substring within the configured directories."""
    if os.path.isabs(file_name) or file_name.startswith("~"):
        return validate_and_resolve_path(file_name, extensions)

    for directory in SEARCH_DIRECTORIES:
        dir_path = Path(directory)
        # Direct match
        path = validate_and_resolve_path(str(dir_path / file_name), extensions)
        if path:
            return path
        # Fuzzy match
        for ext in extensions:
            for candidate in sorted(dir_path.glob(f"*{ext}")):
                if file_name.lower() in candidate.name.lower():
                    path = validate_and_resolve_path(str(candidate), extensions)
                    if path:
                        return path

    logger.warning(f"File not found: {file_name}")
    return None


def resolve_output_path(file_path: str, extensions: Sequence[str]) -> Optional[Path]:
    """Validate a path to write to: inside an allowed directory, with an allowed
    extension. A bare file name lands in the first allowed directory."""
    if not SEARCH_DIRECTORIES:
        return None
    if not (os.path.isabs(file_path) or file_path.startswith("~")):
        file_path = os.path.join(SEARCH_DIRECTORIES[0], file_path)
    real_path = _real(file_path)
    if not any(_is_within(allowed, real_path) for allowed in SEARCH_DIRECTORIES) or ".." in Path(file_path).parts:
        logger.warning(f"Refusing to write outside allowed directories: {file_path}")
        return None
    resolved = Path(real_path)
    if resolved.suffix.lower() not in extensions:
        logger.warning(f"Disallowed output extension: {file_path}")
        return None
    if not resolved.parent.is_dir():
        return None
    return resolved
