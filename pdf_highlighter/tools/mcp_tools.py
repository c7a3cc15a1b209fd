import json
import logging
from pathlib import Path
from typing import Optional

from mcp.server.fastmcp import FastMCP

from pdf_highlighter.core import paths as _paths
from pdf_highlighter.core.errors import HighlighterError
from pdf_highlighter.core.extract import count_highlightable_fields, parse_highlight_json
from pdf_highlighter.core.page_range import parse_page_range
from pdf_highlighter.core.paths import DATA_EXTENSIONS, DOCUMENT_EXTENSIONS, find_file, resolve_output_path
from pdf_highlighter.core.projection import to_pixels
from pdf_highlighter.core.sample import sample_highlight_json
from pdf_highlighter.core.session import ViewerSession, ZoomSettings
from pdf_highlighter.backends.pypdf2_backend import write_annotated_copy

logger = logging.getLogger(__name__)

mcp = FastMCP("PDF Highlighter")

session = ViewerSession()

IMAGE_EXTENSIONS = [".png"]


def configure_session(zoom: ZoomSettings) -> None:
    session.zoom_settings = zoom
    session.set_zoom(session.scale)


def _dumps(data) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


def _error(tool: str, e: Exception) -> str:
    logger.error(f"Error in tool {tool}: {e}")
    return f"Error: {e}"


# ---------- Document ----------
@mcp.tool()
async def open_document(file_path: str) -> str:
    """Open a PDF for viewing. Replaces (and closes) any document already open.

    Parameters
    ----------
    file_path: str
        Filename (relative) or absolute path to the PDF. The file must reside within the configured accessible directories.
    """
    path = find_file(file_path, DOCUMENT_EXTENSIONS)
    if not path:
        return (
            "Error: Could not find file '{file}'. Provide an absolute path or place the file within the configured accessible directories."
        ).format(file=file_path)
    try:
        await session.load_document(path, name=path.name)
    except HighlighterError as e:
        return _error("open_document", e)
    return _dumps(session.state_summary())


@mcp.tool()
async def close_document() -> str:
    """Close the open PDF. Highlights stay in the session."""
    session.close()
    return _dumps(session.state_summary())


# ---------- Highlight data ----------
@mcp.tool()
async def sample_highlight_data() -> str:
    """Return a sample pay-stub highlight JSON to start from."""
    return sample_highlight_json()


@mcp.tool()
async def apply_highlights(json_text: str = "", file_path: Optional[str] = None) -> str:
    """Import field positions as highlights, replacing previously imported ones.

    Parameters
    ----------
    json_text: str
        JSON with a `pay_stubs` object whose fields carry `position` records.
    file_path: Optional[str]
        Alternatively, a `.json` file within the accessible directories.
    """
    if file_path:
        path = find_file(file_path, DATA_EXTENSIONS)
        if not path:
            return f"Error: Could not find file '{file_path}'."
        try:
            json_text = path.read_text(encoding="utf-8")
        except (OSError, ValueError) as e:
            return _error("apply_highlights", e)
    try:
        data = parse_highlight_json(json_text, session.container)
        imported = session.apply_highlight_data(data)
    except HighlighterError as e:
        return _error("apply_highlights", e)

    fields = count_highlightable_fields(data, session.container)
    report = session.last_report or {}
    return _dumps({
        "message": f"JSON data successfully processed with {fields} highlightable fields",
        "imported": imported,
        "invalid": report.get("invalid", []),
    })


# ---------- Navigation ----------
@mcp.tool()
async def go_to_page(page: str = "next") -> str:
    """Change the current page: `first`, `last`, `next`, `prev`, or a 1-based page number."""
    try:
        await session.go_to_page(page)
    except (HighlighterError, ValueError) as e:
        return _error("go_to_page", e)
    return _dumps(session.state_summary())


@mcp.tool()
async def zoom(action: str = "in", scale: Optional[float] = None) -> str:
    """Zoom the page: action `in`, `out`, `reset`, or `set` (with `scale`).
    The scale is clamped to the configured zoom range."""
    a = action.strip().lower()
    try:
        if a == "in":
            session.zoom_in()
        elif a == "out":
            session.zoom_out()
        elif a == "reset":
            session.set_zoom(1.0)
        elif a == "set" and scale is not None:
            session.set_zoom(scale)
        else:
            return f"Error: Unknown zoom action '{action}'."
    except ValueError as e:
        return _error("zoom", e)
    return _dumps({"scale": session.scale, "range": [session.zoom_settings.minimum, session.zoom_settings.maximum]})


# ---------- Selection ----------
@mcp.tool()
async def set_selection_mode(enabled: bool) -> str:
    """Turn selection mode on or off. Turning it off drops any drag in progress."""
    return _dumps({"selection_mode": session.set_selection_mode(enabled)})


@mcp.tool()
async def select_region(x0: float, y0: float, x1: float, y1: float) -> str:
    """Drag a rectangle on the current page from (x0, y0) to (x1, y1).

    Coordinates are pixels relative to the page's top-left corner at the
    current zoom, as in the rendered image. Selections smaller than 0.5% of
    the page on either axis are discarded.
    """
    if not session.selection_mode:
        return "Error: Selection mode is off. Call set_selection_mode(true) first."
    if not session.pointer_down(x0, y0):
        return "Error: No page is displayed."
    session.pointer_move(x1, y1)
    highlight = session.pointer_up()
    if highlight is None:
        return "Selection too small; no highlight created."
    return _dumps(highlight)


# ---------- Highlights ----------
@mcp.tool()
async def list_highlights(page_range: Optional[str] = "current") -> str:
    """List highlights per page.

    `page_range`: `current` (default), `all`, `first`, `last`, `N`, or `S-E`.
    Highlights on the current page also carry their pixel rectangle at the current zoom.
    """
    total = session.page_count
    try:
        if total:
            pages = parse_page_range(total, page_range, session.current_page)
        else:
            pages = sorted({h["page_index"] for h in session.store})
    except ValueError as e:
        return _error("list_highlights", e)

    viewport = session.current_viewport()
    out = []
    for page_index in pages:
        items = []
        for h in session.store.by_page(page_index):
            item = dict(h)
            if viewport is not None and page_index == session.current_page:
                item["pixels"] = to_pixels(h["position"], viewport, session.scale)
            items.append(item)
        if items:
            out.append({"page_number": page_index + 1, "highlights": items})
    return _dumps({"scale": session.scale, "pages": out})


@mcp.tool()
async def describe_highlight(highlight_id: str) -> str:
    """Tooltip details for one highlight: text, page, position and size in percent, note."""
    info = session.describe_highlight(highlight_id)
    if info is None:
        return f"Error: No highlight with id '{highlight_id}'."
    return _dumps(info)


@mcp.tool()
async def clear_user_highlights() -> str:
    """Remove every highlight drawn in this session. Imported highlights stay."""
    return _dumps({"removed": session.clear_user_highlights()})


@mcp.tool()
async def export_highlights(output_path: Optional[str] = None) -> str:
    """Export user-drawn highlights as fractional positions with 1-based page numbers.

    If `output_path` is given (a `.json` file inside an accessible directory), the export is also written there.
    """
    data = session.export_user_highlights()
    if not data:
        return "No user highlights to export."
    if output_path:
        path = resolve_output_path(output_path, DATA_EXTENSIONS)
        if not path:
            return f"Error: Cannot write to '{output_path}'."
        try:
            session.write_user_highlights(path)
        except OSError as e:
            return _error("export_highlights", e)
    return _dumps(data)


# ---------- Output ----------
@mcp.tool()
async def render_page(output_path: str) -> str:
    """Render the current page with its highlights to a PNG file inside an accessible directory."""
    path = resolve_output_path(output_path, IMAGE_EXTENSIONS)
    if not path:
        return f"Error: Cannot write to '{output_path}'."
    try:
        current = await session.render_current_page(path)
    except (HighlighterError, ValueError) as e:
        return _error("render_page", e)
    except Exception as e:
        logger.error(f"Rendering failed: {e}")
        return f"Error: {e}"
    if not current:
        return "Render superseded by a newer request; image discarded."
    return _dumps({"image": str(path), "page_number": session.current_page + 1, "scale": session.scale})


@mcp.tool()
async def save_annotated_pdf(output_path: str, include: str = "all") -> str:
    """Write a copy of the open PDF with highlights as rectangle annotations.

    `include`: `all`, `imported` or `user`.
    """
    if session.document is None or not isinstance(session.source, (str, Path)):
        return "Error: No document file is open."
    path = resolve_output_path(output_path, DOCUMENT_EXTENSIONS)
    if not path:
        return f"Error: Cannot write to '{output_path}'."
    if Path(path) == Path(session.source):
        return "Error: Refusing to overwrite the open document."

    selected = {
        "all": list(session.store),
        "imported": session.store.imported,
        "user": session.store.user_highlights,
    }.get(include.strip().lower())
    if selected is None:
        return f"Error: Unknown include '{include}'."
    try:
        written = write_annotated_copy(session.source, path, selected)
    except Exception as e:
        return _error("save_annotated_pdf", e)
    return _dumps({"file": str(path), "annotations": written})


@mcp.tool()
async def show_viewer_state() -> str:
    """Return the viewer state and configuration as JSON."""
    info = session.state_summary()
    info["accessible_directories"] = _paths.SEARCH_DIRECTORIES
    info["max_file_size_mb"] = _paths.MAX_FILE_SIZE // (1024 * 1024)
    info["zoom_range"] = [session.zoom_settings.minimum, session.zoom_settings.maximum]
    info["zoom_step"] = session.zoom_settings.step
    return _dumps(info)
