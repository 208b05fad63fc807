"""
Vector Exporter - Serializes traced paths to SVG and JSON
"""
from pathlib import Path
from typing import Union, Optional, List, Tuple
from enum import Enum
import json
import logging
import re
import xml.etree.ElementTree as ET

import svgwrite

from ..exceptions import NoEdgesFoundError
from ..vectorization.buffers import parse_hex_color
from ..vectorization.vectorizer import ColoredPath, VectorDocument

logger = logging.getLogger(__name__)

SVG_NS = "http://www.w3.org/2000/svg"

_PATH_TOKEN = re.compile(r"[A-Za-z]|-?\d+(?:\.\d+)?")


class ExportFormat(Enum):
    SVG = "svg"     # Stroke-only path document
    JSON = "json"   # Raw point lists with hex colors


def path_data(points) -> str:
    """'M x0 y0 L x1 y1 ...' for a point sequence"""
    points = list(points)
    if not points:
        raise ValueError("Cannot serialize an empty path")
    (x0, y0), rest = points[0], points[1:]
    commands = [f"M {x0} {y0}"]
    commands.extend(f"L {x} {y}" for x, y in rest)
    return " ".join(commands)


def parse_path_data(d: str) -> List[Tuple[int, int]]:
    """
    Recover the point list from path data written by `path_data`.

    Only absolute M and L commands with integer coordinates are accepted.
    """
    tokens = _PATH_TOKEN.findall(d)
    points = []
    command = None
    i = 0
    while i < len(tokens):
        token = tokens[i]
        if token.isalpha():
            if token not in ("M", "L"):
                raise ValueError(f"Unsupported path command: {token}")
            command = token
            i += 1
            continue
        if command is None:
            raise ValueError(f"Path data must start with a command: {d[:20]!r}")
        if i + 1 >= len(tokens) or tokens[i + 1].isalpha():
            raise ValueError(f"Dangling coordinate in path data: {token}")
        x, y = tokens[i], tokens[i + 1]
        if "." in x or "." in y:
            raise ValueError(f"Non-integer coordinate in path data: {x} {y}")
        points.append((int(x), int(y)))
        i += 2
    return points


def to_svg(document: VectorDocument, stroke_width: int = 1) -> str:
    """
    Render a document as an SVG string.

    Raises:
        NoEdgesFoundError: If the document has no paths
    """
    if not document.paths:
        raise NoEdgesFoundError()

    dwg = svgwrite.Drawing(
        size=(document.width, document.height),
        viewBox=f"0 0 {document.width} {document.height}",
        debug=False,
    )
    for path in document.paths:
        dwg.add(dwg.path(
            d=path_data(path.points),
            fill="none",
            stroke=path.hex_color,
            stroke_width=stroke_width,
        ))
    return dwg.tostring()


def to_json(document: VectorDocument) -> str:
    """Render a document as JSON"""
    if not document.paths:
        raise NoEdgesFoundError()
    payload = {
        "width": document.width,
        "height": document.height,
        "paths": [
            {"points": [list(p) for p in path.points], "color": path.hex_color}
            for path in document.paths
        ],
    }
    return json.dumps(payload)


def parse_svg(content: str) -> VectorDocument:
    """Rebuild a VectorDocument from SVG produced by `to_svg`"""
    root = ET.fromstring(content)
    view_box = root.get("viewBox")
    if view_box:
        _, _, width, height = (int(float(v)) for v in view_box.split())
    else:
        width, height = int(root.get("width", 0)), int(root.get("height", 0))

    paths = []
    for element in root.iter(f"{{{SVG_NS}}}path"):
        points = parse_path_data(element.get("d", ""))
        color = parse_hex_color(element.get("stroke", "#000000"))
        paths.append(ColoredPath(points=tuple(points), color=color))
    return VectorDocument(width=width, height=height, paths=paths)


class VectorExporter:
    """
    Writes VectorDocuments to disk.

    Supported formats:
    - SVG: viewBox sized to the image, one stroked path per trace
    - JSON: point lists and colors, for tooling
    """

    SUPPORTED_FORMATS = {f.value for f in ExportFormat}

    def __init__(self, output_dir: Union[str, Path] = None, stroke_width: int = 1):
        self.output_dir = Path(output_dir) if output_dir else Path("./output")
        self.stroke_width = stroke_width

    def render(self, document: VectorDocument, format: Union[ExportFormat, str] = ExportFormat.SVG) -> str:
        """Serialize a document to a string in the given format"""
        format = self._resolve(format)
        if format == ExportFormat.SVG:
            return to_svg(document, stroke_width=self.stroke_width)
        return to_json(document)

    def export(
        self,
        document: VectorDocument,
        filename: str,
        format: Union[ExportFormat, str] = ExportFormat.SVG,
        output_path: Optional[Path] = None,
    ) -> Path:
        """
        Export document to specified format.

        Args:
            document: VectorDocument to export
            filename: Output filename (without extension)
            format: Target format
            output_path: Explicit destination, overrides output_dir/filename

        Returns:
            Path to exported file
        """
        format = self._resolve(format)
        content = self.render(document, format)

        if output_path is None:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            output_path = self.output_dir / f"{filename}.{format.value}"
        else:
            output_path = Path(output_path)
            output_path.parent.mkdir(parents=True, exist_ok=True)

        logger.info(f"Exporting {len(document.paths)} paths to {format.value}: {output_path}")
        output_path.write_text(content, encoding="utf-8")
        return output_path

    def _resolve(self, format: Union[ExportFormat, str]) -> ExportFormat:
        if isinstance(format, ExportFormat):
            return format
        try:
            return ExportFormat(format.lower())
        except ValueError:
            raise ValueError(f"Unsupported format: {format}")
