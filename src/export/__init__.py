# Export module
# Outputs vectorized paths in various formats:
# - SVG (stroke-only paths in a viewBox sized to the image)
# - JSON (raw point lists and colors)

from .exporter import VectorExporter, ExportFormat, to_svg, parse_svg, parse_path_data

__all__ = ["VectorExporter", "ExportFormat", "to_svg", "parse_svg", "parse_path_data"]
