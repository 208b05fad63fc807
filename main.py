"""
Edge Vectorizer - Main Entry Point
"""
import argparse
import logging
import sys
import socket
from pathlib import Path

import uvicorn

from config.settings import settings


def setup_logging():
    """Configure root logging from settings"""
    handlers = [logging.StreamHandler()]
    if settings.log_file:
        handlers.append(logging.FileHandler(settings.log_file))
    logging.basicConfig(
        level=settings.log_level.upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
    )


def run_server(host: str = "0.0.0.0", port: int = 7002, reload: bool = False):
    """Run the API server"""
    # Get local IP address
    local_ip = "localhost"
    if host == "0.0.0.0":
        try:
            # Get actual local IP for display
            s = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
            s.connect(("8.8.8.8", 80))
            local_ip = s.getsockname()[0]
            s.close()
        except OSError:
            local_ip = "127.0.0.1"
    else:
        local_ip = host

    print("\n" + "="*70)
    print("  Edge Vectorizer Server")
    print("="*70)
    print(f"  Host: {host}")
    print(f"  Port: {port}")
    print(f"  Local URL: http://{local_ip}:{port}")
    print(f"  API Docs: http://{local_ip}:{port}/docs")
    print(f"  Auto-reload: {'enabled' if reload else 'disabled'}")
    print("="*70 + "\n")

    uvicorn.run(
        "src.api.server:app",
        host=host,
        port=port,
        reload=reload,
    )


def run_cli(input_path: str, output: str, export_format: str, **kwargs) -> int:
    """Run pipeline from command line"""
    from src.exceptions import InvalidInputError
    from src.pipeline import ConversionOptions, run_pipeline

    try:
        options = ConversionOptions(**kwargs)
    except InvalidInputError as e:
        print(f"Invalid options: {e}")
        return 1

    output_path = Path(output) if output else Path(input_path).with_suffix(f".{export_format}")
    result = run_pipeline(
        input_path=input_path,
        output_path=output_path,
        options=options,
        export_format=export_format,
    )

    if result.success:
        print(f"Success! {len(result.document.paths)} paths written to {output_path}")
        return 0
    print(f"Failed: {result.error}")
    return 2 if result.no_edges else 1


def main():
    parser = argparse.ArgumentParser(
        description="Edge Vectorizer - Convert raster images to SVG edge outlines"
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Server command
    server_parser = subparsers.add_parser("server", help="Run API server")
    server_parser.add_argument("--host", default=settings.api_host, help="Host to bind to")
    server_parser.add_argument("--port", type=int, default=settings.api_port, help="Port to listen on")
    server_parser.add_argument("--reload", action="store_true", help="Enable auto-reload")

    # Convert command
    convert_parser = subparsers.add_parser("convert", help="Convert an image to SVG")
    convert_parser.add_argument("input", help="Input image (PNG, JPG, GIF, BMP, WebP, TIFF)")
    convert_parser.add_argument("-o", "--output", help="Output file (defaults next to the input)")
    convert_parser.add_argument(
        "-t", "--threshold",
        type=int,
        default=settings.default_threshold,
        help="Edge sensitivity, 0-255 (lower finds more edges)",
    )
    convert_parser.add_argument("--stroke-color", help="Hex color for all paths, e.g. #000000")
    convert_parser.add_argument(
        "--no-color-aware",
        action="store_true",
        help="Use intensity gradients only",
    )
    convert_parser.add_argument("--mono", metavar="COLOR", help="Tint sampled colors with a hex color")
    convert_parser.add_argument(
        "-f", "--format",
        default="svg",
        choices=["svg", "json"],
        help="Output format",
    )

    args = parser.parse_args()
    setup_logging()

    if args.command == "server":
        run_server(host=args.host, port=args.port, reload=args.reload)
    elif args.command == "convert":
        from src.vectorization.buffers import parse_hex_color

        kwargs = {
            "threshold": args.threshold,
            "stroke_color": args.stroke_color,
            "color_aware": not args.no_color_aware,
        }
        if args.mono:
            try:
                kwargs["mono_color"] = parse_hex_color(args.mono)
            except ValueError as e:
                parser.error(str(e))
            kwargs["color_mode"] = "mono"

        sys.exit(run_cli(args.input, args.output, args.format, **kwargs))
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
