"""
FastAPI Server - REST API for image-to-SVG conversion
"""
from typing import Optional
from enum import Enum
import logging

from fastapi import FastAPI, File, UploadFile, HTTPException, Query
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from pydantic import BaseModel

from config.settings import settings

from ..exceptions import (
    InvalidInputError,
    DecodeError,
    NoEdgesFoundError,
    ProcessingError,
)
from ..export import VectorExporter
from ..ingestion import ImageLoader, ColorMode
from ..pipeline import ConversionOptions, Pipeline, PipelineConfig
from ..vectorization.buffers import parse_hex_color

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


class OutputFormat(str, Enum):
    SVG = "svg"
    JSON = "json"


class ConversionSummary(BaseModel):
    """Metadata returned alongside a conversion"""
    width: int
    height: int
    original_width: int
    original_height: int
    path_count: int
    point_count: int


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""

    app = FastAPI(
        title="Edge Vectorizer API",
        description="Convert raster images to stroke-only SVG outlines",
        version=VERSION,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {"status": "healthy", "version": VERSION}

    @app.post("/convert")
    async def convert_image(
        file: UploadFile = File(...),
        threshold: int = Query(settings.default_threshold, ge=0, le=255),
        stroke_color: Optional[str] = None,
        color_aware: bool = True,
        color_mode: ColorMode = ColorMode.ORIGINAL,
        mono_color: str = "#0000ff",
        format: OutputFormat = OutputFormat.SVG,
    ):
        """
        Upload an image and get its edge outline back.

        - **file**: PNG, JPEG, GIF, BMP, WebP or TIFF image (max 10MB)
        - **threshold**: Edge sensitivity (0-255); lower finds more edges
        - **stroke_color**: Hex color for every path; disables color sampling
        - **color_aware**: Include color-channel gradients in edge strength
        - **color_mode**: "original" or "mono" (tint sampled colors)
        - **mono_color**: Hex tint for mono mode
        - **format**: "svg" or "json"
        """
        content = await file.read()

        try:
            options = ConversionOptions(
                threshold=threshold,
                stroke_color=stroke_color,
                color_aware=color_aware,
                color_mode=color_mode,
                mono_color=parse_hex_color(mono_color),
            )
            loader = ImageLoader(
                max_dimension=settings.max_dimension,
                max_bytes=settings.max_upload_bytes,
            )
            loaded = await run_in_threadpool(
                loader.load_bytes, content, content_type=file.content_type
            )
        except (InvalidInputError, DecodeError, ValueError) as e:
            # Bad color strings surface as plain ValueError
            raise HTTPException(status_code=400, detail=str(e))

        pipeline = Pipeline(PipelineConfig.from_settings(options, settings=settings))
        try:
            # Tracing is CPU bound; keep it off the event loop
            result = await run_in_threadpool(pipeline.run, loaded.buffer, raise_on_error=True)
        except NoEdgesFoundError as e:
            raise HTTPException(status_code=422, detail=str(e))
        except InvalidInputError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except ProcessingError as e:
            logger.error(f"Conversion of {file.filename} failed in {e.stage}: {e.cause}")
            raise HTTPException(status_code=500, detail=str(e))

        document = result.document
        summary = ConversionSummary(
            width=document.width,
            height=document.height,
            original_width=loaded.original_size[0],
            original_height=loaded.original_size[1],
            path_count=len(document.paths),
            point_count=document.point_count,
        )
        logger.info(f"Converted {file.filename}: {summary.path_count} paths")

        if format == OutputFormat.JSON:
            exporter = VectorExporter(stroke_width=settings.stroke_width)
            return Response(
                content=exporter.render(document, "json"),
                media_type="application/json",
            )

        return Response(
            content=result.svg,
            media_type="image/svg+xml",
            headers={
                "Content-Disposition": 'inline; filename="converted.svg"',
                "X-Path-Count": str(summary.path_count),
                "X-Original-Size": f"{summary.original_width}x{summary.original_height}",
            },
        )

    return app


# Create app instance for uvicorn
app = create_app()
