"""
Pipeline Orchestrator - Coordinates the raster-to-vector workflow
"""
from pathlib import Path
from typing import Optional, Callable, List, Tuple, Union
from dataclasses import dataclass, field
from enum import Enum
import logging
from datetime import datetime

from .exceptions import (
    VectorizerError,
    InvalidInputError,
    NoEdgesFoundError,
    ProcessingError,
)
from .ingestion.preprocessor import ColorMode
from .vectorization.buffers import PixelBuffer, RGB, parse_hex_color, to_hex
from .vectorization.vectorizer import VectorDocument

logger = logging.getLogger(__name__)

MAX_DIMENSION = 2000


class PipelineStage(Enum):
    VALIDATION = "validation"
    PREPROCESSING = "preprocessing"
    EDGE_DETECTION = "edge_detection"
    TRACING = "tracing"
    COLOR_SAMPLING = "color_sampling"
    EXPORT = "export"


@dataclass(frozen=True)
class ConversionOptions:
    """User-facing conversion options"""
    threshold: int = 128
    stroke_color: Optional[str] = None  # "#rrggbb"; disables color sampling
    color_aware: bool = True
    color_mode: ColorMode = ColorMode.ORIGINAL
    mono_color: RGB = (0, 0, 255)

    def __post_init__(self):
        if isinstance(self.threshold, bool) or not isinstance(self.threshold, int):
            raise InvalidInputError(f"Threshold must be an integer, got {self.threshold!r}")
        if not 0 <= self.threshold <= 255:
            raise InvalidInputError(f"Threshold must be within [0, 255], got {self.threshold}")
        if self.stroke_color is not None:
            try:
                object.__setattr__(self, "stroke_color", to_hex(parse_hex_color(self.stroke_color)))
            except ValueError as e:
                raise InvalidInputError(str(e)) from e
        try:
            object.__setattr__(self, "color_mode", ColorMode(self.color_mode))
        except ValueError as e:
            raise InvalidInputError(f"Unknown color mode: {self.color_mode!r}") from e
        try:
            valid = len(self.mono_color) == 3 and all(0 <= int(c) <= 255 for c in self.mono_color)
        except (TypeError, ValueError) as e:
            raise InvalidInputError(f"Invalid mono color: {self.mono_color!r}") from e
        if not valid:
            raise InvalidInputError(f"Invalid mono color: {self.mono_color!r}")

    @property
    def stroke_rgb(self) -> Optional[RGB]:
        return parse_hex_color(self.stroke_color) if self.stroke_color else None


@dataclass
class PipelineConfig:
    """Configuration for pipeline execution"""
    options: ConversionOptions = field(default_factory=ConversionOptions)

    # Processing limits
    max_dimension: int = MAX_DIMENSION
    threshold_scale: float = 0.3
    min_path_length: int = 10
    max_trace_length: int = 1000

    # Export
    stroke_width: int = 1

    @classmethod
    def from_settings(cls, options: Optional[ConversionOptions] = None, settings=None) -> "PipelineConfig":
        """Build a config from application settings"""
        if settings is None:
            from config.settings import settings
        return cls(
            options=options or ConversionOptions(threshold=settings.default_threshold),
            max_dimension=settings.max_dimension,
            threshold_scale=settings.threshold_scale,
            min_path_length=settings.min_path_length,
            max_trace_length=settings.max_trace_length,
            stroke_width=settings.stroke_width,
        )


@dataclass
class PipelineResult:
    """Result of pipeline execution"""
    success: bool
    stages_completed: List[PipelineStage]
    document: Optional[VectorDocument] = None
    svg: Optional[str] = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    timing: Optional[dict] = None

    @property
    def no_edges(self) -> bool:
        return self.error_type == NoEdgesFoundError.__name__


class Pipeline:
    """
    Main pipeline orchestrator for raster-to-vector conversion.

    Pipeline stages:
    1. Validation: Check the decoded buffer against the size limit
    2. Preprocessing: 3x3 smoothing, optional monochrome tint
    3. Edge detection: Sobel magnitude (intensity and color)
    4. Tracing: Greedy walks over strong edge pixels
    5. Color sampling: Dominant color per path
    6. Export: SVG document sized to the image

    Every stage returns new data; the input buffer is never modified.
    """

    def __init__(self, config: Optional[PipelineConfig] = None):
        self.config = config or PipelineConfig()
        self._progress_callback: Optional[Callable] = None
        self._current_stage: Optional[PipelineStage] = None
        self._timing: dict = {}
        self._raster = None

    def set_progress_callback(self, callback: Callable[[PipelineStage, float, str], None]):
        """
        Set callback for progress updates.

        Callback signature: (stage: PipelineStage, progress: float, message: str)
        """
        self._progress_callback = callback

    def _report_progress(self, progress: float, message: str):
        """Report progress to callback if set"""
        if self._progress_callback and self._current_stage:
            self._progress_callback(self._current_stage, progress, message)

    def run(self, image: PixelBuffer, raise_on_error: bool = False) -> PipelineResult:
        """
        Execute the full pipeline.

        Args:
            image: Decoded RGBA buffer, at most max_dimension on each side
            raise_on_error: Re-raise failures instead of reporting them

        Returns:
            PipelineResult with the document and SVG on success
        """
        logger.info("Starting pipeline...")
        stages_completed = []
        self._timing = {}
        self._raster = None
        start_time = datetime.now()

        try:
            self._run_stage(PipelineStage.VALIDATION, None, self._run_validation, image)
            stages_completed.append(PipelineStage.VALIDATION)

            smoothed, reference = self._run_stage(
                PipelineStage.PREPROCESSING, "Smoothing image...", self._run_preprocessing, image
            )
            stages_completed.append(PipelineStage.PREPROCESSING)

            edge_map = self._run_stage(
                PipelineStage.EDGE_DETECTION, "Detecting edges...",
                self._run_edge_detection, smoothed, reference,
            )
            stages_completed.append(PipelineStage.EDGE_DETECTION)

            traces = self._run_stage(
                PipelineStage.TRACING, "Tracing edges...", self._run_tracing, edge_map
            )
            stages_completed.append(PipelineStage.TRACING)

            document = self._run_stage(
                PipelineStage.COLOR_SAMPLING, "Sampling colors...",
                self._run_color_sampling, traces, edge_map, image,
            )
            stages_completed.append(PipelineStage.COLOR_SAMPLING)

            svg = self._run_stage(
                PipelineStage.EXPORT, "Writing SVG...", self._run_export, document
            )
            stages_completed.append(PipelineStage.EXPORT)

            elapsed = (datetime.now() - start_time).total_seconds()
            logger.info(f"Pipeline completed in {elapsed:.2f}s with {len(document.paths)} paths")

            return PipelineResult(
                success=True,
                stages_completed=stages_completed,
                document=document,
                svg=svg,
                timing=self._timing,
            )

        except NoEdgesFoundError as e:
            logger.warning(f"No edges found at threshold {self.config.options.threshold}")
            if raise_on_error:
                raise
            return self._failure(e, stages_completed)

        except VectorizerError as e:
            logger.error(f"Pipeline failed at {self._current_stage}: {e}")
            if raise_on_error:
                raise
            return self._failure(e, stages_completed)

    def _failure(self, error: Exception, stages_completed: List[PipelineStage]) -> PipelineResult:
        return PipelineResult(
            success=False,
            stages_completed=stages_completed,
            error=str(error),
            error_type=type(error).__name__,
            timing=self._timing,
        )

    def _run_stage(self, stage: PipelineStage, message: Optional[str], func, *args):
        """
        Run one stage, timing it and wrapping unexpected errors.

        Progress callbacks run inside the stage, so a failing callback is
        reported as a ProcessingError of that stage.
        """
        self._current_stage = stage
        started = datetime.now()
        try:
            if message:
                self._report_progress(0.0, message)
            output = func(*args)
            self._report_progress(1.0, f"{stage.value} complete")
        except VectorizerError:
            raise
        except Exception as e:
            raise ProcessingError(stage.value, e) from e
        finally:
            elapsed = (datetime.now() - started).total_seconds()
            self._timing[stage.value] = elapsed
        return output

    def _run_validation(self, image: PixelBuffer):
        """Stage 1: Reject buffers the decoder should have rejected or scaled"""
        if image is None:
            raise InvalidInputError("No image provided")
        logger.debug(f"Validating {image.width}x{image.height}x{image.channels} buffer")
        limit = self.config.max_dimension
        if image.width > limit or image.height > limit:
            raise InvalidInputError(
                f"Image is {image.width}x{image.height}; both sides must be at most {limit}px"
            )
        if image.width < 1 or image.height < 1:
            raise InvalidInputError(f"Image is empty: {image.width}x{image.height}")
        if image.channels < 3:
            raise InvalidInputError(f"Expected RGB(A) pixels, got {image.channels} channel(s)")

    def _run_preprocessing(self, image: PixelBuffer) -> Tuple[PixelBuffer, PixelBuffer]:
        """Stage 2: Smooth the image and prepare the color reference"""
        from .ingestion import ImagePreprocessor, PreprocessingConfig

        options = self.config.options
        preprocessor = ImagePreprocessor(PreprocessingConfig(
            color_mode=options.color_mode,
            mono_color=options.mono_color,
        ))
        processed = preprocessor.process(image)
        return processed.smoothed, processed.reference

    def _run_edge_detection(self, smoothed: PixelBuffer, reference: PixelBuffer):
        """Stage 3: Edge-strength map"""
        return self._vectorizer().detect_edges(smoothed, reference)

    def _run_tracing(self, edge_map):
        """Stage 4: Trace and filter polylines"""
        vectorizer = self._vectorizer()
        traces = vectorizer.trace_edges(edge_map)
        if not traces:
            raise NoEdgesFoundError(threshold=vectorizer.edge_threshold)
        return traces

    def _run_color_sampling(self, traces, edge_map, image: PixelBuffer) -> VectorDocument:
        """Stage 5: Pair each trace with its color"""
        paths = self._vectorizer().colorize(traces, edge_map.source)
        return VectorDocument(width=image.width, height=image.height, paths=paths)

    def _run_export(self, document: VectorDocument) -> str:
        """Stage 6: Serialize to SVG"""
        from .export import VectorExporter

        exporter = VectorExporter(stroke_width=self.config.stroke_width)
        return exporter.render(document)

    def _vectorizer(self):
        """Vectorizer for the current run, built on first use"""
        from .vectorization import RasterToVector

        if self._raster is not None:
            return self._raster
        options = self.config.options
        self._raster = RasterToVector(
            threshold=options.threshold,
            color_aware=options.color_aware,
            stroke_color=options.stroke_rgb,
            threshold_scale=self.config.threshold_scale,
            min_path_length=self.config.min_path_length,
            max_trace_length=self.config.max_trace_length,
        )
        return self._raster


def convert(
    image: PixelBuffer,
    options: Optional[ConversionOptions] = None,
    **kwargs
) -> str:
    """
    Convert a decoded image to an SVG string.

    Raises:
        InvalidInputError, NoEdgesFoundError, ProcessingError
    """
    config = PipelineConfig(options=options or ConversionOptions(), **kwargs)
    result = Pipeline(config).run(image, raise_on_error=True)
    return result.svg


def run_pipeline(
    input_path: Union[str, Path],
    output_path: Optional[Union[str, Path]] = None,
    options: Optional[ConversionOptions] = None,
    export_format: str = "svg",
    settings=None,
) -> PipelineResult:
    """
    Convenience function to run the pipeline on an image file.

    Args:
        input_path: Path to input image
        output_path: Where to write the result; skipped if None
        options: Conversion options
        export_format: "svg" or "json"
        settings: Application settings, defaults to config.settings

    Returns:
        PipelineResult
    """
    from .ingestion import ImageLoader
    from .export import VectorExporter

    config = PipelineConfig.from_settings(options, settings=settings)
    if settings is None:
        from config.settings import settings

    try:
        loader = ImageLoader(
            max_dimension=config.max_dimension,
            max_bytes=settings.max_upload_bytes,
        )
        loaded = loader.load(input_path)
    except (VectorizerError, FileNotFoundError) as e:
        logger.error(f"Could not load {input_path}: {e}")
        return PipelineResult(
            success=False,
            stages_completed=[],
            error=str(e),
            error_type=type(e).__name__,
        )

    result = Pipeline(config).run(loaded.buffer)

    if result.success and output_path is not None:
        exporter = VectorExporter(stroke_width=config.stroke_width)
        output_path = Path(output_path)
        exporter.export(result.document, output_path.stem, export_format, output_path=output_path)

    return result
