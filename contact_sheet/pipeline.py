"""Per-file and batch contact sheet generation."""
from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from loguru import logger

from .capture import sample_frames
from .compose import compose_contact_sheet, load_fonts, save_image
from .config import AppConfig
from .errors import ContactSheetError
from .io import FrameExtractor, ensure_dir
from .layout import grid_desired_size
from .models import Frame
from .params import resolve_parameters
from .probe import probe_media
from .utils import safe_remove


@dataclass
class BatchReport:
    written: List[Path] = field(default_factory=list)
    skipped: List[Path] = field(default_factory=list)
    failed: List[Tuple[Path, str]] = field(default_factory=list)


def output_path_for(input_path: Path, output: Optional[Path], image_format: str) -> Path:
    """``<input>.<format>`` beside the input, inside ``output`` if it is a directory, or ``output`` itself."""

    default_name = f"{input_path.name}.{image_format}"
    if output is None:
        return input_path.with_name(default_name)
    if output.is_dir():
        return output / default_name
    return output


def copy_thumbnails(frames: Sequence[Frame], directory: Path, stem: str) -> List[Path]:
    """Copy frames as ``<stem>.<NNNN><ext>`` in timestamp order."""

    ensure_dir(directory)
    copies = []
    for index, frame in enumerate(sorted(frames, key=lambda f: f.timestamp)):
        target = directory / f"{stem}.{index:04d}{frame.filename.suffix}"
        shutil.copyfile(frame.filename, target)
        copies.append(target)
    logger.info("Copied {} thumbnails to {}", len(copies), directory)
    return copies


def cleanup_frames(frames: Iterable[Frame]) -> None:
    for frame in frames:
        safe_remove(frame.filename)


def process_file(
    input_path: Path,
    config: AppConfig,
    output: Optional[Path] = None,
    *,
    progress: bool = True,
) -> Optional[Path]:
    """Build the contact sheet for one video; ``None`` when skipped."""

    input_path = Path(input_path)
    if not input_path.exists():
        raise FileNotFoundError(f"File does not exist: {input_path}")
    out = config.output
    output_path = output_path_for(input_path, output if output is not None else out.path, out.image_format)
    if out.no_overwrite and output_path.exists():
        logger.info("Contact sheet already exists, skipping: {}", output_path)
        return None

    logger.info("Processing {}", input_path)
    media = probe_media(input_path)
    params = resolve_parameters(config, media)
    cell = grid_desired_size(params.grid, media.dimensions, params.vcs_width, params.grid_horizontal_spacing)
    extractor = FrameExtractor(
        input_path,
        accurate=config.capture.accurate,
        accurate_delay_seconds=config.capture.accurate_delay_seconds,
        frame_type=config.capture.frame_type,
    )
    result = sample_frames(
        extractor,
        params,
        cell,
        fast=config.capture.fast,
        workers=config.capture.workers,
        colour_distance=config.capture.colour_distance,
        progress=progress,
    )
    try:
        fonts = load_fonts(config)
        image = compose_contact_sheet(media, result.selected, params, config, fonts)
        save_image(image, output_path, out.image_format, out.quality)
        if out.thumbnails_dir is not None:
            frames = result.captured if out.thumbnails_all else result.selected
            copy_thumbnails(frames, out.thumbnails_dir, input_path.stem)
    except Exception:
        cleanup_frames(result.captured)
        raise
    if out.keep_thumbnails:
        logger.info("Keeping {} temporary frames", len(result.captured))
    else:
        cleanup_frames(result.captured)
    return output_path


def iter_inputs(paths: Iterable[Path], recursive: bool, exclude_extensions: Sequence[str]) -> Iterator[Path]:
    """Expand directories into the files they contain, in sorted order."""

    excluded = {ext.lower().lstrip(".") for ext in exclude_extensions}
    for path in paths:
        path = Path(path)
        if path.is_dir():
            pattern = "**/*" if recursive else "*"
            children = sorted(p for p in path.glob(pattern) if p.is_file())
        else:
            children = [path]
        for child in children:
            if child.suffix.lower().lstrip(".") in excluded:
                logger.debug("Excluded by extension: {}", child)
                continue
            yield child


def process_paths(paths: Sequence[Path], config: AppConfig, *, progress: bool = True) -> BatchReport:
    """Run :func:`process_file` for every input, honouring ``ignore_errors``."""

    report = BatchReport()
    out = config.output
    inputs = list(iter_inputs(paths, out.recursive, out.exclude_extensions))
    output = out.path
    if output is not None and len(inputs) > 1 and not output.exists():
        ensure_dir(output)
    for path in inputs:
        try:
            written = process_file(path, config, output, progress=progress)
        except (ContactSheetError, OSError) as exc:
            if not out.ignore_errors:
                raise
            logger.error("Skipping {}: {}", path, exc)
            report.failed.append((path, str(exc)))
            continue
        if written is None:
            report.skipped.append(path)
        else:
            report.written.append(written)
    return report
