"""
Result writers for exporting pitch contours to files.

New output formats are added as ResultWriter subclasses and registered
in create_result_writer().
"""

import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Dict, TextIO

from contour.core.display import fit_pitch_axis
from contour.core.models import PitchSeries


class ResultWriter(ABC):
    """Abstract base class for contour writers."""

    @abstractmethod
    def write(self, results: Dict[str, PitchSeries], output_path: Path) -> None:
        """Write labelled pitch series to the specified path."""
        pass


class TextResultWriter(ResultWriter):
    """Writes contours as a human-readable table, one frame per line."""

    def __init__(self, include_timestamp: bool = True, precision: int = 2):
        """
        Initialize text writer.

        Args:
            include_timestamp: Whether to include a generation timestamp
            precision: Decimal places for frequencies
        """
        self.include_timestamp = include_timestamp
        self.precision = precision
        self.logger = logging.getLogger("result_writer.text")

    def write(self, results: Dict[str, PitchSeries], output_path: Path) -> None:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, 'w', encoding='utf-8') as f:
            f.write("=" * 60 + "\n")
            f.write("CONTOUR PITCH ANALYSIS\n")
            f.write("=" * 60 + "\n")

            if self.include_timestamp:
                f.write(f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}\n")

            f.write(f"Contours: {len(results)}\n\n")

            for label, series in results.items():
                self._write_series(f, label, series)

        self.logger.info(f"Results written to: {output_path}")

    def _write_series(self, f: TextIO, label: str, series: PitchSeries) -> None:
        f.write("-" * 60 + "\n")
        f.write(f"SOURCE: {label}\n")
        f.write(f"Frames: {len(series)}  Voiced: {series.voiced_ratio:.1%}\n")

        axis = fit_pitch_axis(series)
        if axis:
            f.write(f"Axis Range: {axis[0]:.0f}-{axis[1]:.0f} Hz\n")
        f.write("-" * 60 + "\n")

        f.write(f"{'time_s':>10}  {'pitch_hz':>10}\n")
        for t, p in zip(series.times, series.pitches):
            value = f"{p.hz:.{self.precision}f}" if p.is_voiced else "-"
            f.write(f"{t:>10.4f}  {value:>10}\n")
        f.write("\n")


class JSONResultWriter(ResultWriter):
    """Writes contours as JSON, with null for unvoiced frames."""

    def __init__(self, indent: int = 2):
        self.indent = indent
        self.logger = logging.getLogger("result_writer.json")

    def write(self, results: Dict[str, PitchSeries], output_path: Path) -> None:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        output_data = {
            "generated": datetime.now().isoformat(),
            "total_contours": len(results),
            "results": {
                label: series.to_dict()
                for label, series in results.items()
            }
        }

        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump(output_data, f, indent=self.indent)

        self.logger.info(f"Results written to: {output_path}")


def create_result_writer(format: str = "text", **kwargs) -> ResultWriter:
    """
    Factory function to create the writer for an output format.

    Args:
        format: "text", "txt" or "json"
        **kwargs: Passed to the writer's constructor

    Raises:
        ValueError: Unknown format
    """
    writers = {
        "text": TextResultWriter,
        "txt": TextResultWriter,
        "json": JSONResultWriter,
    }

    writer_class = writers.get(format.lower())
    if writer_class is None:
        raise ValueError(f"Unknown format: {format}. Supported: {list(writers.keys())}")

    return writer_class(**kwargs)
