"""
Command-line rendering: text file in, handwritten PDF out.

Runs the full pipeline (text store, worker pool, artifact store) against
a throwaway data directory, waits for the job and copies the PDF to the
requested path.

    handwriting-render notes.txt -o notes.pdf --seed 7 --pattern grid
"""

from __future__ import annotations

import logging
import shutil
import sys
import tempfile
from pathlib import Path
from typing import List, Optional

from handwriting_toolkit import __version__
from handwriting_toolkit.core.models.jobs import JobStatus
from handwriting_toolkit.core.models.settings import PaperColor, PaperPattern, SUPPORTED_FONTS
from handwriting_toolkit.core.schemas.validator import ValidationError, validate_settings
from handwriting_toolkit.pipeline import GenerationService, ServiceConfig

logger = logging.getLogger("handwriting_toolkit.cli")


def _build_parser():
    import argparse

    parser = argparse.ArgumentParser(
        prog="handwriting-render",
        description="Render a plain-text file as a handwritten PDF",
    )
    parser.add_argument("input", type=Path, help="UTF-8 text file to render")
    parser.add_argument("--output", "-o", type=Path, required=True, help="PDF to write")
    parser.add_argument("--font", default="Caveat", choices=SUPPORTED_FONTS, help="Handwriting font family")
    parser.add_argument("--font-size", type=float, default=24, help="Font size in design units")
    parser.add_argument("--seed", type=int, help="Random seed (same seed, same document)")
    parser.add_argument("--error-rate", type=float, default=0.02,
                        help="Probability of a crossed-out mistake before each word")
    parser.add_argument("--pattern", default=PaperPattern.LINED.value,
                        choices=[p.value for p in PaperPattern], help="Paper pattern")
    parser.add_argument("--paper-color", default=PaperColor.WHITE.value,
                        choices=[c.value for c in PaperColor], help="Paper colour")
    parser.add_argument("--color", default="#000000", help="Ink colour (#rrggbb)")
    parser.add_argument("--max-pages", type=int, default=500, help="Page ceiling")
    parser.add_argument("--fonts-dir", type=Path, help="Directory containing the handwriting TTF files")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        text = args.input.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error: cannot read {args.input}: {e}", file=sys.stderr)
        return 1

    payload = {
        "fontFamily": args.font,
        "fontSize": args.font_size,
        "color": args.color,
        "paperPattern": args.pattern,
        "paperColor": args.paper_color,
        "randomization": {"errorRate": args.error_rate},
    }
    if args.seed is not None:
        payload["seed"] = args.seed

    try:
        settings = validate_settings(payload)
    except ValidationError as e:
        print(f"Error: invalid settings: {e}", file=sys.stderr)
        for detail in e.errors:
            print(f"  - {detail}", file=sys.stderr)
        return 2

    with tempfile.TemporaryDirectory(prefix="handwriting-") as tmp:
        try:
            config = ServiceConfig(
                data_dir=Path(tmp),
                fonts_dir=args.fonts_dir,
                max_pages=args.max_pages,
                persist_jobs=False,
            )
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 2

        with GenerationService(config) as service:
            job_id = service.submit_job(service.save_text(text), settings)
            status = service.wait(job_id)

            if status.state != JobStatus.COMPLETED:
                print(f"Error: {status.error}", file=sys.stderr)
                return 1

            args.output.parent.mkdir(parents=True, exist_ok=True)
            with service.fetch_result(job_id).stream as src, open(args.output, "wb") as dst:
                shutil.copyfileobj(src, dst)

    print(f"Wrote {status.page_count} pages to {args.output}")
    if status.truncated:
        print(f"Warning: text was cut off at the {args.max_pages}-page limit", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
