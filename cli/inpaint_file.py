"""
Inpaint an image file with a mask file from the command line.

    cleansweep photo.jpg mask.png -o cleaned.png --compare compare.png --reveal 0.5

The mask may be any size; it is resampled to the photo's resolution.
"""
import argparse
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

# --- Centralized Logging Configuration ---
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s',
    datefmt='%H:%M:%S'
)

from models.errors import InpaintError
from models.removal_mode import RemovalMode
from pipeline.inpaint_pipeline import InpaintPipeline
from services.comparison_service import ComparisonService
from services.raster_service import RasterService

logger = logging.getLogger("cleansweep")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cleansweep", description="Mask-guided Telea inpainting")
    parser.add_argument("image", type=Path, help="source image")
    parser.add_argument("mask", type=Path, help="mask image (white/painted = remove)")
    parser.add_argument("-o", "--output", type=Path, help="output path (default: <image>_cleaned.png)")
    parser.add_argument("-r", "--radius", type=int, default=None, help="inpainting neighbourhood radius")
    parser.add_argument("--backend", choices=("telea", "opencv"), default=None,
                        help="inpainting backend (default: INPAINT_BACKEND or telea)")
    parser.add_argument("--mode", default=RemovalMode.OBJECT_REMOVAL.value,
                        choices=[m.value for m in RemovalMode])
    parser.add_argument("--compare", type=Path, default=None,
                        help="also write a before/after composite here")
    parser.add_argument("--reveal", type=float, default=0.5,
                        help="fraction of the width showing the original in --compare")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    raster_service = RasterService()
    pipeline = InpaintPipeline(backend=args.backend)

    try:
        source = raster_service.load(args.image)
        mask = raster_service.load(args.mask)
        result = pipeline.run(source, mask, args.mode, args.radius)
    except InpaintError as err:
        logger.error(str(err))
        return 1

    output = args.output or args.image.with_name(f"{args.image.stem}_cleaned.png")
    raster_service.save(result.processed, output)
    logger.info(f"Saved {output}")

    if args.compare is not None:
        composite = ComparisonService().composite(result.original, result.processed, args.reveal)
        raster_service.save(composite, args.compare)
        logger.info(f"Saved comparison {args.compare}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
