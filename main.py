"""
Face Detection CLI Entrypoint.

Responsibility:
    Parse command-line arguments, configure the application, load the
    face detector once, and run every image under a directory through
    the detection pipeline.

Usage:
    python main.py photos/                         # Display each result
    python main.py photos/ --save annotated/       # Save annotated copies
    python main.py photos/ --save out/ --report out/faces.json
    python main.py --config my_config.yaml

Exit codes:
    0  Normal completion, including runs where no face was found.
    1  Invalid configuration, input directory, or face cascade.
    2  Malformed command line (reported by argparse).

This module is the executable entry point. It should not be imported
by other modules.
"""

import argparse
import logging
import sys
import time
from typing import List, Optional

import cv2

# Configure logging before importing local modules
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("main")

from facesweep.config import load_config
from facesweep.input_handler import InputHandler
from facesweep.model_loader import load_detector
from facesweep.output_handler import OutputHandler
from facesweep.pipeline import DetectionPipeline
from facesweep.preprocessor import InvalidImage


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Detect faces in every image under a directory.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "directory",
        nargs="?",
        help="Directory scanned recursively for images. Overrides config.",
    )
    parser.add_argument(
        "--save",
        metavar="SAVE_DIRECTORY",
        type=str,
        help="Save annotated images here instead of displaying them. Overrides config.",
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Path to YAML configuration file.",
    )
    parser.add_argument(
        "--max-height",
        type=int,
        help="Downscale images taller than this before detection. Overrides config.",
    )
    parser.add_argument(
        "--report",
        type=str,
        help="Write every file's outcome and faces to this .json or .csv file. Overrides config.",
    )

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main execution loop."""
    args = parse_args(argv)

    if args.save is not None and not args.save.strip():
        logger.error("Error: Save directory not specified.")
        return 1

    # 1. Load Configuration (CLI args > ENV > YAML > Defaults)
    try:
        config = load_config(
            args.config,
            overrides={
                "input": {"directory": args.directory, "max_height": args.max_height},
                "output": {"save_dir": args.save, "report_path": args.report},
            },
        )
    except Exception as e:
        logger.error("Configuration error: %s", e)
        return 1

    if config.input.directory is None:
        logger.error("No input directory given. Usage: main.py <directory_path> [--save <save_directory>]")
        return 1

    # 2. Initialize Components
    try:
        input_handler = InputHandler(
            directory=config.input.directory,
            max_height=config.input.max_height,
        )
        detector = load_detector(config.model)
        pipeline = DetectionPipeline(config)
        output_handler = OutputHandler(config)

    except (FileNotFoundError, NotADirectoryError, ValueError, RuntimeError) as e:
        logger.error("Initialization failed: %s", e)
        return 1
    except Exception as e:
        logger.exception("Unexpected initialization error: %s", e)
        return 1

    # 3. Processing Loop
    processed = 0
    skipped = 0
    total_faces = 0
    start_time = time.perf_counter()

    try:
        for path, image in input_handler:
            try:
                faces = pipeline.run(image, detector)
            except (InvalidImage, cv2.error) as e:
                logger.warning("Skipping %s: %s", path, e)
                output_handler.record_skipped(path, image, str(e))
                skipped += 1
                continue

            processed += 1
            total_faces += len(faces)

            # process_image returns False on exit request (e.g. 'q' key)
            should_continue = output_handler.process_image(path, image, faces)
            if not should_continue:
                logger.info("Stopping per user request.")
                break

    except KeyboardInterrupt:
        logger.info("Interrupted by user.")
    except Exception as e:
        logger.exception("Runtime error during processing: %s", e)
        return 1
    finally:
        # 4. Cleanup
        elapsed = time.perf_counter() - start_time
        for path in input_handler.unreadable:
            output_handler.record_unreadable(path)
        output_handler.finalize()

        logger.info(
            "Processing completed. Images: %d, faces: %d, skipped: %d, unreadable: %d (%.2fs).",
            processed, total_faces, skipped, len(input_handler.unreadable), elapsed,
        )

    return 0


if __name__ == "__main__":
    sys.exit(main())
