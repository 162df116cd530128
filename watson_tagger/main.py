"""
Main entry point for the Watson Image Tagger service.
"""

import asyncio
import json
import sys
import argparse
from .processor import ImageTagProcessor
from .tag_extractor import extract, ExtractionError
from .watson_client import WatsonAPIError
from .logging import setup_logging, get_logger
from .server import run_server


def parse_arguments(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Watson Image Tagger - ranked tags for images via Watson Visual Recognition"
    )

    parser.add_argument(
        "--host",
        help="Override the configured bind host"
    )

    parser.add_argument(
        "--port",
        type=int,
        help="Override the configured bind port"
    )

    parser.add_argument(
        "--test-connection",
        action="store_true",
        help="Test connection to Watson and exit"
    )

    parser.add_argument(
        "--analyze",
        metavar="IMAGE_URL",
        help="Tag a single image URL, print the result and exit"
    )

    parser.add_argument(
        "--extract-file",
        metavar="PATH",
        help="Extract tags from a saved raw Watson result (JSON file) and exit"
    )

    return parser.parse_args(argv)


def extract_file(path: str) -> int:
    """Run the extractor over a saved Watson result."""
    logger = get_logger("main")

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"❌ Could not read {path}: {e}")
        return 1

    try:
        result = extract(raw)
    except ExtractionError as e:
        logger.error(f"❌ Extraction failed: {e}")
        return 1

    print(json.dumps(result.to_response(), indent=2))
    return 0


async def analyze_url(image_url: str) -> int:
    """Tag one image URL through Watson."""
    logger = get_logger("main")

    async with ImageTagProcessor() as processor:
        try:
            result = await processor.tag_image(image_url)
        except (WatsonAPIError, ExtractionError) as e:
            logger.error(f"❌ Tagging failed: {e}")
            return 1

    print(json.dumps(result.to_response(), indent=2))
    return 0


async def test_connection() -> int:
    """Check the Watson connection and report the outcome."""
    logger = get_logger("main")
    logger.info("🔍 Testing connection to Watson")

    async with ImageTagProcessor() as processor:
        if await processor.test_connection():
            logger.info("✅ Connection test successful")
            return 0

    logger.error("❌ Connection test failed")
    return 1


async def serve(host=None, port=None):
    """Run the HTTP server until interrupted."""
    async with ImageTagProcessor() as processor:
        await run_server(processor, host, port)


def main(argv=None):
    """Main entry point."""
    setup_logging()
    logger = get_logger("main")

    args = parse_arguments(argv)

    if args.extract_file:
        return extract_file(args.extract_file)

    try:
        if args.test_connection:
            return asyncio.run(test_connection())

        if args.analyze:
            return asyncio.run(analyze_url(args.analyze))

        logger.info("🚀 Starting Watson Image Tagger")
        asyncio.run(serve(args.host, args.port))
        return 0

    except KeyboardInterrupt:
        logger.info("⏹️  Service interrupted by user")
        return 0


if __name__ == "__main__":
    sys.exit(main())
