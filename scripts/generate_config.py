#!/usr/bin/env python3
"""Generate a Server Survival configuration using the LLM pipeline.

This script runs the same generate / validate / retry loop the game uses and
prints the validated random events and traffic shifts as JSON.

Usage:
    # Print a configuration for a theme
    python scripts/generate_config.py --theme "zombie apocalypse" --difficulty hard

    # Write to a file with more attempts
    python scripts/generate_config.py \\
        --theme "black friday sale" \\
        --difficulty medium \\
        --attempts 5 \\
        --output configs/black_friday.json

The API key is read from SERVER_SURVIVAL_API_KEY (or OPENAI_API_KEY).

Exit codes:
    0: Success
    1: Generation failed or no API key configured
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

# Add src to path for development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from serversurvival.config import (
    MissingCredentialError,
    create_client,
    get_max_attempts,
    get_retry_delay,
)
from serversurvival.generation.config_generator import (
    ConfigGenerator,
    GenerationExhaustedError,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def generate_config_async(theme: str, difficulty: str, attempts: int) -> dict:
    """Generate a configuration asynchronously.

    Args:
        theme: Free-text theme
        difficulty: Difficulty label
        attempts: Maximum generation attempts

    Returns:
        Validated configuration in settings (camelCase) form
    """
    logger.info(f"Generating config: theme='{theme}', difficulty='{difficulty}'")

    async with create_client() as client:
        generator = ConfigGenerator(client, retry_delay=get_retry_delay())
        config = await generator.generate_with_retry(theme, difficulty, attempts)

    return config.to_settings()


def main():
    parser = argparse.ArgumentParser(
        description="Generate Server Survival random events and traffic shifts",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--theme",
        "-t",
        type=str,
        required=True,
        help="Free-text theme for the generated events",
    )
    parser.add_argument(
        "--difficulty",
        "-d",
        type=str,
        default="medium",
        help="Difficulty label passed to the model (default: medium)",
    )
    parser.add_argument(
        "--attempts",
        "-n",
        type=int,
        default=None,
        help="Maximum generation attempts (default: SERVER_SURVIVAL_MAX_ATTEMPTS or 3)",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=str,
        default=None,
        help="Write the configuration to this file instead of stdout",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log request and repair details",
    )
    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    attempts = args.attempts if args.attempts is not None else get_max_attempts()
    if attempts < 1:
        parser.error("--attempts must be at least 1")

    try:
        config = asyncio.run(generate_config_async(args.theme, args.difficulty, attempts))
    except MissingCredentialError as e:
        logger.error(str(e))
        return 1
    except GenerationExhaustedError as e:
        logger.error(str(e))
        for i, failure in enumerate(e.failures, 1):
            logger.error(f"  Attempt {i}: {failure}")
        return 1

    output = json.dumps(config, indent=2)
    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(output + "\n")
        logger.info(f"Saved configuration to {output_path}")
    else:
        print(output)

    return 0


if __name__ == "__main__":
    sys.exit(main())
