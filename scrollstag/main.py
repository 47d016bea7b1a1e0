"""Run the hero preview server.

    python -m scrollstag.main --slides slides.json --assets ./hero

Environment variables (prefix ``SCROLLSTAG_``) configure everything the
command line does not override.
"""

import logging

import uvicorn

from .config import HeroSettings


def main():
    """Run the preview server."""
    import argparse

    settings = HeroSettings()

    parser = argparse.ArgumentParser(description="ScrollStag hero preview")
    parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        help=f"HTTP port (default: {settings.PORT}, env: SCROLLSTAG_PORT)"
    )
    parser.add_argument(
        "--host", "-H",
        default=None,
        help=f"Host to bind to (default: {settings.HOST}, env: SCROLLSTAG_HOST)"
    )
    parser.add_argument(
        "--slides",
        default=None,
        help="JSON file with slide rows (env: SCROLLSTAG_SLIDES_FILE)"
    )
    parser.add_argument(
        "--assets",
        default=None,
        help="Directory serving frame URLs (env: SCROLLSTAG_ASSETS_DIR)"
    )
    parser.add_argument(
        "--frame-count",
        type=int,
        default=None,
        help=f"Frames per sequence (default: {settings.FRAME_COUNT}, env: SCROLLSTAG_FRAME_COUNT)"
    )
    parser.add_argument(
        "--log-level",
        default="info",
        choices=["debug", "info", "warning", "error"],
    )

    args = parser.parse_args()

    # CLI args > env vars > defaults
    overrides = {
        "PORT": args.port,
        "HOST": args.host,
        "SLIDES_FILE": args.slides,
        "ASSETS_DIR": args.assets,
        "FRAME_COUNT": args.frame_count,
    }
    settings = settings.model_copy(
        update={key: value for key, value in overrides.items() if value is not None}
    )

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    from .api import create_app

    print(f"[ScrollStag] Starting preview server on {settings.HOST}:{settings.PORT}")
    uvicorn.run(
        create_app(settings),
        host=settings.HOST,
        port=settings.PORT,
        log_level=args.log_level,
    )


if __name__ == "__main__":
    main()
