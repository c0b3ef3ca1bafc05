import argparse

import uvicorn

from caption_gateway.config import load_config
from caption_gateway.log_config import setup_logger
from caption_gateway.server import create_app


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="caption-gateway", description="Run the caption gateway server")
    parser.add_argument("--config", default=None, help="Path to a YAML config file")
    parser.add_argument("--host", default=None, help="Override the configured bind host")
    parser.add_argument("--port", type=int, default=None, help="Override the configured bind port")
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    setup_logger(args.log_level.upper())

    config = load_config(args.config)
    app = create_app(config)
    uvicorn.run(
        app,
        host=args.host or config.host,
        port=args.port or config.port,
        log_level=args.log_level.lower(),
    )


if __name__ == "__main__":
    main()
