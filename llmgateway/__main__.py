"""Run the gateway with uvicorn: ``python -m llmgateway``."""

import argparse

import uvicorn

from .config_loader import load_config, load_settings
from .logging import setup_logging
from .main import create_app


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the LLM gateway")
    parser.add_argument(
        "--config",
        help="Path to the YAML config (default: LLM_GATEWAY_CONFIG or configs/config_default.yaml)",
    )
    parser.add_argument("--log-level", help="Logging level (default: INFO)")
    args = parser.parse_args()

    logger = setup_logging(args.log_level)
    try:
        config = load_config(args.config)
    except RuntimeError:
        if args.config:
            raise
        logger.info("No config file found, using environment variables only")
        config = {}

    settings = load_settings(config)
    app = create_app(settings)
    logger.info("Serving on %s:%s", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
