"""
CLI entry point for the Build Log web server.

Usage:
    python -m buildlog.web --port 8080
    buildlog-web --config buildlog.yaml --seed builds.yaml
"""

import argparse

import uvicorn


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Build Log Web Server",
        prog="buildlog-web",
    )
    parser.add_argument(
        "-c", "--config",
        default=None,
        help="Path to YAML config file",
    )
    parser.add_argument(
        "-s", "--seed",
        default=None,
        help="YAML file with builds to load at startup",
    )
    parser.add_argument(
        "--log-dir",
        default=None,
        help="Directory for generated build logs",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Server port (default: from config, 8080)",
    )
    parser.add_argument(
        "--host",
        default=None,
        help="Server host (default: from config, 0.0.0.0)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: from config, INFO)",
    )

    args = parser.parse_args()

    from ..config import BuildLogConfig
    from ..utils.logging import setup_logging
    from .server import create_app

    config = BuildLogConfig.load(args.config) if args.config else BuildLogConfig()
    if args.seed:
        config.seed_file = args.seed
    if args.log_dir:
        config.log_dir = args.log_dir
    if args.port:
        config.port = args.port
    if args.host:
        config.host = args.host
    if args.log_level:
        config.log_level = args.log_level

    setup_logging(config)
    app = create_app(config=config)

    print("\n  Build Log Web Server")
    print(f"  URL: http://{config.host}:{config.port}")
    print(f"  Log directory: {config.get_log_dir()}")
    print()

    uvicorn.run(
        app,
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
