"""``codelab-sandbox``: serve the execution protocol on ``/ws``."""

from __future__ import annotations

import argparse
import logging

from codelab.sandbox.config import Config

LOG_LEVELS = ("debug", "info", "warning", "error")


def build_parser() -> argparse.ArgumentParser:
    defaults = Config()
    parser = argparse.ArgumentParser(
        prog="codelab-sandbox",
        description="Compile and run classroom Java and Python programs over a WebSocket.",
    )
    parser.add_argument("--host", default=defaults.host, help=f"Bind address (default: {defaults.host})")
    parser.add_argument("--port", type=int, default=defaults.port, help=f"Bind port (default: {defaults.port})")

    paths = parser.add_argument_group("paths")
    paths.add_argument("--work-dir", default=defaults.work_dir, help="Parent of the per-run temp folders")
    paths.add_argument("--libs-dir", default=defaults.libs_dir, help="Jars placed on every Java classpath")

    tools = parser.add_argument_group("toolchain")
    tools.add_argument("--python", dest="python_executable", default=defaults.python_executable)
    tools.add_argument("--javac", dest="javac_executable", default=defaults.javac_executable)
    tools.add_argument("--java", dest="java_executable", default=defaults.java_executable)

    parser.add_argument("--log-level", default="info", choices=LOG_LEVELS)
    return parser


def config_from_args(args: argparse.Namespace) -> Config:
    return Config(
        host=args.host,
        port=args.port,
        work_dir=args.work_dir,
        libs_dir=args.libs_dir,
        python_executable=args.python_executable,
        javac_executable=args.javac_executable,
        java_executable=args.java_executable,
    )


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    config = config_from_args(args)

    from codelab.sandbox.app import create_app

    app = create_app(config)

    import uvicorn

    uvicorn.run(app, host=config.host, port=config.port)


if __name__ == "__main__":
    main()
