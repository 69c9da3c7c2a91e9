"""Application entry point for the Pinnote backend server."""

from pinnote.app import App
from pinnote.config import Config
from pinnote.logging import setup_logging
from pinnote.web.runner import run_server


def main() -> None:
    config = Config()
    setup_logging(config.debug)
    app = App(config)
    run_server(app, config)


if __name__ == "__main__":
    main()
