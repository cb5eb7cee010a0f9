"""Application entry point for the webfiles server."""

from webfiles.app import App
from webfiles.config import Config
from webfiles.logging import setup_logging
from webfiles.web.runner import run_server


def main() -> None:
    config = Config()  # type: ignore[call-arg]
    setup_logging(config.debug)
    app = App(config)
    run_server(app, config)


if __name__ == "__main__":
    main()
