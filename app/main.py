"""Main module entrypoint for local runtime execution.

This module validates startup configuration and launches the FastAPI service.
"""

import argparse

import uvicorn

from app.bootstrap import bootstrap_create_application, bootstrap_create_context
from app.config import config_load_settings


def main() -> None:
    """Start the HTTP listener with validated startup configuration.

    Returns:
        None: This function does not return a runtime value.

    Raises:
        SettingsLoadError: Raised when configuration validation fails.
    """

    argument_parser = argparse.ArgumentParser(description="Auth API service entrypoint")
    argument_parser.add_argument("--host", dest="host", type=str, help="Override APPLICATION_HOST")
    argument_parser.add_argument("--port", dest="port", type=int, help="Override PORT")
    parsed_arguments = argument_parser.parse_args()

    settings = config_load_settings()
    overrides = {}
    if parsed_arguments.host:
        overrides["application_host"] = parsed_arguments.host
    if parsed_arguments.port:
        overrides["application_port"] = parsed_arguments.port
    if overrides:
        settings = settings.model_copy(update=overrides)

    application = bootstrap_create_application(bootstrap_create_context(settings))
    uvicorn.run(
        application,
        host=settings.application_host,
        port=settings.application_port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
