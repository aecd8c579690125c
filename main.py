"""Entracker Main Application."""

import asyncio
import sys

import uvicorn
from pydantic import ValidationError

from entracker import ENTRACKER_HEADER, log
from entracker.config.settings import get_config
from entracker.web.app import create_app


def validate_configuration() -> bool:
    """Validate the application configuration and report missing integrations.

    Missing API keys are reported but not fatal: the affected endpoints answer
    with a configuration error instead.

    Returns:
        bool: True if configuration is valid, False otherwise
    """
    try:
        config = get_config()
        log.info(f"Entracker: {config!s}")

        if not config.google_credentials_base64 and not (
            config.google_credentials_path.is_file()
        ):
            log.warning(
                "Entracker: No Google credentials found at "
                f"$$'{config.google_credentials_path}'$$ and "
                "GOOGLE_CREDENTIALS_BASE64 is not set"
            )
        return True
    except ValidationError as e:
        log.error(f"Entracker: Configuration validation failed: {e}")
        return False
    except (OSError, PermissionError) as e:
        log.error(f"Entracker: File system error during configuration: {e}")
        return False


async def run() -> int:
    """Serve the web API until shutdown.

    Returns:
        int: Exit code (0 for success, 1 for error)
    """
    log.info("\n" + ENTRACKER_HEADER)

    if not validate_configuration():
        return 1

    config = get_config()
    uv_config = uvicorn.Config(
        create_app(),
        host=config.host,
        port=config.port,
        log_config=None,
        loop="asyncio",
        proxy_headers=True,
        forwarded_allow_ips="*",
    )
    server = uvicorn.Server(uv_config)

    try:
        log.success(
            "Entracker: Server running at "
            f"\033[92mhttp://{config.host}:{config.port} (ctrl+c to stop)\033[0m"
        )
        await server.serve()
    except asyncio.CancelledError:
        log.info("Entracker: Application cancelled")
        return 0
    except OSError as e:
        log.error(f"Entracker: Failed to start server: {e}")
        return 1
    except Exception as e:
        log.error(f"Entracker: Unexpected application error: {e}", exc_info=True)
        return 1

    log.success("Entracker: Application shutdown complete")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Args:
        argv (list[str] | None): Command-line arguments (unused).

    Returns:
        int: Exit code (0 for success, 1 for error)
    """
    try:
        return asyncio.run(run())
    except KeyboardInterrupt:
        log.info("Entracker: Application interrupted")
        return 0
    except Exception as e:
        log.error(f"Entracker: Fatal error: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
