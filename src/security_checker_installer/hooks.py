"""Install/update lifecycle handlers exposed to the host."""
import asyncio
from typing import Callable, Dict

from security_checker_installer.errors import InstallerError, UnknownEventError, log_error
from security_checker_installer.logging import get_logger
from security_checker_installer.provisioner import ensure_installed
from security_checker_installer.types import BinaryDirectoryProvider, InstallResult

logger = get_logger(__name__)

# Host event name -> handler name
SUBSCRIBED_EVENTS: Dict[str, str] = {
    "post-install-cmd": "install",
    "post-update-cmd": "update",
}


def binary_directory(config: BinaryDirectoryProvider) -> str:
    """Resolve the binary directory from the host configuration."""
    value = config.get_binary_directory()
    return value if isinstance(value, str) else ""


def download(bin_dir: str, force: bool) -> InstallResult:
    """Run the provisioner to completion for ``bin_dir``."""
    try:
        return asyncio.run(ensure_installed(bin_dir, force))
    except InstallerError as e:
        log_error(e, {"bin_dir": bin_dir, "force": force}, logger)
        raise


def install(config: BinaryDirectoryProvider) -> InstallResult:
    """Handle a fresh install: keep a binary that is already present."""
    return download(binary_directory(config), False)


def update(config: BinaryDirectoryProvider) -> InstallResult:
    """Handle an update: always check against the latest release."""
    return download(binary_directory(config), True)


HANDLERS: Dict[str, Callable[[BinaryDirectoryProvider], InstallResult]] = {
    "install": install,
    "update": update,
}


def dispatch(event_name: str, config: BinaryDirectoryProvider) -> InstallResult:
    """Route a host lifecycle event to its handler."""
    handler_name = SUBSCRIBED_EVENTS.get(event_name)
    if handler_name is None:
        raise UnknownEventError(event_name)

    logger.debug({"event": "dispatching", "name": event_name, "handler": handler_name})
    return HANDLERS[handler_name](config)
