"""Effective host settings as ssh would resolve them."""

from pathlib import Path

from paramiko.config import SSHConfig

from sshconfman.errors import SourceUnavailableError
from sshconfman.types import ResolvedHost


def resolve_host(config_path: Path, alias: str) -> ResolvedHost:
    """
    Resolve an alias against the SSH config using ssh's matching rules.

    Unlike the parsed records, this applies wildcards and first-match-wins
    across all Host blocks.

    Raises:
        SourceUnavailableError: If the config file cannot be read
    """
    try:
        config = SSHConfig.from_path(str(config_path))
    except OSError as e:
        raise SourceUnavailableError(
            "Cannot read SSH config",
            context={"path": config_path},
            original_error=e,
        ) from e

    host_config = config.lookup(alias)

    port = 22
    if "port" in host_config:
        try:
            port = int(host_config["port"])
        except ValueError:
            pass

    identity_files = host_config.get("identityfile", [])
    identity_file = identity_files[0] if identity_files else None

    return ResolvedHost(
        alias=alias,
        hostname=host_config.get("hostname", alias),
        user=host_config.get("user"),
        port=port,
        identity_file=identity_file,
    )
