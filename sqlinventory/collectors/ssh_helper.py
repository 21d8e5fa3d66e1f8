"""Shared SSH utilities for host-facts and SPN collaborators."""

import base64
import json
import logging
import os
from typing import Any, List, Optional

try:
    import paramiko
except ImportError:
    paramiko = None

from ..config.models import HostFactsConfig


class SSHHelper:
    """Helper class for SSH operations against Windows hosts."""

    @staticmethod
    def create_client(
        host: str,
        config: HostFactsConfig,
        logger: logging.Logger,
        password: Optional[str] = None
    ) -> Optional[object]:
        """
        Create SSH client with key or password authentication.

        Args:
            host: Host name or address
            config: Host facts SSH configuration
            logger: Logger instance
            password: Password used when no key file is configured

        Returns:
            paramiko.SSHClient

        Raises:
            ImportError: If paramiko is not installed
            Exception: If connection fails
        """
        if paramiko is None:
            logger.error("paramiko library not installed")
            raise ImportError("paramiko library required for SSH connections")

        client = paramiko.SSHClient()
        client.set_missing_host_key_policy(paramiko.AutoAddPolicy())

        try:
            logger.debug(f"Connecting to {host}:{config.port} as {config.username}")

            client.connect(
                hostname=host,
                port=config.port,
                username=config.username,
                key_filename=os.path.expanduser(config.ssh_key_path) if config.ssh_key_path else None,
                password=password,
                timeout=config.timeout_seconds,
                banner_timeout=config.timeout_seconds
            )

            logger.debug(f"Successfully connected to {host}")
            return client

        except paramiko.AuthenticationException as e:
            logger.error(f"Authentication failed for {host}: {e}")
            raise

        except paramiko.SSHException as e:
            logger.error(f"SSH error connecting to {host}: {e}")
            raise

        except Exception as e:
            logger.error(f"Failed to connect to {host}: {e}")
            raise

    @staticmethod
    def exec_command(
        client: object,
        command: str,
        timeout: int = 30,
        logger: Optional[logging.Logger] = None
    ) -> str:
        """
        Execute command on SSH client and return stdout.

        Args:
            client: paramiko.SSHClient instance
            command: Command to execute
            timeout: Command timeout in seconds
            logger: Optional logger instance

        Returns:
            str: Command stdout

        Raises:
            RuntimeError: If command fails (non-zero exit code)
        """
        if logger:
            logger.debug(f"Executing command: {command[:120]}")

        stdin, stdout, stderr = client.exec_command(command, timeout=timeout)

        exit_code = stdout.channel.recv_exit_status()

        stdout_data = stdout.read().decode('utf-8', errors='replace')
        stderr_data = stderr.read().decode('utf-8', errors='replace')

        if exit_code != 0:
            error_msg = f"Command failed with exit code {exit_code}: {stderr_data.strip()}"
            if logger:
                logger.debug(error_msg)
            raise RuntimeError(error_msg)

        return stdout_data

    @staticmethod
    def run_powershell(
        client: object,
        script: str,
        timeout: int = 30,
        logger: Optional[logging.Logger] = None
    ) -> str:
        """
        Run a PowerShell script on the remote host.

        The script is sent as -EncodedCommand so quoting survives the SSH shell.
        """
        encoded = base64.b64encode(script.encode('utf-16-le')).decode('ascii')
        command = f"powershell -NoProfile -NonInteractive -EncodedCommand {encoded}"
        return SSHHelper.exec_command(client, command, timeout=timeout, logger=logger).strip()

    @staticmethod
    def loads_json_array(output: str) -> List[Any]:
        """
        Parse ConvertTo-Json output, which is a bare object for single rows.

        Raises:
            ValueError: If output is not valid JSON
        """
        if not output:
            return []
        data = json.loads(output)
        if data is None:
            return []
        return data if isinstance(data, list) else [data]

    @staticmethod
    def close_client(client: object, logger: Optional[logging.Logger] = None) -> None:
        """
        Close SSH client connection.

        Args:
            client: paramiko.SSHClient instance
            logger: Optional logger instance
        """
        try:
            if client:
                client.close()
                if logger:
                    logger.debug("SSH connection closed")
        except Exception as e:
            if logger:
                logger.warning(f"Error closing SSH connection: {e}")

    @staticmethod
    def is_available() -> bool:
        """
        Check if paramiko is available.

        Returns:
            bool: True if paramiko is installed
        """
        return paramiko is not None
