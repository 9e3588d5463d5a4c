"""AXL credentials kept in the system keyring, one entry per UCM server.

The username for a server lives under a host-scoped magic key and its
password under '<username>@<host>', so several clusters can be used from
the same machine. An empty host is the default entry.
"""
import logging
from typing import Tuple
from urllib.parse import urlparse

import keyring
import keyring.errors
from stdiomask import getpass

from cucmaxl.axl.configs import DEFAULT_PORT, USERNAME_MAGIC_KEY, ClientConfig
from cucmaxl.axl.exceptions import AXLCredentialsMissing
from cucmaxl.configs import KEYRING_SERVICE
from cucmaxl.connection import generate_proper_url

log = logging.getLogger(__name__)


def host_id(host: str) -> str:
    """'https://UCM.company.com:8443/' -> 'ucm.company.com'"""
    if not host:
        return ""
    return urlparse(generate_proper_url(host)).hostname or host


def _user_key(host: str) -> str:
    if server := host_id(host):
        return f"{USERNAME_MAGIC_KEY}@{server}"
    return USERNAME_MAGIC_KEY


def _password_key(username: str, host: str) -> str:
    if server := host_id(host):
        return f"{username}@{server}"
    return username


def get_credentials(host: str = "", enable_manual_entry=True) -> Tuple[str, str]:
    """Username and password stored for `host`.

    :param host: UCM server the credentials belong to, defaults to the default entry
    :param enable_manual_entry: Prompt for (and store) anything missing, defaults to True
    :return: (username, password), with empty strings for whatever is missing
        when `enable_manual_entry` is False
    """
    username = keyring.get_password(KEYRING_SERVICE, _user_key(host))
    password = None
    if username:
        password = keyring.get_password(KEYRING_SERVICE, _password_key(username, host))
    if username and password:
        return username, password

    if enable_manual_entry:
        return credentials_from_input(host)
    return username or "", ""


def credentials_from_input(host: str = "") -> Tuple[str, str]:
    where = f" for {host_id(host)}" if host else ""
    username = input(f"AXL username{where}: ").strip()
    password = getpass(prompt=f"AXL password for {username}: ")
    if not all((username, password)):
        raise AXLCredentialsMissing(host_id(host), username)
    write_credentials(username, password, host)
    return username, password


def write_credentials(username: str, password: str, host: str = "") -> None:
    keyring.set_password(KEYRING_SERVICE, _user_key(host), username)
    keyring.set_password(KEYRING_SERVICE, _password_key(username, host), password)
    log.info(f"Stored AXL credentials for {username} at {host_id(host) or 'default'}")


def delete_credentials(host: str = "") -> bool:
    """Forgets the credentials stored for `host`.

    :return: True if anything was removed
    """
    username, _ = get_credentials(host, enable_manual_entry=False)
    if not username:
        return False

    removed = False
    for key in (_password_key(username, host), _user_key(host)):
        try:
            keyring.delete_password(KEYRING_SERVICE, key)
            removed = True
        except keyring.errors.PasswordDeleteError:
            log.warning(f"No keyring entry '{key}' to delete")
    return removed


def config_from_keyring(
    host: str, api_version: str, port=DEFAULT_PORT, **kwargs
) -> ClientConfig:
    """Builds a `ClientConfig` for `host` with its stored credentials,
    prompting for them once if they are missing.
    """
    username, password = get_credentials(host)
    return ClientConfig(
        host=host,
        username=username,
        password=password,
        api_version=api_version,
        port=port,
        **kwargs,
    )
