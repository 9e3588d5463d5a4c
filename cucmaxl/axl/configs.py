from dataclasses import dataclass, field
import base64
import os
import re

from cucmaxl.axl.exceptions import (
    AXLCredentialsMissing,
    UCMVersionInvalid,
    URLInvalidError,
)
from cucmaxl.connection import axl_url
import validators

DEFAULT_PORT: str = "8443"
DEFAULT_TIMEOUT: float = 8.0

SOAP_ENV_NS: str = "http://schemas.xmlsoap.org/soap/envelope/"
AXL_NS_PREFIX: str = "http://www.cisco.com/AXL/API/"
SOAP_ACTION_PREFIX: str = "CUCM:DB"
PLACEHOLDER: str = "?"

USERNAME_MAGIC_KEY: str = "cR2v9mWqX0LbT7sNfJ4e"
HOST_MAGIC_KEY: str = "p8QeZk3yHd1GuVw6AoLs"
VERSION_MAGIC_KEY: str = "Yt5nMj2xRc7BqWe0FiKg"

VERSION_PATTERN = re.compile(r"^\d{1,2}(?:\.\d{1,2})?$")


@dataclass(frozen=True)
class ClientConfig:
    """Connection settings for one AXL client.

    The auth token and base URL are derived once, here, and never
    recomputed per call.
    """

    host: str
    username: str
    password: str = field(repr=False)
    api_version: str
    port: str = DEFAULT_PORT
    timeout: float = DEFAULT_TIMEOUT
    verify: bool = True
    auth_token: str = field(init=False, repr=False)
    base_url: str = field(init=False)

    def __post_init__(self) -> None:
        if not self.host or not isinstance(self.host, str):
            raise URLInvalidError(str(self.host))
        if not all((self.username, self.password)):
            raise AXLCredentialsMissing(self.host, self.username)
        if not self.api_version or not VERSION_PATTERN.match(str(self.api_version)):
            raise UCMVersionInvalid(str(self.api_version))
        if self.timeout is None or float(self.timeout) <= 0:
            raise URLInvalidError(self.host, f"timeout must be positive, got {self.timeout}")

        url = axl_url(self.host, self.port)
        if not validators.url(url, simple_host=True):
            raise URLInvalidError(url)

        token = base64.b64encode(f"{self.username}:{self.password}".encode("utf-8"))
        object.__setattr__(self, "auth_token", token.decode("ascii"))
        object.__setattr__(self, "base_url", url)

    @property
    def namespace(self) -> str:
        return AXL_NS_PREFIX + self.api_version

    @classmethod
    def from_env(cls, environ=None) -> "ClientConfig":
        """Builds a config from `CUCM`, `AXLUSER`, `AXLPASS` and `AXLVERSION`.

        `AXLPORT`, `AXLTIMEOUT` and `AXLVERIFY` are optional.
        """
        if environ is None:
            environ = os.environ
        kwargs = {
            "host": environ.get("CUCM", ""),
            "username": environ.get("AXLUSER", ""),
            "password": environ.get("AXLPASS", ""),
            "api_version": environ.get("AXLVERSION", ""),
        }
        if port := environ.get("AXLPORT"):
            kwargs["port"] = port
        if timeout := environ.get("AXLTIMEOUT"):
            try:
                kwargs["timeout"] = float(timeout)
            except ValueError:
                raise URLInvalidError(
                    kwargs["host"], f"AXLTIMEOUT is not a number: {timeout}"
                ) from None
        if (verify := environ.get("AXLVERIFY")) is not None:
            kwargs["verify"] = verify.strip().lower() not in ("0", "false", "no", "off")
        return cls(**kwargs)
