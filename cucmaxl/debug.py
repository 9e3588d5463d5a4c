import asyncio
import json
import sys

import keyring
from termcolor import colored

from cucmaxl.axl import AsyncAXL
from cucmaxl.axl.catalog import CATALOG, get_operation
from cucmaxl.axl.configs import (
    DEFAULT_PORT,
    HOST_MAGIC_KEY,
    VERSION_MAGIC_KEY,
    VERSION_PATTERN,
)
from cucmaxl.axl.credentials import config_from_keyring, delete_credentials
from cucmaxl.axl.envelope import build_envelope
from cucmaxl.axl.exceptions import (
    AXLClassException,
    AXLConfigurationError,
    AXLFault,
    AXLMalformedResponse,
    AXLTransportError,
    TagNotValid,
    UDSConnectionError,
    UDSParseError,
)
from cucmaxl.axl.validation import detect_ucm_version
from cucmaxl.configs import KEYRING_SERVICE
from cucmaxl.utils import print_signature

PORT_MAGIC_KEY = HOST_MAGIC_KEY + "-port"


def parse_cli_params(args: list[str]) -> dict:
    """['pattern=1000', 'fields={"description": "x"}'] -> {'pattern': '1000', 'fields': {...}}"""
    params = {}
    for arg in args:
        if "=" not in arg:
            raise ValueError(f"Expected key=value, got '{arg}'")
        key, value = arg.split("=", 1)
        if value[:1] in ("{", "["):
            value = json.loads(value)
        elif key == "return_tags":
            value = [v for v in value.split(",") if v]
        params[key] = value
    return params


def get_server() -> tuple[str, str]:
    host = keyring.get_password(KEYRING_SERVICE, HOST_MAGIC_KEY)
    port = keyring.get_password(KEYRING_SERVICE, PORT_MAGIC_KEY)
    if not host:
        new_host = input(
            "Please enter your CUCM URL (use ':[port]' if different than ':8443'): "
        )
        if (new_port := new_host.split(":")[-1]).isnumeric():
            host = new_host[: -(len(new_port) + 1)]
            port = new_port
        else:
            host = new_host
            port = DEFAULT_PORT
        keyring.set_password(KEYRING_SERVICE, HOST_MAGIC_KEY, host)
        keyring.set_password(KEYRING_SERVICE, PORT_MAGIC_KEY, port)
    return host, (port or DEFAULT_PORT)


def get_version(host: str = "", port=DEFAULT_PORT) -> str:
    if version := keyring.get_password(KEYRING_SERVICE, VERSION_MAGIC_KEY):
        return version

    version = ""
    if host:
        try:
            version = asyncio.run(detect_ucm_version(host, port))
            print(f"Found UCM version {version}")
        except (UDSConnectionError, UDSParseError) as e:
            print(f"Could not detect the UCM version ({e})")
    while not VERSION_PATTERN.match(version):
        version = input("Please enter the AXL version of your CUCM (i.e. 12.5): ").strip()
    keyring.set_password(KEYRING_SERVICE, VERSION_MAGIC_KEY, version)
    return version


def clear_server() -> None:
    for key in (HOST_MAGIC_KEY, PORT_MAGIC_KEY, VERSION_MAGIC_KEY):
        keyring.set_password(KEYRING_SERVICE, key, "")
    print("URL, port and version cleared")


def print_operations() -> None:
    methods = {
        getattr(m, "operation"): m
        for m in vars(AsyncAXL).values()
        if hasattr(m, "operation")
    }
    for key, spec in CATALOG.items():
        path = ".".join(("return",) + spec.response_path) if spec.response_path else "(body)"
        print(
            colored(key, "cyan"),
            f"-> {colored(spec.name, 'magenta')}",
            f"[{spec.action.value}]",
            f"returns {colored(path, 'yellow')}",
        )
        required = ", ".join(spec.required_params) or "none"
        optional = ", ".join(spec.optional_params) or "none"
        print(f"    required: {colored(required, 'red')}  optional: {optional}")
        if (method := methods.get(key)) is not None:
            print("    ", end="")
            print_signature(method, "AsyncAXL")
        print()


def print_envelope() -> None:
    if len(sys.argv) < 2:
        print("USAGE: axl_envelope [OPERATION] [key=value] [key=value] ...")
        return

    try:
        spec = get_operation(sys.argv[1])
        params = parse_cli_params(sys.argv[2:])
        version = get_version()
        print(build_envelope(version, spec.name, spec.render(params)))
    except (AXLClassException, TagNotValid, ValueError) as e:
        print(f"[ERROR]({sys.argv[1]}): {e}")


async def _call(operation: str, params: dict) -> None:
    host, port = get_server()
    version = get_version(host, port)
    async with AsyncAXL.from_config(config_from_keyring(host, version, port)) as ucm:
        result = await ucm.execute(operation, **params)
    if result.found:
        print(json.dumps(result.value, indent=2))
    else:
        print("No matching record")


def call_operation() -> None:
    if len(sys.argv) < 2:
        print("USAGE: axl_call [OPERATION] [key=value] [key=value] ...")
        return

    operation = sys.argv[1]
    try:
        params = parse_cli_params(sys.argv[2:])
        asyncio.run(_call(operation, params))
    except AXLFault as e:
        print(f"[FAULT]({operation}): {e}")
        print(e.body)
    except (
        AXLClassException,
        AXLConfigurationError,
        AXLTransportError,
        AXLMalformedResponse,
        TagNotValid,
        ValueError,
    ) as e:
        print(f"[ERROR]({operation}): {e}")


def clear_all() -> None:
    host = keyring.get_password(KEYRING_SERVICE, HOST_MAGIC_KEY) or ""
    clear_server()
    if delete_credentials(host):
        print(f"Credentials cleared for {host or 'default'}")
    else:
        print("No stored credentials")
