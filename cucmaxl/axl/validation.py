from typing import Mapping
from xml.parsers.expat import ExpatError

import httpx
import xmltodict

from cucmaxl.axl.configs import DEFAULT_PORT, DEFAULT_TIMEOUT, VERSION_PATTERN
from cucmaxl.axl.exceptions import (
    UCMVersionInvalid,
    UDSConnectionError,
    UDSParseError,
)
from cucmaxl.connection import uds_version_url


def concise_version(raw_version: str) -> str:
    """'14.0.1.12900(161)' -> '14.0'"""
    concise = ".".join(raw_version.split(".")[:2])
    if not VERSION_PATTERN.match(concise):
        raise UCMVersionInvalid(raw_version)
    return concise


def _find_version(tree: Mapping) -> str:
    for root in tree.values():
        if isinstance(root, Mapping):
            if (version := root.get("@version")) is not None:
                return version
            if isinstance(version := root.get("version"), str):
                return version
    return ""


async def detect_ucm_version(
    ucm_url: str,
    port=DEFAULT_PORT,
    *,
    verify: bool = True,
    timeout: float = DEFAULT_TIMEOUT,
    transport: httpx.AsyncBaseTransport = None,
) -> str:
    """Finds the UCM version of the server through its UDS service.

    Parameters
    ----------
    ucm_url : str
        The base URL of the UCM server.
    port : str, optional
        The port that UCM services can be accessed at, by default "8443"

    Returns
    -------
    str
        The version number found (first two digits only), usable as an AXL version

    Raises
    ------
    UDSConnectionError
        if connection to the CUCM UDS service fails
    UDSParseError
        if the version cannot be parsed from the returned XML
    """
    url = uds_version_url(ucm_url, port)

    async with httpx.AsyncClient(
        verify=verify, timeout=timeout, transport=transport
    ) as client:
        try:
            recv = await client.get(url)
        except httpx.TransportError as err:
            raise UDSConnectionError(url) from err

    if recv.status_code != 200:
        raise UDSConnectionError(url)
    try:
        tree = xmltodict.parse(recv.text)
    except ExpatError:
        raise UDSConnectionError(url) from None

    if not (raw_version := _find_version(tree)):
        raise UDSParseError(url, "version", recv.text)
    try:
        return concise_version(raw_version)
    except UCMVersionInvalid:
        raise UDSParseError(url, "version", recv.text) from None
