"""Turns raw AXL responses into plain data.

The XML is parsed into a generic tree with xmltodict, then a fixed key path
is walked down to the payload. A missing key anywhere on the path is a
normal "no data" result, represented by an absent `Extracted`.
"""
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence, Union
from xml.parsers.expat import ExpatError

import xmltodict

from cucmaxl.axl.configs import AXL_NS_PREFIX, SOAP_ENV_NS
from cucmaxl.axl.exceptions import AXLMalformedResponse
from cucmaxl.utils import Empty

SOAP_PREFIX = "soapenv"
AXL_PREFIX = "ns"

ENVELOPE_KEY = f"{SOAP_PREFIX}:Envelope"
BODY_KEY = f"{SOAP_PREFIX}:Body"
FAULT_KEY = f"{SOAP_PREFIX}:Fault"
RETURN_KEY = "return"


class _PrefixMap(dict):
    """Maps every AXL schema version namespace to the same 'ns' prefix."""

    def __missing__(self, namespace: str) -> str:
        if namespace.startswith(AXL_NS_PREFIX):
            return AXL_PREFIX
        raise KeyError(namespace)


@dataclass(frozen=True)
class Extracted:
    """Result of walking an extraction path: either a value, or absent.

    `value` is only meaningful when `found` is True. An element that exists
    but is empty is found, with a value of None.
    """

    value: Any = Empty
    path: tuple = field(default=(), compare=False)

    @classmethod
    def absent(cls, path: Sequence = ()) -> "Extracted":
        return cls(Empty, tuple(path))

    @property
    def found(self) -> bool:
        return self.value is not Empty

    def get(self, default=None) -> Any:
        return self.value if self.found else default

    def __bool__(self) -> bool:
        return self.found

    def __repr__(self) -> str:
        path = ".".join(str(p) for p in self.path)
        if not self.found:
            return f"Extracted(absent, path={path!r})"
        return f"Extracted(value={self.value!r}, path={path!r})"


def parse_response(raw_body: Union[str, bytes], force_list: Sequence[str] = ()) -> dict:
    """Parses an XML response into nested dicts/lists/strings.

    Elements are keyed by qualified tag name, with the SOAP envelope namespace
    always under 'soapenv:' and any AXL namespace under 'ns:'. Attributes
    are kept as '@name' keys. Tags in `force_list` always parse as lists.

    :raises AXLMalformedResponse: when `raw_body` isn't well-formed XML
    """
    if raw_body is None:
        raise AXLMalformedResponse("", "empty response")
    try:
        return xmltodict.parse(
            raw_body,
            process_namespaces=True,
            namespaces=_PrefixMap({SOAP_ENV_NS: SOAP_PREFIX}),
            force_list=tuple(force_list) or None,
        )
    except ExpatError as err:
        if isinstance(raw_body, bytes):
            raw_body = raw_body.decode("utf-8", errors="replace")
        raise AXLMalformedResponse(raw_body, err) from err


def response_key(operation: str) -> str:
    if not operation.endswith("Response"):
        operation += "Response"
    return f"{AXL_PREFIX}:{operation}"


def extraction_path(
    response_element: Optional[str] = None, sub_path: Sequence = ()
) -> tuple:
    """envelope -> body [-> ns:<op>Response -> return -> *sub_path]"""
    path = (ENVELOPE_KEY, BODY_KEY)
    if response_element is None:
        return path
    return path + (response_key(response_element), RETURN_KEY) + tuple(sub_path)


def walk(tree: Any, path: Sequence) -> Extracted:
    node = tree
    for key in path:
        if isinstance(node, Mapping) and key in node:
            node = node[key]
        elif isinstance(node, list) and isinstance(key, int) and -len(node) <= key < len(node):
            node = node[key]
        else:
            return Extracted.absent(path)
    return Extracted(node, tuple(path))


def reduce(
    raw_body: Union[str, bytes],
    response_element: Optional[str] = None,
    sub_path: Sequence = (),
    *,
    force_list: Sequence[str] = (),
) -> Extracted:
    """Parses `raw_body` and extracts the payload found at
    envelope -> body -> `response_element`Response -> return -> `sub_path`.

    With no `response_element` the whole body subtree is returned.
    """
    tree = parse_response(raw_body, force_list)
    return walk(tree, extraction_path(response_element, sub_path))


def find_fault(tree: Mapping) -> Optional[dict]:
    """Returns the SOAP fault's fields if the body holds one, else None."""
    fault = walk(tree, (ENVELOPE_KEY, BODY_KEY, FAULT_KEY))
    if not fault:
        return None
    node = fault.value if isinstance(fault.value, Mapping) else {}
    axl_error = walk(node, ("detail", "axlError")).get({})
    if not isinstance(axl_error, Mapping):
        axl_error = {}
    return {
        "faultcode": _as_text(node.get("faultcode")),
        "faultstring": _as_text(node.get("faultstring")),
        "axlcode": _as_text(axl_error.get("axlcode")),
        "axlmessage": _as_text(axl_error.get("axlmessage")),
    }


def _as_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, Mapping):
        return str(value.get("#text", ""))
    return str(value)
