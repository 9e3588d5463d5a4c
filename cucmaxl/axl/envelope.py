from typing import Any, Mapping

import xmltodict

from cucmaxl.axl.configs import AXL_NS_PREFIX, SOAP_ENV_NS

ENVELOPE_TEMPLATE = (
    '<soapenv:Envelope xmlns:soapenv="{soap_ns}" xmlns:ns="{axl_ns}">'
    "<soapenv:Header/>"
    "<soapenv:Body>"
    '<ns:{operation} sequence="?">{fragment}</ns:{operation}>'
    "</soapenv:Body>"
    "</soapenv:Envelope>"
)


def build_envelope(api_version: str, operation_name: str, body_fragment: str) -> str:
    """Wraps `body_fragment` in the AXL request envelope.

    The fragment is placed inside the `ns:<operation_name>` element and is not
    checked for well-formedness.

    :param api_version: AXL schema version, used verbatim in the vendor namespace
    :param operation_name: AXL operation (i.e. 'getPhone')
    :param body_fragment: Children of the operation element
    :return: The full envelope
    """
    return ENVELOPE_TEMPLATE.format(
        soap_ns=SOAP_ENV_NS,
        axl_ns=AXL_NS_PREFIX + api_version,
        operation=operation_name,
        fragment=body_fragment,
    )


def render_fragment(body: Mapping[str, Any]) -> str:
    """Turns an xmltodict-style mapping into an XML fragment (no declaration).

    Keys starting with '@' become attributes and '#text' becomes element text.
    A mapping with several top-level keys renders them as siblings, in order.
    """
    if not body:
        return ""
    return xmltodict.unparse(body, full_document=False, short_empty_elements=True)
