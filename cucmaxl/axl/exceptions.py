from typing import Sequence


class _ServerError(Exception):
    def __init__(self, server: str, *args: object) -> None:
        self.server = server
        super().__init__(*args)


class AXLClassException(Exception):
    pass


class DumbProgrammerException(Exception):
    pass


# * configuration


class AXLConfigurationError(_ServerError):
    def __str__(self) -> str:
        return f"Invalid AXL configuration for {self.server}"


class URLInvalidError(AXLConfigurationError):
    def __init__(self, server: str, reason: str = "", *args: object) -> None:
        self.reason = reason
        super().__init__(server, *args)

    def __str__(self) -> str:
        if self.reason:
            return f"{self.server} is not a valid URL: {self.reason}"
        return f"{self.server} is not a valid URL."


class AXLCredentialsMissing(AXLConfigurationError):
    def __init__(self, server: str, username: str, *args: object) -> None:
        self.username = username
        super().__init__(server, *args)

    def __str__(self) -> str:
        if not self.username:
            return f"No username was supplied for {self.server}"
        return f"No password was supplied for {self.username} at {self.server}"


class UCMVersionInvalid(AXLConfigurationError):
    def __init__(self, version: str, *args: object) -> None:
        self.version = version
        super().__init__("", *args)

    def __str__(self) -> str:
        return f"An invalid CUCM version was provided: '{self.version}'"


# * transport


class AXLTransportError(_ServerError):
    def __init__(self, server: str, err_cause=None, *args: object) -> None:
        self.err = err_cause
        super().__init__(server, *args)

    def __str__(self) -> str:
        if self.err is None:
            return f"An unknown issue occured when trying to reach {self.server}"
        return f"An error occured when trying to reach {self.server}: {self.err}"


class AXLConnectionFailure(AXLTransportError):
    def __str__(self) -> str:
        if self.err is None:
            return f"Could not connect to {self.server}, please check your connection or try again."
        return f"Could not connect to {self.server} ({self.err}), please check your connection or try again."


class AXLTimeout(AXLTransportError):
    def __init__(
        self, server: str, timeout: float = None, err_cause=None, *args: object
    ) -> None:
        self.timeout = timeout
        super().__init__(server, err_cause, *args)

    def __str__(self) -> str:
        if self.timeout is None:
            return f"Request to {self.server} timed out"
        return f"Request to {self.server} timed out after {self.timeout:.1f} sec"


# * remote


class AXLFault(Exception):
    """Non-success response from AXL. The raw body is always kept in `body`."""

    def __init__(
        self,
        operation: str,
        status_code: int,
        body: str,
        faultcode: str = "",
        faultstring: str = "",
        axlcode: str = "",
        axlmessage: str = "",
        *args: object,
    ) -> None:
        self.operation = operation
        self.status_code = status_code
        self.body = body
        self.faultcode = faultcode
        self.faultstring = faultstring
        self.axlcode = axlcode
        self.axlmessage = axlmessage
        super().__init__(*args)

    @property
    def message(self) -> str:
        return self.faultstring or self.axlmessage

    def __str__(self) -> str:
        s = f"{self.operation} failed with HTTP {self.status_code}"
        if self.message:
            s += f": {self.message}"
        if self.axlcode:
            s += f" (axlcode {self.axlcode})"
        return s


class AXLInvalidCredentials(AXLFault):
    def __init__(self, operation: str, username: str, body: str = "", *args) -> None:
        self.username = username
        super().__init__(operation, 401, body, *args)

    def __str__(self) -> str:
        return f"Credentials not accepted for {self.username} ({self.operation})"


class AXLNotFoundError(AXLFault):
    def __init__(self, operation: str, server: str, body: str = "", *args) -> None:
        self.server = server
        super().__init__(operation, 404, body, *args)

    def __str__(self) -> str:
        return f"Could not find AXL API at {self.server}, is the service activated?"


class AXLMalformedResponse(Exception):
    def __init__(self, body: str, err_cause=None, *args: object) -> None:
        self.body = body
        self.err = err_cause
        super().__init__(*args)

    def __str__(self) -> str:
        preview = self.body[:120] if isinstance(self.body, str) else repr(self.body)
        if self.err is None:
            return f"Response is not valid XML: {preview!r}"
        return f"Response is not valid XML ({self.err}): {preview!r}"


# * catalog


class UnknownOperation(AXLClassException):
    def __init__(self, operation: str, known: Sequence[str], *args: object) -> None:
        self.operation = operation
        self.known = list(known)
        super().__init__(*args)

    def __str__(self) -> str:
        return f"'{self.operation}' is not a supported operation. Supported operations are:\n{', '.join(self.known)}"


class TagNotValid(Exception):
    def __init__(self, tag: str, valid_tags: list[str], *args, elem_name="") -> None:
        self.tag = tag
        self.element = elem_name
        self.valid_tags = valid_tags
        super().__init__(*args)

    def __str__(self) -> str:
        if self.element:
            return f"'{self.tag}' is not a valid return tag for {self.element}. Valid tags are:\n{self.valid_tags}"
        else:
            return f"Invalid tag encountered: '{self.tag}'"


# * UDS (version detection)


class UDSConnectionError(_ServerError):
    def __str__(self) -> str:
        return f"Could not connect to CUCM UDS service at {self.server}"


class UDSParseError(Exception):
    def __init__(self, url: str, wanted: str, xml_text: str, *args: object) -> None:
        if "cucm-uds" in url:
            self.access_point = "cucm-uds" + url.split("cucm-uds")[-1]
        else:
            raise DumbProgrammerException(f"Malformed cucm-uds URI: {url}")
        self.wanted = wanted
        self.xml = xml_text
        super().__init__(*args)

    def __str__(self) -> str:
        return f"Could not find '{self.wanted}' at {self.access_point}"
