from urllib.parse import urlparse


def generate_proper_url(url: str, port="0") -> str:
    if not url.startswith("http://") and not url.startswith("https://"):
        url = "https://" + url

    url_parts = urlparse(url)
    scheme = url_parts.scheme
    netloc = url_parts.hostname or url_parts.netloc
    urlpath = url_parts.path

    if port == "0":
        return f"{scheme}://{netloc}{urlpath}"
    else:
        return f"{scheme}://{netloc}:{port}{urlpath}"


def _with_path(url: str, path: str) -> str:
    if url.endswith("/"):
        return url + path
    else:
        return url + "/" + path


def axl_url(host: str, port="8443") -> str:
    """Returns the AXL endpoint for `host`, e.g. 'https://ucm.company.com:8443/axl/'"""
    return _with_path(generate_proper_url(host, port), "axl/")


def uds_version_url(host: str, port="8443") -> str:
    """Returns the UDS version resource for `host`."""
    return _with_path(generate_proper_url(host, port), "cucm-uds/version")
