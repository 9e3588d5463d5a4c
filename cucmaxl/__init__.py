from cucmaxl.axl import AsyncAXL, ClientConfig, Extracted, get_credentials
