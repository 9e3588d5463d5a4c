from cucmaxl.axl.asyncaxl import AsyncAXL
from cucmaxl.axl.catalog import CATALOG, APICall, OperationSpec
from cucmaxl.axl.configs import ClientConfig
from cucmaxl.axl.credentials import config_from_keyring, get_credentials
from cucmaxl.axl.reducer import Extracted
