import asyncio
from copy import copy
import logging
from logging.handlers import RotatingFileHandler
from typing import Any, Mapping, Sequence

import httpx

import cucmaxl.configs as rootcfg
from cucmaxl.axl import reducer
from cucmaxl.axl.catalog import OperationSpec, get_operation
from cucmaxl.axl.configs import DEFAULT_PORT, DEFAULT_TIMEOUT, ClientConfig
from cucmaxl.axl.envelope import build_envelope
from cucmaxl.axl.exceptions import (
    AXLFault,
    AXLInvalidCredentials,
    AXLMalformedResponse,
    AXLNotFoundError,
)
from cucmaxl.axl.helpers import loggable_params, operation_tag
from cucmaxl.axl.reducer import Extracted
from cucmaxl.axl.transport import AXLTransport, RawResponse, soap_headers

# LOGGING SETTINGS
logdir = rootcfg.LOG_DIR
if not logdir.is_dir():
    logdir.mkdir(parents=True, exist_ok=True)
log = logging.getLogger(__name__)
log.setLevel(logging.DEBUG)
f_format = logging.Formatter(
    "%(asctime)s [%(levelname)s]:%(name)s:%(funcName)s - %(message)s"
)
s_format = logging.Formatter("[%(levelname)s]:%(name)s:%(funcName)s - %(message)s")
f_handler = RotatingFileHandler(
    rootcfg.LOG_DIR / f"{__name__}.log",
    maxBytes=(1024 * 1024 * 5),
    backupCount=3,
)
f_handler.setLevel(logging.DEBUG)
f_handler.setFormatter(f_format)
s_handler = logging.StreamHandler()
s_handler.setLevel(logging.WARNING)
s_handler.setFormatter(s_format)
log.addHandler(f_handler)
log.addHandler(s_handler)
log.info(f"----- NEW {__name__} SESSION -----")

# SYNC PRIMITIVES
TASK_COUNTER = 0
TASK_COUNT_LOCK = asyncio.Lock()


class AsyncAXL:
    """An asynchronous interface for the AXL API."""

    def __init__(
        self,
        username: str,
        password: str,
        server: str,
        version: str,
        port=DEFAULT_PORT,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        verify: bool = True,
        transport: httpx.AsyncBaseTransport = None,
    ) -> None:
        """Set up a client for your UCM's AXL service. Nothing is sent over the network here.

        :param username: A user with AXL permissions
        :param password: Password for the given user
        :param server: Base URL for your UCM server (i.e. 'ucm.company.com')
        :param version: AXL schema version of the server (i.e. '12.5')
        :param port: Port on the server where UCM can be accessed, defaults to "8443"
        :param timeout: Seconds to wait for each request, defaults to 8
        :param verify: Verify the server's TLS certificate, defaults to True
        :param transport: Optional httpx transport, mostly useful for testing
        """
        config = ClientConfig(
            host=server,
            username=username,
            password=password,
            api_version=version,
            port=port,
            timeout=timeout,
            verify=verify,
        )
        self._setup(config, transport)

    @classmethod
    def from_config(
        cls, config: ClientConfig, *, transport: httpx.AsyncBaseTransport = None
    ) -> "AsyncAXL":
        ucm = cls.__new__(cls)
        ucm._setup(config, transport)
        return ucm

    def _setup(self, config: ClientConfig, transport) -> None:
        self.config = config
        self.transport = AXLTransport(config, transport=transport)
        log.info(f"AXL Async client created for {config.base_url} (v{config.api_version})")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_value, traceback):
        await self.aclose()

    async def aclose(self) -> None:
        await self.transport.aclose()

    #################################
    # ==== TEMPLATES & HELPERS ==== #
    #################################

    def build_request(self, operation: str, **params) -> tuple[OperationSpec, str, dict]:
        """Builds the envelope and headers for `operation` without sending anything.

        :param operation: Catalog operation (i.e. 'getPhoneByName')
        :param params: Operation parameters
        :return: The operation spec, the envelope and the request headers
        """
        spec = get_operation(operation)
        if missing := spec.missing_params(params):
            log.warning(
                f"{operation} is missing {missing}, sending empty values instead"
            )
        envelope = build_envelope(self.config.api_version, spec.name, spec.render(params))
        return spec, envelope, soap_headers(self.config, spec.name)

    async def execute(
        self, operation: str, task_number: int = None, **params
    ) -> Extracted:
        """Performs one catalog operation: build the envelope, POST it, and
        extract the operation's payload from the response.

        :param operation: Catalog operation (i.e. 'getPhoneByName')
        :param task_number: Override the logged task number, useful for batch operations, defaults to None
        :param params: Operation parameters
        :return: The extracted payload, absent when the response holds no matching record
        """
        spec, envelope, headers = self.build_request(operation, **params)

        if task_number is None:
            task_number = await checkout_task()
        current_task = task_string(task_number)

        log.info(
            f"{current_task} Performing {spec.action.value} ({operation}) for {loggable_params(params)}"
        )
        try:
            recv = await self.transport.send("", envelope.encode("utf-8"), headers)
        except Exception:
            log.exception(f"{current_task} {operation} could not be sent")
            raise

        result = self._reduce(spec, recv, current_task)
        if result.found:
            log.info(f"{current_task} Completed successfully")
        else:
            log.info(f"{current_task} Completed, but no item was returned")
        return result

    async def execute_many(
        self, operation: str, params_list: Sequence[Mapping[str, Any]]
    ) -> list[Extracted]:
        """Runs `operation` once per entry of `params_list` concurrently.

        :return: Results, in the same order as `params_list`
        """
        task_number = await checkout_task()
        log.debug(f"Starting {len(params_list)} {operation} tasks...")
        results = await asyncio.gather(
            *[
                self.execute(operation, task_number=task_number, **params)
                for params in params_list
            ]
        )
        log.debug(
            f"Finished {len(params_list)} {operation} tasks, returned {len([r for r in results if r])} items"
        )
        return results

    def _reduce(self, spec: OperationSpec, recv: RawResponse, current_task: str) -> Extracted:
        if recv.status_code == 401:
            log.error(f"{current_task} Credentials rejected for {self.config.username}")
            raise AXLInvalidCredentials(spec.name, self.config.username, recv.body)
        if recv.status_code == 404:
            log.error(f"{current_task} AXL not found at {self.config.base_url}")
            raise AXLNotFoundError(spec.name, self.config.base_url, recv.body)

        success = 200 <= recv.status_code < 300
        try:
            tree = reducer.parse_response(recv.body, spec.force_list)
        except AXLMalformedResponse as err:
            if success:
                log.exception(f"{current_task} {spec.name} returned a malformed response")
                raise
            log.error(f"{current_task} {spec.name} failed with HTTP {recv.status_code}")
            raise AXLFault(spec.name, recv.status_code, recv.body) from err

        fault = reducer.find_fault(tree)
        if fault is not None or not success:
            exc = AXLFault(spec.name, recv.status_code, recv.body, **(fault or {}))
            log.error(f"{current_task} {exc}")
            raise exc

        if spec.response_path is None:
            path = reducer.extraction_path()
        else:
            path = reducer.extraction_path(spec.name, spec.response_path)
        return reducer.walk(tree, path)

    async def check_connection(self) -> bool:
        """Checks that the AXL service answers and accepts the credentials.

        :raises AXLInvalidCredentials: when the credentials are rejected
        :raises AXLNotFoundError: when there is no AXL service at the base URL
        :return: True if AXL is reachable, False otherwise
        """
        recv = await self.transport.get("")
        if recv.status_code == 200:
            return True
        elif recv.status_code == 401:
            raise AXLInvalidCredentials("check_connection", self.config.username, recv.body)
        elif recv.status_code == 404:
            raise AXLNotFoundError("check_connection", self.config.base_url, recv.body)
        else:
            log.warning(f"Unexpected HTTP {recv.status_code} from {self.config.base_url}")
            return False

    ###########################
    # ==== ROUTE PLANNING ==== #
    ###########################

    @operation_tag("listRoutePlan")
    async def list_route_plan(
        self, pattern: str, partition: str = None, *, return_tags: list[str] = None
    ) -> Extracted:
        return await self.execute(
            "listRoutePlan", pattern=pattern, partition=partition, return_tags=return_tags
        )

    @operation_tag("listTransPattern")
    async def list_trans_pattern(
        self, pattern: str, *, return_tags: list[str] = None
    ) -> Extracted:
        return await self.execute(
            "listTransPattern", pattern=pattern, return_tags=return_tags
        )

    @operation_tag("getTransPattern")
    async def get_trans_pattern(
        self, uuid: str, *, return_tags: list[str] = None
    ) -> Extracted:
        return await self.execute("getTransPattern", uuid=uuid, return_tags=return_tags)

    ####################
    # ==== PHONES ==== #
    ####################

    @operation_tag("getPhoneByUUID")
    async def get_phone_by_uuid(
        self, uuid: str, *, return_tags: list[str] = None
    ) -> Extracted:
        return await self.execute("getPhoneByUUID", uuid=uuid, return_tags=return_tags)

    @operation_tag("getPhoneByName")
    async def get_phone_by_name(
        self, name: str, *, return_tags: list[str] = None
    ) -> Extracted:
        return await self.execute("getPhoneByName", name=name, return_tags=return_tags)

    @operation_tag("updatePhoneByName")
    async def update_phone_by_name(
        self, name: str, fields: Mapping[str, Any] = None
    ) -> Extracted:
        return await self.execute("updatePhoneByName", name=name, fields=fields)

    @operation_tag("updatePhoneByUUID")
    async def update_phone_by_uuid(
        self, uuid: str, fields: Mapping[str, Any] = None
    ) -> Extracted:
        return await self.execute("updatePhoneByUUID", uuid=uuid, fields=fields)

    ###############################
    # ==== DIRECTORY NUMBERS ==== #
    ###############################

    @operation_tag("getLine")
    async def get_line(
        self,
        pattern: str,
        route_partition: str = None,
        *,
        return_tags: list[str] = None,
    ) -> Extracted:
        return await self.execute(
            "getLine",
            pattern=pattern,
            route_partition=route_partition,
            return_tags=return_tags,
        )

    @operation_tag("updateLineByNumber")
    async def update_line_by_number(
        self,
        number: str,
        fields: Mapping[str, Any] = None,
        route_partition: str = None,
    ) -> Extracted:
        return await self.execute(
            "updateLineByNumber",
            pattern=number,
            route_partition=route_partition,
            fields=fields,
        )

    @operation_tag("updateLineByUUID")
    async def update_line_by_uuid(
        self, uuid: str, fields: Mapping[str, Any] = None
    ) -> Extracted:
        return await self.execute("updateLineByUUID", uuid=uuid, fields=fields)

    ############################
    # ==== LDAP & USERS ==== #
    ############################

    @operation_tag("listLdapDirectory")
    async def list_ldap_directory(self, *, return_tags: list[str] = None) -> Extracted:
        return await self.execute("listLdapDirectory", return_tags=return_tags)

    @operation_tag("doLdapSync")
    async def do_ldap_sync(self, uuid: str, sync: bool = True) -> Extracted:
        return await self.execute("doLdapSync", uuid=uuid, sync=sync)

    @operation_tag("updateUserPin")
    async def update_user_pin(self, user: str, pin: str) -> Extracted:
        return await self.execute("updateUserPin", userid=user, pin=pin)


async def checkout_task() -> int:
    """Retrieves a task number for a single task"""
    global TASK_COUNT_LOCK
    global TASK_COUNTER

    lock = TASK_COUNT_LOCK
    async with lock:
        TASK_COUNTER += 1
        return copy(TASK_COUNTER)


def task_string(task_number: int) -> str:
    """Turns a given `task_number` into a zero-padded, formatted string"""
    return f"[{str(task_number).zfill(4)}]"
