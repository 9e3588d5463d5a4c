import asyncio

import httpx
import pytest
import xmltodict

from cucmaxl.axl.asyncaxl import AsyncAXL, task_string
from cucmaxl.axl.configs import ClientConfig
from cucmaxl.axl.exceptions import *
from cucmaxl.axl.reducer import Extracted
import tests.env as env

pytestmark = pytest.mark.asyncio

ROUTE_PLANS = (
    f'<routePlan uuid="{{A1}}"><dnOrPattern>{env.ROUTE_PLAN_PATTERN}</dnOrPattern>'
    f'<partition uuid="{{P1}}">{env.ROUTE_PLAN_PARTITION}</partition>'
    "<type>Translation</type><routeDetail/></routePlan>"
    f'<routePlan uuid="{{A2}}"><dnOrPattern>{env.ROUTE_PLAN_PATTERN}1</dnOrPattern>'
    f'<partition uuid="{{P1}}">{env.ROUTE_PLAN_PARTITION}</partition>'
    "<type>Directory Number</type><routeDetail>SEP001122334455</routeDetail></routePlan>"
)


def sent_operation(request: httpx.Request, operation: str) -> dict:
    tree = xmltodict.parse(request.content)
    return tree["soapenv:Envelope"]["soapenv:Body"][f"ns:{operation}"]


class TestRequests:
    async def test_headers_and_url(self):
        recorder = env.Recorder(env.axl_response("getPhone"))
        async with env.make_client(recorder) as ucm:
            await ucm.get_phone_by_name(env.PHONE_1_NAME)

        request = recorder.last
        assert request.method == "POST"
        assert str(request.url) == env.BASE_URL
        assert request.headers["SOAPAction"] == f"CUCM:DB ver={env.VERSION} getPhone"
        assert request.headers["Authorization"] == f"Basic {env.AUTH_TOKEN}"
        assert request.headers["Content-Type"] == "text/xml; charset=utf-8"

    async def test_envelope_namespace(self):
        recorder = env.Recorder(env.axl_response("getLine"))
        async with env.make_client(recorder) as ucm:
            await ucm.get_line("1000", "PT-Internal")

        content = recorder.last.content.decode()
        assert f'xmlns:ns="{env.AXL_NS}"' in content
        op = sent_operation(recorder.last, "getLine")
        assert op["pattern"] == "1000"
        assert op["routePartitionName"] == "PT-Internal"

    async def test_custom_port(self):
        recorder = env.Recorder(env.axl_response("getPhone"))
        ucm = AsyncAXL(
            env.USERNAME,
            env.PASSWORD,
            env.SERVER,
            env.VERSION,
            "9443",
            transport=httpx.MockTransport(recorder),
        )
        async with ucm:
            await ucm.get_phone_by_uuid(env.PHONE_1_UUID)
        assert str(recorder.last.url) == f"https://{env.SERVER}:9443/axl/"

    async def test_from_config(self):
        recorder = env.Recorder(env.axl_response("listLdapDirectory"))
        config = ClientConfig(env.SERVER, env.USERNAME, env.PASSWORD, "14.0")
        async with AsyncAXL.from_config(
            config, transport=httpx.MockTransport(recorder)
        ) as ucm:
            await ucm.list_ldap_directory()
        assert "ver=14.0 listLdapDirectory" in recorder.last.headers["SOAPAction"]

    async def test_unknown_operation_sends_nothing(self):
        recorder = env.Recorder(env.axl_response("getPhone"))
        async with env.make_client(recorder) as ucm:
            with pytest.raises(UnknownOperation):
                await ucm.execute("removePhone", name="SEP1")
        assert recorder.requests == []

    async def test_invalid_tag_sends_nothing(self):
        recorder = env.Recorder(env.axl_response("getPhone"))
        async with env.make_client(recorder) as ucm:
            with pytest.raises(TagNotValid):
                await ucm.get_phone_by_name("SEP1", return_tags=["notRealTag"])
        assert recorder.requests == []


class TestResults:
    async def test_list_route_plan(self):
        recorder = env.Recorder(env.axl_response("listRoutePlan", ROUTE_PLANS))
        async with env.make_client(recorder) as ucm:
            result = await ucm.list_route_plan(
                env.ROUTE_PLAN_PATTERN, env.ROUTE_PLAN_PARTITION
            )

        op = sent_operation(recorder.last, "listRoutePlan")
        assert op["searchCriteria"] == {
            "dnOrPattern": f"%{env.ROUTE_PLAN_PATTERN}",
            "partition": env.ROUTE_PLAN_PARTITION,
        }
        assert result.found
        assert type(result.value) == list
        assert len(result.value) == 2
        assert result.value[0]["dnOrPattern"] == env.ROUTE_PLAN_PATTERN
        assert result.value[0]["@uuid"] == "{A1}"
        assert result.value[1]["partition"] == {
            "@uuid": "{P1}",
            "#text": env.ROUTE_PLAN_PARTITION,
        }

    async def test_list_single_item_is_still_a_list(self):
        recorder = env.Recorder(
            env.axl_response("listTransPattern", "<transPattern><pattern>9.@</pattern></transPattern>")
        )
        async with env.make_client(recorder) as ucm:
            result = await ucm.list_trans_pattern("9.@")
        assert result.value == [{"pattern": "9.@"}]

    async def test_get_phone(self):
        recorder = env.Recorder(
            env.axl_response(
                "getPhone",
                f'<phone ctiid="12" uuid="{env.PHONE_1_UUID}"><name>{env.PHONE_1_NAME}</name>'
                f"<description>{env.PHONE_1_DESCRIPTION}</description></phone>",
            )
        )
        async with env.make_client(recorder) as ucm:
            result = await ucm.get_phone_by_name(
                env.PHONE_1_NAME, return_tags=["name", "description"]
            )
        assert result.value["description"] == env.PHONE_1_DESCRIPTION
        assert result.value["@uuid"] == env.PHONE_1_UUID

    async def test_get_phone_without_return_is_absent(self):
        recorder = env.Recorder(env.axl_response("getPhone"))
        async with env.make_client(recorder) as ucm:
            result = await ucm.get_phone_by_uuid(env.PHONE_1_UUID)
        assert isinstance(result, Extracted)
        assert not result
        assert result.get() is None

    async def test_get_trans_pattern(self):
        recorder = env.Recorder(
            env.axl_response("getTransPattern", "<transPattern><pattern>8XXX</pattern></transPattern>")
        )
        async with env.make_client(recorder) as ucm:
            result = await ucm.get_trans_pattern("{T1}")
        assert result.value == {"pattern": "8XXX"}
        assert sent_operation(recorder.last, "getTransPattern")["uuid"] == "{T1}"

    async def test_update_user_pin(self):
        recorder = env.Recorder(env.axl_response("updateUser", "{U1}"))
        async with env.make_client(recorder) as ucm:
            result = await ucm.update_user_pin("jdoe", "13579")

        op = sent_operation(recorder.last, "updateUser")
        assert op["userid"] == "jdoe"
        assert op["pin"] == "13579"
        assert op["pinCredentials"]["pinResetHackCount"] == "t"
        assert recorder.last.headers["SOAPAction"].endswith(" updateUser")
        assert result.found
        assert "ns:updateUserResponse" in result.value
        assert result.value["ns:updateUserResponse"]["return"] == "{U1}"

    async def test_update_phone(self):
        recorder = env.Recorder(env.axl_response("updatePhone", env.PHONE_1_UUID))
        async with env.make_client(recorder) as ucm:
            result = await ucm.update_phone_by_name(
                env.PHONE_1_NAME, {"description": "Conference room"}
            )
        op = sent_operation(recorder.last, "updatePhone")
        assert op["name"] == env.PHONE_1_NAME
        assert op["description"] == "Conference room"
        assert result.value["ns:updatePhoneResponse"]["return"] == env.PHONE_1_UUID

    async def test_update_line_by_uuid(self):
        recorder = env.Recorder(env.axl_response("updateLine", "{L1}"))
        async with env.make_client(recorder) as ucm:
            await ucm.update_line_by_uuid("{L1}", {"description": "Main"})
        op = sent_operation(recorder.last, "updateLine")
        assert op["uuid"] == "{L1}"
        assert op["description"] == "Main"

    async def test_update_line_by_number(self):
        recorder = env.Recorder(env.axl_response("updateLine", "{L1}"))
        async with env.make_client(recorder) as ucm:
            await ucm.update_line_by_number("1000", {"alertingName": "Lobby"}, "PT-Internal")
        op = sent_operation(recorder.last, "updateLine")
        assert op["pattern"] == "1000"
        assert op["routePartitionName"] == "PT-Internal"
        assert op["alertingName"] == "Lobby"

    async def test_do_ldap_sync(self):
        recorder = env.Recorder(env.axl_response("doLdapSync", "Sync initiated"))
        async with env.make_client(recorder) as ucm:
            result = await ucm.do_ldap_sync("{D1}")
        assert sent_operation(recorder.last, "doLdapSync")["sync"] == "t"
        assert result.value["ns:doLdapSyncResponse"]["return"] == "Sync initiated"

    async def test_execute_many_keeps_order(self):
        def answer(request: httpx.Request) -> httpx.Response:
            name = sent_operation(request, "getPhone")["name"]
            return httpx.Response(
                200,
                text=env.axl_response("getPhone", f"<phone><name>{name}</name></phone>"),
            )

        names = [f"SEP00000000000{i}" for i in range(5)]
        recorder = env.Recorder(answer)
        async with env.make_client(recorder) as ucm:
            results = await ucm.execute_many(
                "getPhoneByName", [{"name": n} for n in names]
            )
        assert [r.value["name"] for r in results] == names

    async def test_concurrent_calls_share_one_client(self):
        recorder = env.Recorder(env.axl_response("getLine", "<line><pattern>1</pattern></line>"))
        async with env.make_client(recorder) as ucm:
            results = await asyncio.gather(*[ucm.get_line(str(i)) for i in range(3)])
        assert all(r.value == {"pattern": "1"} for r in results)
        assert len(recorder.requests) == 3


class TestFailures:
    async def test_soap_fault(self):
        recorder = env.Recorder(
            (500, env.axl_fault("Item not valid: The specified Phone was not found"))
        )
        async with env.make_client(recorder) as ucm:
            with pytest.raises(AXLFault) as exc_info:
                await ucm.get_phone_by_name("SEPNOTREAL")

        fault = exc_info.value
        assert fault.status_code == 500
        assert fault.axlcode == "5007"
        assert fault.operation == "getPhone"
        assert "not found" in fault.message
        assert "5007" in fault.body

    async def test_fault_with_ok_status(self):
        recorder = env.Recorder(env.axl_fault("Bad request", "-1"))
        async with env.make_client(recorder) as ucm:
            with pytest.raises(AXLFault) as exc_info:
                await ucm.list_ldap_directory()
        assert exc_info.value.status_code == 200

    async def test_non_xml_error(self):
        recorder = env.Recorder((503, "Service Unavailable"))
        async with env.make_client(recorder) as ucm:
            with pytest.raises(AXLFault) as exc_info:
                await ucm.get_line("1000")
        assert exc_info.value.status_code == 503
        assert exc_info.value.body == "Service Unavailable"

    async def test_malformed_success(self):
        recorder = env.Recorder("<html><body>not xml")
        async with env.make_client(recorder) as ucm:
            with pytest.raises(AXLMalformedResponse) as exc_info:
                await ucm.get_line("1000")
        assert exc_info.value.body == "<html><body>not xml"

    async def test_invalid_credentials(self):
        recorder = env.Recorder((401, "Unauthorized"))
        async with env.make_client(recorder) as ucm:
            with pytest.raises(AXLInvalidCredentials) as exc_info:
                await ucm.get_line("1000")
        assert exc_info.value.username == env.USERNAME
        assert isinstance(exc_info.value, AXLFault)

    async def test_not_found(self):
        recorder = env.Recorder((404, "Not Found"))
        async with env.make_client(recorder) as ucm:
            with pytest.raises(AXLNotFoundError):
                await ucm.get_line("1000")

    async def test_timeout_skips_parsing(self, monkeypatch):
        def no_parsing(*args, **kwargs):
            raise AssertionError("response should not be parsed")

        monkeypatch.setattr("cucmaxl.axl.reducer.parse_response", no_parsing)
        recorder = env.Recorder(httpx.ReadTimeout("timed out"))
        async with env.make_client(recorder, timeout=0.5) as ucm:
            with pytest.raises(AXLTimeout) as exc_info:
                await ucm.get_phone_by_name(env.PHONE_1_NAME)
        assert exc_info.value.timeout == 0.5
        assert isinstance(exc_info.value, AXLTransportError)

    async def test_slow_response_is_bounded(self):
        async def trickle(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(5)
            return httpx.Response(200, text=env.axl_response("getPhone"))

        recorder = env.Recorder(trickle)
        async with env.make_client(recorder, timeout=0.05) as ucm:
            with pytest.raises(AXLTimeout) as exc_info:
                await ucm.get_phone_by_name(env.PHONE_1_NAME)
        assert exc_info.value.timeout == 0.05

    async def test_identifier_in_fields_sends_nothing(self):
        recorder = env.Recorder(env.axl_response("updatePhone", env.PHONE_1_UUID))
        async with env.make_client(recorder) as ucm:
            with pytest.raises(TagNotValid):
                await ucm.update_phone_by_name("SEPAAA", {"name": "SEPBBB"})
        assert recorder.requests == []

    async def test_connection_refused(self):
        recorder = env.Recorder(httpx.ConnectError("connection refused"))
        async with env.make_client(recorder) as ucm:
            with pytest.raises(AXLConnectionFailure):
                await ucm.list_route_plan("1000")

    async def test_execute_many_propagates(self):
        recorder = env.Recorder((500, env.axl_fault("boom")))
        async with env.make_client(recorder) as ucm:
            with pytest.raises(AXLFault):
                await ucm.execute_many("getLine", [{"pattern": "1"}, {"pattern": "2"}])


class TestTasks:
    async def test_task_string(self):
        assert task_string(7) == "[0007]"
        assert task_string(12345) == "[12345]"
