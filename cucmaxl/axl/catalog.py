"""The fixed set of AXL operations this package can perform.

Each entry pairs a vendor operation with the parameters it takes, a body
template producing the children of the operation element, and the path to
its payload below `return` (None when the whole response body is the result).
"""
from dataclasses import dataclass
from enum import Enum, unique
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional

from cucmaxl.axl.envelope import render_fragment
from cucmaxl.axl.exceptions import UnknownOperation
from cucmaxl.axl.schema import LDAP_DIRECTORY, LINE, PHONE, ROUTE_PLAN, TRANS_PATTERN


@unique
class APICall(Enum):
    GET = "GET"
    LIST = "LIST"
    UPDATE = "UPDATE"
    DO = "DO"


@dataclass(frozen=True)
class OperationSpec:
    name: str
    required_params: tuple
    body_template: Callable[[Mapping[str, Any]], str]
    response_path: Optional[tuple] = None
    action: APICall = APICall.GET
    force_list: tuple = ()
    optional_params: tuple = ()

    def missing_params(self, params: Mapping[str, Any]) -> list[str]:
        return [p for p in self.required_params if params.get(p) is None]

    def render(self, params: Mapping[str, Any]) -> str:
        return self.body_template(params)


def _param(params: Mapping[str, Any], name: str) -> Any:
    value = params.get(name)
    return "" if value is None else value


def _flag(value) -> str:
    if isinstance(value, str):
        return value
    return "t" if value else "f"


def _with_partition(criteria: dict, params: Mapping[str, Any]) -> dict:
    if (partition := params.get("route_partition")) is not None:
        criteria["routePartitionName"] = partition
    return criteria


# * list


def _list_route_plan(params: Mapping[str, Any]) -> str:
    criteria = {"dnOrPattern": f"%{_param(params, 'pattern')}"}
    if (partition := params.get("partition")) is not None:
        criteria["partition"] = partition
    return render_fragment(
        {
            "searchCriteria": criteria,
            "returnedTags": ROUTE_PLAN.returned_tags(params.get("return_tags")),
        }
    )


def _list_trans_pattern(params: Mapping[str, Any]) -> str:
    return render_fragment(
        {
            "searchCriteria": {"pattern": _param(params, "pattern")},
            "returnedTags": TRANS_PATTERN.returned_tags(params.get("return_tags")),
        }
    )


def _list_ldap_directory(params: Mapping[str, Any]) -> str:
    return render_fragment(
        {
            "searchCriteria": {"name": "%"},
            "returnedTags": LDAP_DIRECTORY.returned_tags(params.get("return_tags")),
        }
    )


# * get


def _get_phone_by_uuid(params: Mapping[str, Any]) -> str:
    return render_fragment(
        {
            "uuid": _param(params, "uuid"),
            "returnedTags": PHONE.returned_tags(params.get("return_tags")),
        }
    )


def _get_phone_by_name(params: Mapping[str, Any]) -> str:
    return render_fragment(
        {
            "name": _param(params, "name"),
            "returnedTags": PHONE.returned_tags(params.get("return_tags")),
        }
    )


def _get_line(params: Mapping[str, Any]) -> str:
    body = _with_partition({"pattern": _param(params, "pattern")}, params)
    body["returnedTags"] = LINE.returned_tags(params.get("return_tags"))
    return render_fragment(body)


def _get_trans_pattern(params: Mapping[str, Any]) -> str:
    return render_fragment(
        {
            "uuid": _param(params, "uuid"),
            "returnedTags": TRANS_PATTERN.returned_tags(params.get("return_tags")),
        }
    )


# * update / do


def _update_phone_by_name(params: Mapping[str, Any]) -> str:
    return render_fragment(
        {"name": _param(params, "name"), **PHONE.write_fields(params.get("fields"))}
    )


def _update_phone_by_uuid(params: Mapping[str, Any]) -> str:
    return render_fragment(
        {"uuid": _param(params, "uuid"), **PHONE.write_fields(params.get("fields"))}
    )


def _update_line_by_number(params: Mapping[str, Any]) -> str:
    body = _with_partition({"pattern": _param(params, "pattern")}, params)
    body.update(LINE.write_fields(params.get("fields")))
    return render_fragment(body)


def _update_line_by_uuid(params: Mapping[str, Any]) -> str:
    return render_fragment(
        {"uuid": _param(params, "uuid"), **LINE.write_fields(params.get("fields"))}
    )


def _do_ldap_sync(params: Mapping[str, Any]) -> str:
    sync = params.get("sync")
    return render_fragment(
        {
            "uuid": _param(params, "uuid"),
            "sync": _flag(True if sync is None else sync),
            "returnedTags": {"@uuid": "?"},
        }
    )


def _update_user_pin(params: Mapping[str, Any]) -> str:
    return render_fragment(
        {
            "userid": _param(params, "userid"),
            "pin": _param(params, "pin"),
            "pinCredentials": {"pinResetHackCount": "t"},
        }
    )


CATALOG: Mapping[str, OperationSpec] = MappingProxyType(
    {
        "listRoutePlan": OperationSpec(
            "listRoutePlan",
            ("pattern",),
            _list_route_plan,
            ("routePlan",),
            APICall.LIST,
            force_list=("routePlan",),
            optional_params=("partition", "return_tags"),
        ),
        "listTransPattern": OperationSpec(
            "listTransPattern",
            ("pattern",),
            _list_trans_pattern,
            ("transPattern",),
            APICall.LIST,
            force_list=("transPattern",),
            optional_params=("return_tags",),
        ),
        "listLdapDirectory": OperationSpec(
            "listLdapDirectory",
            (),
            _list_ldap_directory,
            ("ldapDirectory",),
            APICall.LIST,
            force_list=("ldapDirectory",),
            optional_params=("return_tags",),
        ),
        "getPhoneByUUID": OperationSpec(
            "getPhone",
            ("uuid",),
            _get_phone_by_uuid,
            ("phone",),
            optional_params=("return_tags",),
        ),
        "getPhoneByName": OperationSpec(
            "getPhone",
            ("name",),
            _get_phone_by_name,
            ("phone",),
            optional_params=("return_tags",),
        ),
        "getLine": OperationSpec(
            "getLine",
            ("pattern",),
            _get_line,
            ("line",),
            optional_params=("route_partition", "return_tags"),
        ),
        "getTransPattern": OperationSpec(
            "getTransPattern",
            ("uuid",),
            _get_trans_pattern,
            ("transPattern",),
            optional_params=("return_tags",),
        ),
        "updatePhoneByName": OperationSpec(
            "updatePhone",
            ("name",),
            _update_phone_by_name,
            action=APICall.UPDATE,
            optional_params=("fields",),
        ),
        "updatePhoneByUUID": OperationSpec(
            "updatePhone",
            ("uuid",),
            _update_phone_by_uuid,
            action=APICall.UPDATE,
            optional_params=("fields",),
        ),
        "updateLineByNumber": OperationSpec(
            "updateLine",
            ("pattern",),
            _update_line_by_number,
            action=APICall.UPDATE,
            optional_params=("route_partition", "fields"),
        ),
        "updateLineByUUID": OperationSpec(
            "updateLine",
            ("uuid",),
            _update_line_by_uuid,
            action=APICall.UPDATE,
            optional_params=("fields",),
        ),
        "doLdapSync": OperationSpec(
            "doLdapSync",
            ("uuid",),
            _do_ldap_sync,
            action=APICall.DO,
            optional_params=("sync",),
        ),
        "updateUserPin": OperationSpec(
            "updateUser",
            ("userid", "pin"),
            _update_user_pin,
            action=APICall.UPDATE,
        ),
    }
)


def get_operation(operation: str) -> OperationSpec:
    if (spec := CATALOG.get(operation)) is None:
        raise UnknownOperation(operation, CATALOG.keys())
    return spec
