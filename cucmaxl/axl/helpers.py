from typing import Any, Callable, Mapping, TypeVar

TCallable = TypeVar("TCallable", bound=Callable)

SENSITIVE_PARAMS = ("pin", "password", "sshPwd")


"""Assigns an attribute to the func that denotes which catalog operation
it performs. The debug tools use it to list methods next to operations.
"""


def operation_tag(operation: str):
    def operation_tag_decorator(func: TCallable) -> TCallable:
        func.operation = operation
        return func

    return operation_tag_decorator


def loggable_params(params: Mapping[str, Any]) -> dict:
    """Copy of `params` fit for logging: secrets masked, None values dropped."""
    masked = {}
    for k, v in params.items():
        if v is None:
            continue
        if k in SENSITIVE_PARAMS:
            masked[k] = "****"
        elif k == "fields" and isinstance(v, Mapping):
            masked[k] = loggable_params(v)
        else:
            masked[k] = v
    return masked
