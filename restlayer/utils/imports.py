from typing import Any

import importlib


def importstr(path: str) -> Any:
    """Import an object given as `package.module:Name` path.

    `Name` can be dotted to reach nested attributes, like `module:Class.attr`.
    """
    module_name, sep, name = path.partition(':')
    if not sep or not module_name or not name:
        raise ValueError(
            f"Expected a 'package.module:Name' python path, got {path!r}."
        )
    obj = importlib.import_module(module_name)
    for attr in name.split('.'):
        obj = getattr(obj, attr)
    return obj


def full_class_name(obj: Any) -> str:
    cls = obj if isinstance(obj, type) else type(obj)
    return f'{cls.__module__}.{cls.__name__}'
