import importlib

from key_tickler.backends.base import DecryptBackend
from key_tickler.errors import InvalidInput

# name -> (module, class). Modules are imported on demand so the device
# libraries are only loaded for the backend actually selected.
BACKENDS = {
    "python": ("key_tickler.backends.python_backend", "PythonBackend"),
    "threads": ("key_tickler.backends.python_backend", "ThreadedBackend"),
    "numpy": ("key_tickler.backends.numpy_backend", "NumpyBackend"),
    "opencl": ("key_tickler.backends.opencl_backend", "OpenCLBackend"),
}


def backend_names() -> list[str]:
    return list(BACKENDS)


def get_backend(name: str, **options) -> DecryptBackend:
    """Instantiate a backend by name."""
    try:
        module_name, class_name = BACKENDS[name]
    except KeyError:
        raise InvalidInput(f"Invalid backend: {name} (expected one of {', '.join(BACKENDS)})") from None
    module = importlib.import_module(module_name)
    return getattr(module, class_name)(**options)
