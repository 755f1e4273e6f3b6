import functools
from typing import TypeVar, Any
from collections.abc import Callable

from shortener.dao.exceptions import DataStoreError


__all__ = []

F = TypeVar('F', bound=Callable[..., Any])


def handle_file_error[F](method: F) -> F:
    """Wrap file-writing DAO methods to handle I/O errors

    Args:
        method (Callable[..., Any]):
            DAO method performing file operations which may raise OSError.

    Returns:
        Callable[..., Any]:
            Wrapped method which raises DataStoreError on I/O failures.

    Example:
        >>> @handle_file_error
        ... def append(self, line):
        ...     self._file.write(line)
    """

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except OSError as e:
            raise DataStoreError(f"Can't write to file storage at {self.path}.") from e

    return wrapper
