from typing import Any


# Type aliases for Python dictionaries
type ConfigDocument = dict[str, Any]
type URLRecordDict = dict[str, Any]
