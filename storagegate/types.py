"""Common annotated types for field validation.

These types provide consistent validation patterns across the gateway.
"""

from typing import Annotated

from pydantic import Field

# Object key - any non-empty string, slashes allowed
ObjectKey = Annotated[str, Field(min_length=1)]

# File name - non-empty, forward slashes are kept verbatim in the final key
FileName = Annotated[str, Field(min_length=1)]

# Target directory - may be empty, leading/trailing slashes are stripped later
TargetDir = str

# Local filesystem path
LocalPath = Annotated[str, Field(min_length=1)]
