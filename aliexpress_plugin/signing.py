"""
Request signing for the AliExpress Open API.

The provider's "md5" sign method: sort parameter names, concatenate every
name with its value, wrap the result in the app secret on both sides and
take the upper-case MD5 hex digest.
"""

import hashlib
from typing import Any, Mapping


def stringify_param(value: Any) -> str:
    """Render a parameter value the way it is sent over the wire."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def sign(params: Mapping[str, Any], secret: str) -> str:
    """
    Compute the request signature.

    Args:
        params: Request parameters, excluding 'sign' itself
        secret: Shared app secret

    Returns:
        Upper-case hex MD5 digest
    """
    concatenated = "".join(
        f"{key}{stringify_param(params[key])}" for key in sorted(params)
    )
    sign_string = f"{secret}{concatenated}{secret}"
    return hashlib.md5(sign_string.encode("utf-8")).hexdigest().upper()
