import re
from typing import NewType

from .errors import InvalidAddressFormat

Address = NewType('Address', str)

ADDRESS_PATTERN = re.compile(r'^0x[a-fA-F0-9]{40}$')


def validate_address(value: str) -> Address:
    # fullmatch so a trailing newline is not accepted the way `$` would allow.
    if not isinstance(value, str) or not ADDRESS_PATTERN.fullmatch(value):
        raise InvalidAddressFormat(value)
    return Address(value)
