"""Click parameter types shared by the commands."""

from __future__ import annotations

import re
from typing import Any, Optional

import click

from ..pneuma.executor import to_checksum_address

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")


class AddressParam(click.ParamType):
    name = "address"

    def convert(self, value: Any, param: Optional[click.Parameter], ctx: Optional[click.Context]) -> str:
        if not isinstance(value, str) or not _ADDRESS_RE.match(value):
            self.fail(f"{value!r} is not a 0x-prefixed 20-byte address", param, ctx)
        return to_checksum_address(value)


ADDRESS = AddressParam()
